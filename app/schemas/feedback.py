"""
Pydantic schemas for listing comments and reviews.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


class CommentCreate(BaseModel):
    """Schema for posting a comment on a listing."""

    text: str = Field(..., min_length=1, max_length=2000, description="Comment text")

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        if not v.strip():
            raise ValueError("Comment cannot be empty")
        return v.strip()


class ReviewCreate(BaseModel):
    """Schema for reviewing a listing."""

    rating: int = Field(..., ge=1, le=5, description="Star rating from 1 to 5")
    text: str = Field("", max_length=2000, description="Review text")

    @field_validator('text')
    @classmethod
    def strip_text(cls, v):
        return v.strip()


class FeedbackAuthor(BaseModel):
    id: Optional[str] = None
    username: str


class CommentResponse(BaseModel):
    id: str
    text: str
    author: FeedbackAuthor
    created_at: datetime


class ReviewResponse(BaseModel):
    id: str
    rating: int
    text: str
    author: FeedbackAuthor
    created_at: datetime
