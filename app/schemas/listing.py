"""
Pydantic schemas for listing requests and responses.
Handles listing create/update payloads and the list, detail and profile views.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from app.schemas.user import PublicUserResponse
from app.schemas.feedback import CommentResponse, ReviewResponse, FeedbackAuthor


class ListingBase(BaseModel):
    """Listing fields shared by create payloads."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Listing title",
        examples=["Sunny two-bedroom flat"]
    )

    price: Decimal = Field(
        ...,
        ge=0,
        description="Asking price or rent",
        examples=[1200]
    )

    bedrooms: int = Field(0, ge=0, le=50, description="Number of bedrooms")
    beds: int = Field(0, ge=0, le=100, description="Number of beds")
    bathrooms: int = Field(0, ge=0, le=50, description="Number of bathrooms")

    location: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Free-text location",
        examples=["Lisbon, Portugal"]
    )

    description: str = Field("", max_length=5000, description="Detailed description")

    contact_name: str = Field("", max_length=255)
    contact_mobile: str = Field("", max_length=50)
    contact_email: str = Field("", max_length=255)

    @field_validator('name', 'location')
    @classmethod
    def validate_required_text(cls, v):
        """Trim and reject blank values."""
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator('description', 'contact_name', 'contact_mobile', 'contact_email')
    @classmethod
    def strip_optional_text(cls, v):
        return v.strip()


class ListingCreate(ListingBase):
    """Schema for creating a listing; images are sent alongside as files."""


class ListingUpdate(BaseModel):
    """
    Schema for updating a listing.
    Fields left as None keep their stored value.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0, le=50)
    beds: Optional[int] = Field(None, ge=0, le=100)
    bathrooms: Optional[int] = Field(None, ge=0, le=50)
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    contact_name: Optional[str] = Field(None, max_length=255)
    contact_mobile: Optional[str] = Field(None, max_length=50)
    contact_email: Optional[str] = Field(None, max_length=255)

    @field_validator('name', 'location')
    @classmethod
    def validate_required_text(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator('description', 'contact_name', 'contact_mobile', 'contact_email')
    @classmethod
    def strip_optional_text(cls, v):
        return v.strip() if v is not None else v


class ListingResponse(BaseModel):
    """Listing as shown in the index and on profiles."""

    id: str
    name: str
    price: float
    image: Optional[str] = Field(None, description="Cover image reference, the first of images")
    images: List[str] = Field(default_factory=list)
    bedrooms: int
    beds: int
    bathrooms: int
    location: str
    description: str
    contact_name: str
    contact_mobile: str
    contact_email: str
    rating: float
    author: FeedbackAuthor
    like_count: int
    created_at: datetime


class ListingDetailResponse(ListingResponse):
    """Listing with its likers, comments and reviews (newest first)."""

    likes: List[PublicUserResponse] = Field(default_factory=list)
    comments: List[CommentResponse] = Field(default_factory=list)
    reviews: List[ReviewResponse] = Field(default_factory=list)


class ListingListResponse(BaseModel):
    """One page of the listing index."""

    listings: List[ListingResponse]
    page: int = Field(..., description="Current page number")
    page_size: int = Field(..., description="Number of listings per page")
    total: int = Field(..., description="Total number of matching listings")
    total_pages: int = Field(..., description="Number of pages")
    has_next: bool
    has_previous: bool
    search: Optional[str] = Field(None, description="Search term the page was filtered by")
    no_results: bool = Field(False, description="True when a search matched nothing")
    message: Optional[str] = None


class UserProfileResponse(BaseModel):
    """An account's public profile with the listings it created."""

    user: PublicUserResponse
    listings: List[ListingResponse] = Field(default_factory=list)
    total: int = Field(..., description="Number of listings created by the account")
