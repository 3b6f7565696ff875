"""
Pydantic schemas for contact form messages.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime


class ContactCreate(BaseModel):
    """Schema for submitting the contact form."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., description="Reply-to address")
    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1, max_length=5000)

    @field_validator('name', 'subject', 'message')
    @classmethod
    def validate_text(cls, v):
        """Trim and reject blank values."""
        if not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class ContactResponse(BaseModel):
    id: str
    name: str
    email: str
    subject: str
    message: str
    status: str
    created_at: datetime
