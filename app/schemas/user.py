"""
Pydantic schemas for account requests and responses.
Handles registration input and the public/private views of an account.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
import re

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class RegisterRequest(BaseModel):
    """Schema for creating a new account."""

    username: str = Field(
        ...,
        min_length=3,
        max_length=64,
        description="Public display name, letters, digits, '.', '_' or '-'",
        examples=["jdoe"]
    )

    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["jdoe@example.com"]
    )

    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="User's password (minimum 8 characters)"
    )

    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    avatar: Optional[str] = Field(None, max_length=500, description="Avatar image URL")

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        """Trim and check the allowed characters."""
        v = v.strip()
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username may only contain letters, digits, '.', '_' and '-'")
        return v

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()

    @field_validator('first_name', 'last_name')
    @classmethod
    def strip_names(cls, v):
        if v is None:
            return v
        return v.strip() or None


class PublicUserResponse(BaseModel):
    """Identity fields shown next to listings, likes and comments."""

    id: str
    username: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None


class UserResponse(PublicUserResponse):
    """User response schema (excluding sensitive data)."""

    email: str = Field(..., description="User's email address")
    is_active: bool = Field(..., description="Whether the user account is active")
    created_at: datetime = Field(..., description="Account creation timestamp")

