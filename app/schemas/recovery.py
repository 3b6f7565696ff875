"""
Pydantic schemas for the password recovery flow.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator


class ForgotPasswordRequest(BaseModel):
    """Request a reset link for the account with this email."""

    email: EmailStr = Field(..., description="Email address of the account")

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()


class ResetPasswordRequest(BaseModel):
    """New password and its confirmation; compared by the recovery service."""

    password: str = Field(..., min_length=1, max_length=128)
    confirm: str = Field(..., min_length=1, max_length=128)


class MessageResponse(BaseModel):
    message: str


class ResetTokenStatusResponse(BaseModel):
    """A reset token that is currently redeemable."""

    valid: bool = True
    token: str
