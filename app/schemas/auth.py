"""
Pydantic schemas for authentication requests and responses.
Handles login, token refresh, and the authenticated account view.
"""

from pydantic import BaseModel, Field, field_validator
from app.schemas.user import UserResponse


class LoginRequest(BaseModel):
    """Login request schema."""

    username: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Account username",
        examples=["jdoe"]
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Account password"
    )

    @field_validator('username')
    @classmethod
    def strip_username(cls, v):
        return v.strip()


class RefreshTokenRequest(BaseModel):
    """Refresh token request schema."""

    refresh_token: str = Field(..., description="Valid refresh token")


class AccessTokenResponse(BaseModel):
    """Access token response schema."""

    access_token: str = Field(..., description="New JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token expiration time in seconds")


class TokenResponse(AccessTokenResponse):
    """Access and refresh token pair."""

    refresh_token: str = Field(..., description="JWT refresh token")


class LoginResponse(TokenResponse):
    """Complete login response schema."""

    user: UserResponse = Field(..., description="Authenticated user information")
