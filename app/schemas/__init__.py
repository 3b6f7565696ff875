"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import (
    LoginRequest,
    RefreshTokenRequest,
    AccessTokenResponse,
    TokenResponse,
    LoginResponse,
)

# User schemas
from .user import (
    RegisterRequest,
    PublicUserResponse,
    UserResponse,
)

# Listing schemas
from .listing import (
    ListingBase,
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    ListingDetailResponse,
    ListingListResponse,
    UserProfileResponse,
)

# Comment and review schemas
from .feedback import (
    CommentCreate,
    CommentResponse,
    ReviewCreate,
    ReviewResponse,
)

# Recovery and contact schemas
from .recovery import (
    ForgotPasswordRequest,
    ResetPasswordRequest,
    MessageResponse,
    ResetTokenStatusResponse,
)
from .contact import ContactCreate, ContactResponse

__all__ = [
    # Authentication
    "LoginRequest",
    "RefreshTokenRequest",
    "AccessTokenResponse",
    "TokenResponse",
    "LoginResponse",

    # User
    "RegisterRequest",
    "PublicUserResponse",
    "UserResponse",

    # Listing
    "ListingBase",
    "ListingCreate",
    "ListingUpdate",
    "ListingResponse",
    "ListingDetailResponse",
    "ListingListResponse",
    "UserProfileResponse",

    # Feedback
    "CommentCreate",
    "CommentResponse",
    "ReviewCreate",
    "ReviewResponse",

    # Recovery and contact
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "MessageResponse",
    "ResetTokenStatusResponse",
    "ContactCreate",
    "ContactResponse",
]
