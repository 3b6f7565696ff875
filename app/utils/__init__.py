"""
Utility modules for the RentEase API.
"""

from .auth import (
    create_access_token,
    create_refresh_token,
    verify_token,
    TokenPayload
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    AuthorizationError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    StorageError,
    InvalidOrExpiredTokenError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    InactiveUserError,
    ListingNotFoundError,
    ListingOwnershipError,
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_access_token",
    "create_refresh_token",
    "verify_token",
    "TokenPayload",

    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "AuthorizationError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "StorageError",
    "InvalidOrExpiredTokenError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "InactiveUserError",
    "ListingNotFoundError",
    "ListingOwnershipError",
]
