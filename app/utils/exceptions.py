"""
Custom exception classes for the RentEase API.
Provides structured error handling with appropriate HTTP status codes.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """Base API exception class."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class ValidationError(APIException):
    """Malformed or missing input, e.g. no images or a disallowed file extension."""

    def __init__(
        self,
        detail: str,
        field_errors: Optional[List[Dict[str, str]]] = None
    ):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            error_code="VALIDATION_ERROR"
        )
        self.field_errors = field_errors or []


class NotFoundError(APIException):
    """Resource not found exception."""

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        detail = f"{resource} not found"
        if resource_id:
            detail += f" with ID: {resource_id}"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code="NOT_FOUND"
        )


class AuthorizationError(APIException):
    """The acting principal lacks a capability the operation requires."""

    def __init__(
        self,
        detail: str = "You don't have permission to do that",
        status_code: int = status.HTTP_403_FORBIDDEN,
        error_code: str = "FORBIDDEN",
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            status_code=status_code,
            detail=detail,
            error_code=error_code,
            headers=headers
        )


class UnauthorizedError(AuthorizationError):
    """Authentication required exception."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="UNAUTHORIZED",
            headers={"WWW-Authenticate": "Bearer"}
        )


class ForbiddenError(AuthorizationError):
    """Access forbidden exception."""

    def __init__(self, detail: str = "Access forbidden"):
        super().__init__(detail=detail)


class ConflictError(APIException):
    """Resource conflict exception."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT"
        )


class StorageError(APIException):
    """
    Underlying persistence or file storage failure.
    The detail shown to clients is generic; the cause is logged where it is raised.
    """

    def __init__(self, detail: str = "Storage is temporarily unavailable, please try again later"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
            error_code="STORAGE_ERROR"
        )


class InvalidOrExpiredTokenError(APIException):
    """Password reset token is unknown, already used or past its expiry."""

    def __init__(self, detail: str = "Password reset token is invalid or has expired."):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="INVALID_OR_EXPIRED_TOKEN"
        )


# Authentication specific exceptions
class InvalidCredentialsError(UnauthorizedError):
    """Invalid login credentials exception."""

    def __init__(self, detail: str = "Invalid username or password"):
        super().__init__(detail)


class TokenExpiredError(UnauthorizedError):
    """JWT token expired exception."""

    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail)


class InvalidTokenError(UnauthorizedError):
    """Invalid JWT token exception."""

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


class InactiveUserError(ForbiddenError):
    """Inactive user account exception."""

    def __init__(self, detail: str = "User account is inactive"):
        super().__init__(detail)


# Listing specific exceptions
class ListingNotFoundError(NotFoundError):
    """Listing not found exception."""

    def __init__(self, listing_id: str):
        super().__init__("Listing", listing_id)


class ListingOwnershipError(AuthorizationError):
    """Listing ownership violation exception."""

    def __init__(self, action: str = "modify"):
        super().__init__(f"You don't have permission to {action} this listing")


class DuplicateResourceError(ConflictError):
    """Duplicate resource exception."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} with identifier '{identifier}' already exists")


# File upload exceptions
class UnsupportedFileTypeError(ValidationError):
    """Unsupported file type exception."""

    def __init__(self, filename: str, supported_extensions: List[str]):
        supported = ", ".join(supported_extensions)
        super().__init__(f"Only image files are allowed! '{filename}' is not one of: {supported}")


class FileSizeExceededError(ValidationError):
    """File size exceeded exception."""

    def __init__(self, filename: str, max_size: int):
        max_mb = max_size / (1024 * 1024)
        super().__init__(f"File '{filename}' exceeds maximum allowed size of {max_mb:.1f}MB")
