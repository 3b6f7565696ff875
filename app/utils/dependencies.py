"""
FastAPI dependency injection utilities for authentication, services and database sessions.
Provides reusable dependencies for route protection and user extraction.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.models.user import User
from app.services.access import AccessControl
from app.services.auth import AuthService
from app.services.contact import ContactService
from app.services.feedback import FeedbackService
from app.services.image import ImageService
from app.services.listing import ListingService
from app.services.mail import MailService
from app.services.recovery import RecoveryService
from app.services.search import ListingSearchService
from app.utils.exceptions import UnauthorizedError


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_mail_service() -> MailService:
    return MailService()


def get_image_service() -> ImageService:
    return ImageService()


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """
    Get authentication service instance.

    Args:
        db: Database session

    Returns:
        AuthService instance
    """
    return AuthService(db)


async def get_listing_service(
    db: AsyncSession = Depends(get_db),
    image_service: ImageService = Depends(get_image_service)
) -> ListingService:
    """
    Get listing service instance.

    Args:
        db: Database session
        image_service: Image storage used for listing uploads

    Returns:
        ListingService instance
    """
    return ListingService(db, image_service=image_service)


async def get_search_service(db: AsyncSession = Depends(get_db)) -> ListingSearchService:
    return ListingSearchService(db)


async def get_recovery_service(
    db: AsyncSession = Depends(get_db),
    mail_service: MailService = Depends(get_mail_service)
) -> RecoveryService:
    return RecoveryService(db, mail_service=mail_service)


async def get_feedback_service(db: AsyncSession = Depends(get_db)) -> FeedbackService:
    return FeedbackService(db)


async def get_contact_service(db: AsyncSession = Depends(get_db)) -> ContactService:
    return ContactService(db)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from JWT token.

    Args:
        credentials: HTTP Bearer credentials
        auth_service: Authentication service

    Returns:
        Current User object

    Raises:
        UnauthorizedError: If no token provided or token is invalid
        TokenExpiredError: If token is expired
        InactiveUserError: If user account is inactive
    """
    if not credentials:
        raise UnauthorizedError("You need to be logged in to do that")

    return await auth_service.get_current_user(credentials.credentials)


async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current active user (additional check for user status).

    Raises:
        InactiveUserError: If user account is inactive
    """
    return AccessControl.require_authentication(current_user)
