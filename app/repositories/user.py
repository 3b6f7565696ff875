"""
User repository for account management and recovery token lookups.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from app.repositories.base import BaseRepository
from app.models.user import User
from datetime import datetime
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management.
    Handles account creation with password hashing and the recovery token query.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: username, email, password
                      Optional: first_name, last_name, avatar, is_active

        Returns:
            Created user instance

        Raises:
            ValueError: If validation fails or the username/email is taken
        """
        data = dict(user_data)
        email = User.validate_email_format(data["email"])
        username = data["username"].strip()

        existing_user = await self.get_by_username_or_email(username, email)
        if existing_user:
            taken = "username" if existing_user.username == username else "email"
            raise ValueError(f"A user with that {taken} is already registered")

        password = data.pop("password")
        create_data = {
            **data,
            "username": username,
            "email": email,
            "hashed_password": User.hash_password(password),
            "is_active": data.get("is_active", True),
        }

        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.username} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)."""
        normalized_email = email.lower().strip()
        result = await self.db.execute(select(User).where(User.email == normalized_email))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username.strip()))
        return result.scalar_one_or_none()

    async def get_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        query = select(User).where(or_(User.username == username, User.email == email.lower().strip()))
        result = await self.db.execute(query)
        return result.scalars().first()

    async def get_by_valid_recovery_token(self, token: str, now: datetime) -> Optional[User]:
        """
        Find the account holding this reset token with an expiry after `now`.

        Both predicates are in one query so an expired token is never matched,
        even before it has been cleared.
        """
        query = select(User).where(
            User.reset_password_token == token,
            User.reset_password_expires > now,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
