"""
Authentication service for registration, login and token management.
Handles JWT token generation, validation and the username/password login flow.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from app.repositories.user import UserRepository
from app.models.user import User
from app.schemas.user import RegisterRequest
from app.utils.auth import (
    create_access_token,
    create_refresh_token,
    verify_token,
)
from app.utils.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    NotFoundError,
    ValidationError,
    DuplicateResourceError,
    StorageError,
)
from jose import JWTError
from jose.exceptions import ExpiredSignatureError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing accounts and their tokens.
    Handles registration, login, token refresh and principal resolution.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def register(self, user_data: RegisterRequest) -> User:
        """
        Create a new account.

        Args:
            user_data: Registration data

        Returns:
            Created user instance

        Raises:
            DuplicateResourceError: If the username or email is taken
            ValidationError: If the email or password is rejected
        """
        if await self.user_repo.get_by_username(user_data.username):
            raise DuplicateResourceError("User", user_data.username)
        if await self.user_repo.get_by_email(user_data.email):
            raise DuplicateResourceError("User", user_data.email)

        try:
            user = await self.user_repo.create_user(user_data.model_dump())
        except ValueError as e:
            raise ValidationError(str(e))
        except SQLAlchemyError as e:
            logger.error(f"Failed to register {user_data.username}: {e}", exc_info=True)
            raise StorageError("Failed to create account")

        logger.info(f"User registered: {user.username} (ID: {user.id})")
        return user

    async def authenticate_user(self, username: str, password: str) -> User:
        """
        Authenticate user with username and password.

        Raises:
            InvalidCredentialsError: If credentials are invalid
            InactiveUserError: If user account is inactive
        """
        if not username or not password:
            raise InvalidCredentialsError()

        user = await self.user_repo.get_by_username(username)

        if not user or not user.verify_password(password):
            logger.warning(f"Failed authentication attempt for username: {username}")
            raise InvalidCredentialsError()

        if not user.is_active:
            raise InactiveUserError()

        logger.info(f"User authenticated successfully: {user.username}")
        return user

    def create_tokens(self, user: User) -> Tuple[str, str]:
        """
        Create access and refresh tokens for user.

        Returns:
            Tuple of (access_token, refresh_token)
        """
        access_token = create_access_token(user_id=user.id, username=user.username)
        refresh_token = create_refresh_token(user_id=user.id, username=user.username)
        return access_token, refresh_token

    async def login(self, username: str, password: str) -> Tuple[User, str, str]:
        """
        Authenticate user and create tokens.

        Returns:
            Tuple of (user, access_token, refresh_token)
        """
        user = await self.authenticate_user(username, password)
        access_token, refresh_token = self.create_tokens(user)
        return user, access_token, refresh_token

    async def _resolve_token(self, token: str, token_type: str) -> User:
        try:
            token_payload = verify_token(token, token_type=token_type)
            user_id = uuid.UUID(token_payload.user_id)
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            raise InvalidTokenError(str(e))
        except ValueError:
            raise InvalidTokenError("Invalid token subject")

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise InvalidTokenError("Token subject no longer exists")
        if not user.is_active:
            raise InactiveUserError()
        return user

    async def refresh_access_token(self, refresh_token: str) -> str:
        """
        Create new access token from refresh token.

        Raises:
            InvalidTokenError: If refresh token is invalid
            TokenExpiredError: If refresh token is expired
            InactiveUserError: If user account is inactive
        """
        user = await self._resolve_token(refresh_token, "refresh")
        return create_access_token(user_id=user.id, username=user.username)

    async def get_current_user(self, token: str) -> User:
        """
        Get current user from access token.

        Raises:
            InvalidTokenError: If token is invalid
            TokenExpiredError: If token is expired
            InactiveUserError: If user account is inactive
        """
        return await self._resolve_token(token, "access")

    async def get_user_by_id(self, user_id: uuid.UUID) -> User:
        """
        Get user by ID.

        Raises:
            NotFoundError: If user not found
        """
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", str(user_id))
        return user
