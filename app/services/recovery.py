"""
Password recovery service.
Issues, validates and redeems single-use, expiring reset tokens stored on the account.
"""

from datetime import timedelta
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import secrets
import logging

from app.config import get_settings
from app.database import utc_now
from app.models.user import User, MIN_PASSWORD_LENGTH
from app.repositories.user import UserRepository
from app.services.mail import MailService
from app.utils.exceptions import InvalidOrExpiredTokenError, ValidationError, StorageError

settings = get_settings()
logger = logging.getLogger(__name__)

TOKEN_BYTES = 20


class RecoveryService:
    """
    Reset token lifecycle: NoActiveToken -> TokenIssued -> Consumed or Expired.

    A token is matched only together with an expiry in the future, and it is
    cleared on the first redemption attempt that gets past validation.
    """

    def __init__(
        self,
        db_session: AsyncSession,
        mail_service: Optional[MailService] = None,
        token_ttl_seconds: Optional[int] = None
    ):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.mail_service = mail_service or MailService()
        self.token_ttl = timedelta(seconds=token_ttl_seconds or settings.recovery_token_ttl_seconds)

    def reset_link(self, token: str) -> str:
        return f"{settings.password_reset_url.rstrip('/')}/{token}"

    async def _commit(self, action: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to {action}: {e}", exc_info=True)
            raise StorageError()

    async def issue(self, email: str) -> Optional[str]:
        """
        Issue a reset token for the account with this email and mail the link.

        A previous token of the account is overwritten. An unknown email is
        not an error: it returns None so callers can answer the same way
        whether or not the account exists.

        Returns:
            The new token, or None if no account has this email
        """
        user = await self.user_repo.get_by_email(email)
        if user is None:
            logger.warning("Password reset requested for an email with no account")
            return None

        token = secrets.token_hex(TOKEN_BYTES)
        user.reset_password_token = token
        user.reset_password_expires = utc_now() + self.token_ttl
        await self._commit(f"issue reset token for user {user.id}")

        logger.info(f"Password reset token issued for user {user.id}")

        body = (
            "You are receiving this because you (or someone else) have requested "
            "the reset of the password for your account.\n\n"
            "Please click on the following link, or paste this into your browser "
            "to complete the process:\n\n"
            f"{self.reset_link(token)}\n\n"
            "If you did not request this, please ignore this email and your "
            "password will remain unchanged.\n"
        )
        if not await self.mail_service.send(user.email, f"{settings.app_name} Password Reset", body):
            logger.warning(f"Reset link for user {user.id} was not delivered")

        return token

    async def validate(self, token: str) -> User:
        """
        Return the account holding this token if it has not expired.

        Raises:
            InvalidOrExpiredTokenError: If no account holds an unexpired match
        """
        if not token:
            raise InvalidOrExpiredTokenError()

        user = await self.user_repo.get_by_valid_recovery_token(token, utc_now())
        if user is None:
            logger.warning("Rejected an invalid or expired password reset token")
            raise InvalidOrExpiredTokenError()
        return user

    async def consume(self, token: str, new_password: str, confirm: str) -> User:
        """
        Redeem a token: set the new password and clear the token.

        Once validation passes the token is cleared even if setting the
        password fails. The confirmation mail is sent afterwards and its
        failure does not undo the reset.

        Raises:
            ValidationError: If the passwords differ or are too short; the token is kept
            InvalidOrExpiredTokenError: If the token is unknown, used or expired
            StorageError: If the change cannot be persisted
        """
        if new_password != confirm:
            raise ValidationError("Passwords do not match.")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

        user = await self.validate(token)

        try:
            user.set_password(new_password)
        finally:
            user.clear_recovery_token()
            await self._commit(f"redeem reset token for user {user.id}")

        logger.info(f"Password reset completed for user {user.id}")

        body = (
            "Hello,\n\n"
            f"This is a confirmation that the password for your account {user.email} "
            "has just been changed.\n"
        )
        if not await self.mail_service.send(user.email, "Your password has been changed", body):
            logger.warning(f"Password change confirmation for user {user.id} was not delivered")

        return user
