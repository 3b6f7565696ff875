"""
Contact message service.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from app.models.contact import ContactMessage, ContactStatus
from app.models.user import User
from app.schemas.contact import ContactCreate
from app.services.access import AccessControl
from app.utils.exceptions import StorageError
import logging

logger = logging.getLogger(__name__)


class ContactService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def create_message(self, contact_data: ContactCreate, current_user: User) -> ContactMessage:
        """
        Store a contact form message with a snapshot of its sender.

        Raises:
            UnauthorizedError: If there is no authenticated user
            StorageError: If the message cannot be stored
        """
        principal = AccessControl.require_authentication(current_user)
        sender_id = principal.id

        message = ContactMessage(
            name=contact_data.name.strip(),
            email=contact_data.email.lower().strip(),
            subject=contact_data.subject.strip(),
            message=contact_data.message.strip(),
            user_id=sender_id,
            username=principal.username,
            first_name=principal.first_name,
            last_name=principal.last_name,
            status=ContactStatus.NEW,
        )

        try:
            self.db.add(message)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to store contact message from {sender_id}: {e}", exc_info=True)
            raise StorageError("Failed to send your message")

        logger.info(f"Contact message {message.id} received from {message.username}")
        return message
