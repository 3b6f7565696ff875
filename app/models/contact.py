"""
ContactMessage model for contact form submissions from logged-in users.
"""

from sqlalchemy import String, Text, DateTime, ForeignKey, Index, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
from datetime import datetime
import enum
import uuid
from typing import Optional


class ContactStatus(str, enum.Enum):
    """Handling state of a contact message."""
    NEW = "new"
    READ = "read"
    REPLIED = "replied"
    RESOLVED = "resolved"


class ContactMessage(Base):
    """A message sent through the contact form, with a snapshot of its sender."""

    __tablename__ = "contact_messages"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    username: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    first_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    status: Mapped[ContactStatus] = mapped_column(
        SQLEnum(ContactStatus),
        nullable=False,
        default=ContactStatus.NEW,
        index=True
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "subject": self.subject,
            "message": self.message,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }


contact_created_index = Index(
    "idx_contact_messages_created",
    ContactMessage.created_at.desc(),
)
