"""
Comment and Review models attached to listings.
Both are removed by the listing delete cascade before the listing itself.
"""

from sqlalchemy import String, Text, Integer, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.listing import Listing


class Comment(Base):
    """A free-text comment on a listing."""

    __tablename__ = "comments"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("listings.id"),
        nullable=False,
        index=True
    )

    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    author_username: Mapped[str] = mapped_column(String(64), nullable=False)

    text: Mapped[str] = mapped_column(Text, nullable=False)

    listing: Mapped["Listing"] = relationship("Listing", back_populates="comments")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "text": self.text,
            "author": {
                "id": str(self.author_id) if self.author_id else None,
                "username": self.author_username,
            },
            "created_at": self.created_at.isoformat(),
        }


class Review(Base):
    """A rated review of a listing; one per account per listing."""

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("listing_id", "author_id", name="uq_reviews_listing_author"),
    )

    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("listings.id"),
        nullable=False,
        index=True
    )

    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    author_username: Mapped[str] = mapped_column(String(64), nullable=False)

    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Star rating from 1 to 5"
    )

    text: Mapped[str] = mapped_column(Text, nullable=False, default="")

    listing: Mapped["Listing"] = relationship("Listing", back_populates="reviews")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "rating": self.rating,
            "text": self.text,
            "author": {
                "id": str(self.author_id) if self.author_id else None,
                "username": self.author_username,
            },
            "created_at": self.created_at.isoformat(),
        }
