"""
ListingImage model for stored listing photos.
Keeps the stored reference path and its position in the listing's image order.
"""

from sqlalchemy import String, Integer, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.listing import Listing


class ListingImage(Base):
    """
    One stored image of a listing.
    Position 0 is the listing's cover image.
    """

    __tablename__ = "listing_images"

    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("listings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the listing this image belongs to"
    )

    filename: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Original filename of the uploaded image"
    )

    file_path: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Public reference path of the stored file"
    )

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Order of the image within the listing; 0 is the cover"
    )

    listing: Mapped["Listing"] = relationship(
        "Listing",
        back_populates="images"
    )

    def __repr__(self) -> str:
        return f"<ListingImage(id={self.id}, listing_id={self.listing_id}, position={self.position})>"


listing_position_index = Index(
    "idx_listing_images_listing_position",
    ListingImage.listing_id,
    ListingImage.position,
)
