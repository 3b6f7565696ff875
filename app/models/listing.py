"""
Listing model for rentable and sellable properties.
Holds listing details, the ordered image set, the author snapshot and likes.
"""

from sqlalchemy import String, Text, Integer, Float, Numeric, ForeignKey, Table, Column, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from decimal import Decimal
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.image import ListingImage
    from app.models.feedback import Comment, Review


# Composite primary key: an account likes a listing at most once
listing_likes = Table(
    "listing_likes",
    Base.metadata,
    Column("listing_id", Uuid(as_uuid=True), ForeignKey("listings.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Listing(Base):
    """
    Listing model for property listings.
    The first image (by position) is the cover; the author is captured at creation.
    """

    __tablename__ = "listings"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Listing title"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        comment="Asking price or rent"
    )

    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    beds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Free-text location"
    )

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Contact details shown on the listing page
    contact_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    contact_mobile: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    contact_email: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    rating: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0,
        comment="Mean review rating, 0 when unreviewed"
    )

    # Author snapshot, written once at creation
    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="ID of the account that created the listing"
    )

    author_username: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Author display name at creation time"
    )

    # Relationships
    images: Mapped[List["ListingImage"]] = relationship(
        "ListingImage",
        back_populates="listing",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ListingImage.position"
    )

    likes: Mapped[List["User"]] = relationship(
        "User",
        secondary=listing_likes,
        lazy="selectin",
    )

    # Dependents are removed explicitly by ListingService before the listing itself
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="listing",
        lazy="selectin",
        passive_deletes="all",
        order_by="Comment.created_at"
    )

    reviews: Mapped[List["Review"]] = relationship(
        "Review",
        back_populates="listing",
        lazy="selectin",
        passive_deletes="all",
        order_by="Review.created_at.desc()"
    )

    def __repr__(self) -> str:
        """String representation of the listing."""
        return f"<Listing(id={self.id}, name={self.name[:30]}, price={self.price})>"

    @property
    def image_paths(self) -> List[str]:
        return [image.file_path for image in self.images]

    @property
    def cover_image(self) -> Optional[str]:
        """The canonical cover reference, always the first image."""
        return self.images[0].file_path if self.images else None

    @property
    def like_ids(self) -> List[uuid.UUID]:
        return [user.id for user in self.likes]

    def is_liked_by(self, user_id: uuid.UUID) -> bool:
        return any(user.id == user_id for user in self.likes)

    def to_dict(self, include_details: bool = False) -> dict:
        """
        Convert listing to dictionary.

        Args:
            include_details: Whether to include comments, likers and reviews

        Returns:
            Dictionary representation of the listing
        """
        result = {
            "id": str(self.id),
            "name": self.name,
            "price": float(self.price),
            "image": self.cover_image,
            "images": self.image_paths,
            "bedrooms": self.bedrooms,
            "beds": self.beds,
            "bathrooms": self.bathrooms,
            "location": self.location,
            "description": self.description,
            "contact_name": self.contact_name,
            "contact_mobile": self.contact_mobile,
            "contact_email": self.contact_email,
            "rating": self.rating,
            "author": {
                "id": str(self.author_id) if self.author_id else None,
                "username": self.author_username,
            },
            "like_count": len(self.likes),
            "created_at": self.created_at.isoformat(),
        }

        if include_details:
            result["likes"] = [user.to_public_dict() for user in self.likes]
            result["comments"] = [comment.to_dict() for comment in self.comments]
            result["reviews"] = [review.to_dict() for review in self.reviews]

        return result


# Name/location lookups back the search endpoint
name_location_index = Index(
    "idx_listings_name_location",
    Listing.name,
    Listing.location,
)
