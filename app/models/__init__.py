"""
Database models for the RentEase API.
Includes User, Listing, ListingImage, Comment, Review and ContactMessage models.
"""

from app.models.user import User
from app.models.listing import Listing, listing_likes
from app.models.image import ListingImage
from app.models.feedback import Comment, Review
from app.models.contact import ContactMessage, ContactStatus

# Export all models for easy importing
__all__ = [
    "User",
    "Listing",
    "listing_likes",
    "ListingImage",
    "Comment",
    "Review",
    "ContactMessage",
    "ContactStatus",
]
