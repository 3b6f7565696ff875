"""
Repository layer for database operations.
"""

from .base import BaseRepository
from .user import UserRepository
from .listing import ListingRepository
from .feedback import CommentRepository, ReviewRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ListingRepository",
    "CommentRepository",
    "ReviewRepository",
]
