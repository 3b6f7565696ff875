"""
Service layer for business logic implementation.
Contains services for accounts, listings, search, recovery, feedback, contact and error handling.
"""

from .access import AccessControl
from .auth import AuthService
from .contact import ContactService
from .error_handler import ErrorHandlerService
from .feedback import FeedbackService
from .image import ImageService
from .listing import ListingService
from .mail import MailService
from .recovery import RecoveryService
from .search import ListingSearchService, SearchPage

__all__ = [
    "AccessControl",
    "AuthService",
    "ContactService",
    "ErrorHandlerService",
    "FeedbackService",
    "ImageService",
    "ListingService",
    "MailService",
    "RecoveryService",
    "ListingSearchService",
    "SearchPage",
]
