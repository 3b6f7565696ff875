"""
API route handlers for the RentEase API.
Provides organized routing for different API endpoints.
"""

from .auth import router as auth_router
from .contact import router as contact_router
from .listings import router as listings_router
from .recovery import router as recovery_router
from .users import router as users_router

__all__ = [
    "auth_router",
    "contact_router",
    "listings_router",
    "recovery_router",
    "users_router",
]
