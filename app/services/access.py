"""
Access control checks run before any guarded operation starts.
"""

from typing import Optional
from app.models.user import User
from app.models.listing import Listing
from app.utils.exceptions import UnauthorizedError, InactiveUserError, ListingOwnershipError


class AccessControl:
    """
    Capability checks over (principal, resource).
    Each check either returns or raises; none of them touch storage.
    """

    @staticmethod
    def require_authentication(principal: Optional[User]) -> User:
        """
        Require an authenticated, active principal.

        Raises:
            UnauthorizedError: If there is no principal
            InactiveUserError: If the principal's account is disabled
        """
        if principal is None:
            raise UnauthorizedError("You need to be logged in to do that")
        if not principal.is_active:
            raise InactiveUserError()
        return principal

    @staticmethod
    def is_owner(principal: Optional[User], listing: Listing) -> bool:
        return (
            principal is not None
            and listing.author_id is not None
            and listing.author_id == principal.id
        )

    @classmethod
    def require_ownership(cls, principal: Optional[User], listing: Listing, action: str = "modify") -> User:
        """
        Require that the principal authored the listing.

        Raises:
            UnauthorizedError: If there is no principal
            ListingOwnershipError: If the principal is not the listing's author
        """
        principal = cls.require_authentication(principal)
        if not cls.is_owner(principal, listing):
            raise ListingOwnershipError(action)
        return principal
