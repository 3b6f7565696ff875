"""
Listing repository for listing persistence, detail loading and text search.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, func, asc
from sqlalchemy.orm import selectinload
from app.repositories.base import BaseRepository
from app.models.listing import Listing
from app.models.feedback import Comment, Review
from typing import Optional, List, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def escape_like(raw: str) -> str:
    """
    Escape LIKE wildcards so user text is matched literally.

    Every other character, including regex metacharacters such as '.' or '*',
    is already literal inside a LIKE pattern.
    """
    return (
        raw.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


class ListingRepository(BaseRepository[Listing]):
    """
    Repository for listings.
    Natural storage order is creation time, with the id as tie-breaker.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    def _detail_options(self):
        return (
            selectinload(Listing.images),
            selectinload(Listing.likes),
            selectinload(Listing.comments),
            selectinload(Listing.reviews),
        )

    async def get_listing_with_details(self, listing_id: uuid.UUID) -> Optional[Listing]:
        """
        Get a listing with images, likers, comments and reviews loaded fresh.

        populate_existing makes an instance already in the session pick up
        rows written since it was loaded.
        """
        query = (
            select(Listing)
            .options(*self._detail_options())
            .where(Listing.id == listing_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        listing = result.scalar_one_or_none()

        if listing:
            logger.debug(f"Retrieved listing with details: {listing_id}")

        return listing

    def _search_condition(self, search_text: Optional[str]):
        if not search_text:
            return None
        pattern = f"%{escape_like(search_text)}%"
        return or_(
            Listing.name.ilike(pattern, escape=LIKE_ESCAPE),
            Listing.location.ilike(pattern, escape=LIKE_ESCAPE),
        )

    async def search_listings(
        self,
        search_text: Optional[str] = None,
        skip: int = 0,
        limit: int = 8,
    ) -> Tuple[List[Listing], int]:
        """
        Window of listings whose name or location contains the search text.

        Args:
            search_text: Raw user text; matched literally and case-insensitively
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return

        Returns:
            Tuple of (listings in storage order, total matching count)
        """
        query = select(Listing).options(
            selectinload(Listing.images),
            selectinload(Listing.likes),
        )
        count_query = select(func.count(Listing.id))

        condition = self._search_condition(search_text)
        if condition is not None:
            query = query.where(condition)
            count_query = count_query.where(condition)

        count_result = await self.db.execute(count_query)
        total_count = count_result.scalar() or 0

        query = query.order_by(asc(Listing.created_at), asc(Listing.id)).offset(skip).limit(limit)
        result = await self.db.execute(query)
        listings = list(result.scalars().all())

        logger.debug(f"Listing search returned {len(listings)} of {total_count} total results")
        return listings, total_count

    async def get_listings_by_author(self, author_id: uuid.UUID) -> List[Listing]:
        query = (
            select(Listing)
            .options(selectinload(Listing.images), selectinload(Listing.likes))
            .where(Listing.author_id == author_id)
            .order_by(asc(Listing.created_at), asc(Listing.id))
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_comment_ids(self, listing_id: uuid.UUID) -> List[uuid.UUID]:
        result = await self.db.execute(select(Comment.id).where(Comment.listing_id == listing_id))
        return list(result.scalars().all())

    async def get_review_ids(self, listing_id: uuid.UUID) -> List[uuid.UUID]:
        result = await self.db.execute(select(Review.id).where(Review.listing_id == listing_id))
        return list(result.scalars().all())

    async def delete_listing_pending(self, listing: Listing) -> None:
        """
        Delete the listing row with its images and likes, without committing.
        """
        await self.db.delete(listing)
        await self.db.flush()
