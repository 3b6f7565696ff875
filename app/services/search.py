"""
Listing search and pagination.
Turns an optional free-text query and a page number into a bounded window of listings.
"""

from dataclasses import dataclass
from typing import Any, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
import math
import logging

from app.config import get_settings
from app.models.listing import Listing
from app.repositories.listing import ListingRepository

settings = get_settings()
logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No listings match that search, please try again."


def normalize_page(raw: Any) -> int:
    """Return the page as a positive int, falling back to 1 for anything else."""
    if isinstance(raw, bool):
        return 1
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return 1
    return page if page >= 1 else 1


def normalize_query(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped or None


@dataclass
class SearchPage:
    """One window of listings plus the data needed to render pagination."""

    listings: List[Listing]
    page: int
    page_size: int
    total: int
    total_pages: int
    search_term: Optional[str] = None

    @property
    def no_results(self) -> bool:
        """A query matched nothing; an empty result, not a failure."""
        return self.search_term is not None and self.total == 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


class ListingSearchService:
    """Paginated listing index with optional name/location search."""

    def __init__(self, db_session: AsyncSession, page_size: Optional[int] = None):
        self.listing_repo = ListingRepository(db_session)
        self.page_size = page_size or settings.listings_page_size

    async def search(self, query: Optional[str] = None, page: Any = 1) -> SearchPage:
        """
        Return one page of listings, optionally filtered by a search term.

        Args:
            query: Raw search text matched literally against name or location
            page: Requested page; absent or invalid values mean page 1

        Returns:
            SearchPage with the window and total page count
        """
        page_number = normalize_page(page)
        search_term = normalize_query(query)
        skip = self.page_size * (page_number - 1)

        listings, total = await self.listing_repo.search_listings(
            search_text=search_term,
            skip=skip,
            limit=self.page_size,
        )

        result = SearchPage(
            listings=listings,
            page=page_number,
            page_size=self.page_size,
            total=total,
            total_pages=math.ceil(total / self.page_size),
            search_term=search_term,
        )

        if result.no_results:
            logger.info(f"Search for '{search_term}' page {page_number} returned no listings")

        return result
