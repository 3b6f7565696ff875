"""
Comment and review repositories.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.repositories.base import BaseRepository
from app.models.feedback import Comment, Review
from typing import Optional
import uuid


class CommentRepository(BaseRepository[Comment]):

    def __init__(self, db: AsyncSession):
        super().__init__(Comment, db)


class ReviewRepository(BaseRepository[Review]):

    def __init__(self, db: AsyncSession):
        super().__init__(Review, db)

    async def get_by_listing_and_author(self, listing_id: uuid.UUID, author_id: uuid.UUID) -> Optional[Review]:
        query = select(Review).where(Review.listing_id == listing_id, Review.author_id == author_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def average_rating(self, listing_id: uuid.UUID) -> float:
        """Mean rating of a listing's reviews, 0 when it has none."""
        result = await self.db.execute(
            select(func.avg(Review.rating)).where(Review.listing_id == listing_id)
        )
        average = result.scalar()
        return round(float(average), 2) if average is not None else 0.0
