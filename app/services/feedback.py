"""
Comment and review service.
Reviews are limited to one per account per listing and keep the listing rating current.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from app.models.feedback import Comment, Review
from app.models.user import User
from app.repositories.listing import ListingRepository
from app.repositories.feedback import CommentRepository, ReviewRepository
from app.schemas.feedback import CommentCreate, ReviewCreate
from app.services.access import AccessControl
from app.utils.exceptions import ListingNotFoundError, ConflictError, StorageError
import uuid
import logging

logger = logging.getLogger(__name__)


class FeedbackService:

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.comment_repo = CommentRepository(db_session)
        self.review_repo = ReviewRepository(db_session)

    async def _require_listing(self, listing_id: uuid.UUID) -> None:
        if not await self.listing_repo.exists(listing_id):
            raise ListingNotFoundError(str(listing_id))

    async def add_comment(self, listing_id: uuid.UUID, comment_data: CommentCreate, current_user: User) -> Comment:
        """
        Post a comment on a listing as the current user.

        Raises:
            UnauthorizedError: If there is no authenticated user
            ListingNotFoundError: If the listing doesn't exist
        """
        principal = AccessControl.require_authentication(current_user)
        await self._require_listing(listing_id)

        try:
            comment = await self.comment_repo.create({
                "listing_id": listing_id,
                "author_id": principal.id,
                "author_username": principal.username,
                "text": comment_data.text,
            })
        except SQLAlchemyError as e:
            logger.error(f"Failed to add comment to listing {listing_id}: {e}", exc_info=True)
            raise StorageError("Failed to add comment")

        logger.info(f"Comment {comment.id} added to listing {listing_id} by {comment.author_username}")
        return comment

    async def add_review(self, listing_id: uuid.UUID, review_data: ReviewCreate, current_user: User) -> Review:
        """
        Review a listing and recompute its rating as the mean of all reviews.

        Raises:
            UnauthorizedError: If there is no authenticated user
            ListingNotFoundError: If the listing doesn't exist
            ConflictError: If the user already reviewed this listing
        """
        principal = AccessControl.require_authentication(current_user)
        author_id = principal.id
        author_username = principal.username

        listing = await self.listing_repo.get_by_id(listing_id)
        if not listing:
            raise ListingNotFoundError(str(listing_id))

        if await self.review_repo.get_by_listing_and_author(listing_id, author_id):
            raise ConflictError("You have already reviewed this listing")

        review = Review(
            listing_id=listing_id,
            author_id=author_id,
            author_username=author_username,
            rating=review_data.rating,
            text=review_data.text,
        )

        try:
            self.db.add(review)
            await self.db.flush()
            listing.rating = await self.review_repo.average_rating(listing_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to add review to listing {listing_id}: {e}", exc_info=True)
            raise StorageError("Failed to add review")

        logger.info(f"Review {review.id} ({review.rating}/5) added to listing {listing_id}, rating now {listing.rating}")
        return review
