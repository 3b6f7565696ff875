"""
Listing service for managing property listings.
Handles creation with images, ownership-gated updates, cascading deletes and likes.
"""

from typing import Optional, List, Sequence, Tuple
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from app.repositories.listing import ListingRepository
from app.repositories.user import UserRepository
from app.repositories.feedback import CommentRepository, ReviewRepository
from app.models.listing import Listing
from app.models.image import ListingImage
from app.models.user import User
from app.schemas.listing import ListingCreate, ListingUpdate
from app.services.access import AccessControl
from app.services.image import ImageService
from app.utils.exceptions import (
    NotFoundError,
    ListingNotFoundError,
    ValidationError,
    StorageError,
)
import uuid
import logging

logger = logging.getLogger(__name__)


class ListingService:
    """
    Listing lifecycle: create, read, update, delete and like-toggle.
    Every mutation re-reads its listing before changing it.
    """

    def __init__(self, db_session: AsyncSession, image_service: Optional[ImageService] = None):
        self.db = db_session
        self.listing_repo = ListingRepository(db_session)
        self.user_repo = UserRepository(db_session)
        self.comment_repo = CommentRepository(db_session)
        self.review_repo = ReviewRepository(db_session)
        self.image_service = image_service or ImageService()

    async def _get_or_404(self, listing_id: uuid.UUID) -> Listing:
        listing = await self.listing_repo.get_listing_with_details(listing_id)
        if not listing:
            raise ListingNotFoundError(str(listing_id))
        return listing

    @staticmethod
    def _build_images(files: Sequence[UploadFile], paths: Sequence[str]) -> List[ListingImage]:
        return [
            ListingImage(filename=file.filename, file_path=path, position=position)
            for position, (file, path) in enumerate(zip(files, paths))
        ]

    async def create_listing(
        self,
        listing_data: ListingCreate,
        files: Sequence[UploadFile],
        current_user: User
    ) -> Listing:
        """
        Create a listing with its images and the caller as author.

        Images are stored first; if the listing cannot be written the stored
        files are removed again.

        Args:
            listing_data: Listing fields
            files: Uploaded images, in display order
            current_user: Creating account

        Returns:
            Created listing with details loaded

        Raises:
            UnauthorizedError: If there is no authenticated user
            ValidationError: If no images are given or one is not an allowed image
            StorageError: If the images or the listing cannot be persisted
        """
        AccessControl.require_authentication(current_user)

        if not files:
            raise ValidationError("No files uploaded.")

        author_id = current_user.id
        paths = await self.image_service.store(files)

        listing = Listing(
            **listing_data.model_dump(),
            author_id=author_id,
            author_username=current_user.username,
            images=self._build_images(files, paths),
        )

        try:
            self.db.add(listing)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            self.image_service.discard(paths)
            logger.error(f"Failed to create listing for user {author_id}: {e}", exc_info=True)
            raise StorageError("Failed to create listing")

        logger.info(f"Listing created by {listing.author_username}: {listing.name} (ID: {listing.id})")
        return await self._get_or_404(listing.id)

    async def get_listing(self, listing_id: uuid.UUID) -> Listing:
        """
        Get a listing with comments, likers and reviews (newest first).

        Raises:
            ListingNotFoundError: If the listing doesn't exist
        """
        return await self._get_or_404(listing_id)

    async def update_listing(
        self,
        listing_id: uuid.UUID,
        listing_data: ListingUpdate,
        current_user: User,
        files: Optional[Sequence[UploadFile]] = None
    ) -> Listing:
        """
        Update a listing owned by the caller.

        Only fields present in listing_data are replaced. New files replace the
        whole image set and the first of them becomes the cover.

        Raises:
            ListingNotFoundError: If the listing doesn't exist
            AuthorizationError: If the caller is not the author
            ValidationError: If a new image is not an allowed image
            StorageError: If the change cannot be persisted
        """
        listing = await self._get_or_404(listing_id)
        AccessControl.require_ownership(current_user, listing, "update")

        update_data = listing_data.model_dump(exclude_none=True)

        new_paths: List[str] = []
        old_paths: List[str] = []
        if files:
            new_paths = await self.image_service.store(files)
            old_paths = listing.image_paths

        for field, value in update_data.items():
            setattr(listing, field, value)

        if files:
            listing.images = self._build_images(files, new_paths)

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            self.image_service.discard(new_paths)
            logger.error(f"Failed to update listing {listing_id}: {e}", exc_info=True)
            raise StorageError("Failed to update listing")

        if old_paths:
            self.image_service.discard(old_paths)

        logger.info(f"Listing updated by {current_user.username}: {listing_id} (fields: {sorted(update_data)}, images replaced: {bool(files)})")
        return await self._get_or_404(listing_id)

    async def delete_listing(self, listing_id: uuid.UUID, current_user: User) -> None:
        """
        Delete a listing owned by the caller, after its comments and reviews.

        Comments, reviews and the listing are removed in that order inside one
        transaction. If any step fails everything is rolled back, so the
        listing is never removed while one of its dependents failed to go.

        Raises:
            ListingNotFoundError: If the listing doesn't exist
            AuthorizationError: If the caller is not the author
            StorageError: If any delete step fails
        """
        listing = await self._get_or_404(listing_id)
        principal = AccessControl.require_ownership(current_user, listing, "delete")
        username = principal.username
        image_paths = listing.image_paths

        try:
            comment_ids = await self.listing_repo.get_comment_ids(listing_id)
            await self.comment_repo.delete_by_ids_pending(comment_ids)

            review_ids = await self.listing_repo.get_review_ids(listing_id)
            await self.review_repo.delete_by_ids_pending(review_ids)

            await self.listing_repo.delete_listing_pending(listing)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to delete listing {listing_id}, nothing was removed: {e}", exc_info=True)
            raise StorageError("Failed to delete listing")

        self.image_service.discard(image_paths)
        logger.info(
            f"Listing deleted by {username}: {listing_id} "
            f"(with {len(comment_ids)} comments, {len(review_ids)} reviews)"
        )

    async def toggle_like(self, listing_id: uuid.UUID, current_user: User) -> Listing:
        """
        Add the caller to the listing's likes, or remove them if already there.

        Raises:
            UnauthorizedError: If there is no authenticated user
            ListingNotFoundError: If the listing doesn't exist
            StorageError: If the change cannot be persisted
        """
        principal = AccessControl.require_authentication(current_user)
        user_id = principal.id
        listing = await self._get_or_404(listing_id)

        existing = next((user for user in listing.likes if user.id == user_id), None)
        if existing is not None:
            listing.likes.remove(existing)
            action = "unliked"
        else:
            liker = await self.user_repo.get_by_id(user_id)
            if liker is None:
                raise NotFoundError("User", str(user_id))
            listing.likes.append(liker)
            action = "liked"

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to toggle like on listing {listing_id}: {e}", exc_info=True)
            raise StorageError("Failed to update likes")

        logger.info(f"User {user_id} {action} listing {listing_id}")
        return await self._get_or_404(listing_id)

    async def get_author_listings(self, user_id: uuid.UUID) -> Tuple[User, List[Listing]]:
        """
        Get an account and the listings it created.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", str(user_id))

        listings = await self.listing_repo.get_listings_by_author(user_id)
        return user, listings
