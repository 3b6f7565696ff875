"""
Tests for comments, reviews and contact messages.
"""

import uuid
import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.models.contact import ContactStatus
from app.models.listing import Listing
from app.models.user import User
from app.schemas.contact import ContactCreate
from app.schemas.feedback import CommentCreate, ReviewCreate
from app.services.contact import ContactService
from app.services.feedback import FeedbackService
from app.services.listing import ListingService
from app.utils.exceptions import ConflictError, ListingNotFoundError, StorageError, UnauthorizedError


class TestComments:
    """Test FeedbackService.add_comment."""

    async def test_comment_records_author(self, feedback_service: FeedbackService, listing: Listing, other_user: User):
        comment = await feedback_service.add_comment(listing.id, CommentCreate(text="  Great spot  "), other_user)

        assert comment.listing_id == listing.id
        assert comment.author_id == other_user.id
        assert comment.author_username == "visitor"
        assert comment.to_dict()["author"]["username"] == "visitor"

    async def test_comments_keep_posting_order(
        self, feedback_service: FeedbackService, listing_service: ListingService,
        listing: Listing, owner: User, other_user: User
    ):
        await feedback_service.add_comment(listing.id, CommentCreate(text="first"), other_user)
        await feedback_service.add_comment(listing.id, CommentCreate(text="second"), owner)

        fetched = await listing_service.get_listing(listing.id)

        assert [comment.text for comment in fetched.comments] == ["first", "second"]

    async def test_comment_on_missing_listing(self, feedback_service: FeedbackService, other_user: User):
        with pytest.raises(ListingNotFoundError):
            await feedback_service.add_comment(uuid.uuid4(), CommentCreate(text="hello"), other_user)

    async def test_comment_requires_login(self, feedback_service: FeedbackService, listing: Listing):
        with pytest.raises(UnauthorizedError):
            await feedback_service.add_comment(listing.id, CommentCreate(text="hello"), None)

    def test_blank_comment_rejected(self):
        with pytest.raises(PydanticValidationError):
            CommentCreate(text="   ")


class TestReviews:
    """Test FeedbackService.add_review and the listing rating."""

    async def test_rating_is_mean_of_reviews(
        self, feedback_service: FeedbackService, listing_service: ListingService,
        listing: Listing, owner: User, other_user: User
    ):
        await feedback_service.add_review(listing.id, ReviewCreate(rating=4, text="Nice"), other_user)
        await feedback_service.add_review(listing.id, ReviewCreate(rating=5), owner)

        fetched = await listing_service.get_listing(listing.id)

        assert fetched.rating == 4.5
        assert len(fetched.reviews) == 2

    async def test_second_review_by_same_user_conflicts(
        self, feedback_service: FeedbackService, listing_service: ListingService,
        listing: Listing, other_user: User
    ):
        await feedback_service.add_review(listing.id, ReviewCreate(rating=2), other_user)

        with pytest.raises(ConflictError, match="already reviewed"):
            await feedback_service.add_review(listing.id, ReviewCreate(rating=5), other_user)

        fetched = await listing_service.get_listing(listing.id)
        assert fetched.rating == 2
        assert len(fetched.reviews) == 1

    async def test_review_on_missing_listing(self, feedback_service: FeedbackService, other_user: User):
        with pytest.raises(ListingNotFoundError):
            await feedback_service.add_review(uuid.uuid4(), ReviewCreate(rating=3), other_user)

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_out_of_range_rejected(self, rating):
        with pytest.raises(PydanticValidationError):
            ReviewCreate(rating=rating)


class TestContact:
    """Test ContactService.create_message."""

    async def test_message_stored_with_sender_snapshot(self, db_session, owner: User):
        service = ContactService(db_session)

        message = await service.create_message(
            ContactCreate(name=" Owner ", email="Owner@Example.com", subject="Hello", message="Is the loft free?"),
            owner,
        )

        assert message.name == "Owner"
        assert message.email == "owner@example.com"
        assert message.status == ContactStatus.NEW
        assert message.user_id == owner.id
        assert message.username == "owner"
        assert message.first_name == "Test"
        assert message.to_dict()["status"] == "new"

    async def test_message_requires_login(self, db_session):
        service = ContactService(db_session)

        with pytest.raises(UnauthorizedError):
            await service.create_message(
                ContactCreate(name="Anon", email="anon@example.com", subject="Hi", message="Hello"),
                None,
            )

    def test_blank_fields_rejected(self):
        with pytest.raises(PydanticValidationError):
            ContactCreate(name="Anon", email="anon@example.com", subject="   ", message="Hello")

    async def test_store_failure_raises_storage_error(self, db_session, owner: User, monkeypatch):
        service = ContactService(db_session)

        async def failing_commit():
            raise SQLAlchemyError("database went away")

        monkeypatch.setattr(db_session, "commit", failing_commit)

        with pytest.raises(StorageError, match="Failed to send your message"):
            await service.create_message(
                ContactCreate(name="Owner", email="owner@example.com", subject="Hi", message="Hello"),
                owner,
            )
