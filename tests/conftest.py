"""
Test configuration and fixtures for the RentEase API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os
import tempfile

# Settings are read at import time, so the environment is prepared before any app import
os.environ["ENVIRONMENT"] = "testing"
os.environ["TESTING"] = "true"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="rentease-test-uploads-")
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["MAILGUN_API_KEY"] = ""
os.environ["MAILGUN_DOMAIN"] = ""

import io
import uuid
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import AsyncGenerator, List, Optional, Sequence

import pytest
from fastapi import UploadFile
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.main import app
from app.database import build_engine, create_tables, drop_tables, get_db
from app.models.user import User
from app.models.listing import Listing
from app.models.image import ListingImage
from app.repositories.user import UserRepository
from app.schemas.listing import ListingCreate
from app.services.auth import AuthService
from app.services.feedback import FeedbackService
from app.services.image import ImageService
from app.services.listing import ListingService
from app.services.recovery import RecoveryService
from app.services.search import ListingSearchService
from app.utils.auth import create_access_token
from app.utils.dependencies import get_image_service, get_mail_service


TEST_PASSWORD = "testpassword123"

IMAGE_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".gif": "GIF",
}


# Database fixtures
@pytest.fixture
async def db_engine():
    """Fresh in-memory database with the full schema for each test."""
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)
    yield engine
    await drop_tables(engine)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


# Collaborator fakes
@dataclass
class SentMail:
    to: str
    subject: str
    body: str


class RecordingMailer:
    """Stands in for MailService and remembers every message it was asked to send."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent: List[SentMail] = []

    async def send(self, to: str, subject: str, body: str) -> bool:
        self.sent.append(SentMail(to=to, subject=subject, body=body))
        return self.succeed


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "uploads"
    directory.mkdir()
    return directory


# Service fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def image_service(upload_dir: Path) -> ImageService:
    return ImageService(upload_dir=upload_dir)


@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def listing_service(db_session: AsyncSession, image_service: ImageService) -> ListingService:
    return ListingService(db_session, image_service=image_service)


@pytest.fixture
def search_service(db_session: AsyncSession) -> ListingSearchService:
    return ListingSearchService(db_session)


@pytest.fixture
def recovery_service(db_session: AsyncSession, mailer: RecordingMailer) -> RecoveryService:
    return RecoveryService(db_session, mail_service=mailer)


@pytest.fixture
def feedback_service(db_session: AsyncSession) -> FeedbackService:
    return FeedbackService(db_session)


# HTTP client
@pytest.fixture
async def async_client(
    db_session: AsyncSession,
    image_service: ImageService,
    mailer: RecordingMailer
) -> AsyncGenerator[AsyncClient, None]:
    """Async test client with the database, image storage and mail overridden."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_image_service] = lambda: image_service
    app.dependency_overrides[get_mail_service] = lambda: mailer

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Image helpers
def make_image_bytes(image_format: str = "PNG", color: str = "red", size=(16, 16)) -> bytes:
    """Create a small image in memory."""
    img = Image.new("RGB", size, color=color)
    img_bytes = io.BytesIO()
    img.save(img_bytes, format=image_format)
    return img_bytes.getvalue()


def image_bytes_for(filename: str) -> bytes:
    return make_image_bytes(IMAGE_FORMATS[Path(filename).suffix.lower()])


def make_upload(filename: str, content: Optional[bytes] = None) -> UploadFile:
    """UploadFile as FastAPI would hand it to a route."""
    data = content if content is not None else image_bytes_for(filename)
    return UploadFile(file=io.BytesIO(data), filename=filename)


def make_uploads(*filenames: str) -> List[UploadFile]:
    return [make_upload(name) for name in filenames]


def multipart_images(*filenames: str):
    """httpx `files=` payload for the listing `images` field."""
    return [("images", (name, image_bytes_for(name), "application/octet-stream")) for name in filenames]


def stored_file(upload_dir: Path, reference: str) -> Path:
    """Path on disk of a "/uploads/<name>" reference."""
    return upload_dir / reference.rsplit("/", 1)[-1]


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        username: Optional[str] = None,
        email: Optional[str] = None,
        password: str = TEST_PASSWORD,
        is_active: bool = True
    ) -> dict:
        suffix = uuid.uuid4().hex[:8]
        return {
            "username": username or f"user{suffix}",
            "email": email or f"user{suffix}@example.com",
            "password": password,
            "first_name": "Test",
            "last_name": "User",
            "is_active": is_active,
        }

    @staticmethod
    async def create_user(user_repo: UserRepository, **kwargs) -> User:
        """Create a test user in the database."""
        return await user_repo.create_user(UserFactory.create_user_data(**kwargs))


class ListingFactory:
    """Factory for creating test listings."""

    @staticmethod
    def create_listing_data(
        name: str = "Test Listing",
        location: str = "Test City",
        price: Decimal = Decimal("1000.00"),
        **kwargs
    ) -> ListingCreate:
        return ListingCreate(
            name=name,
            location=location,
            price=price,
            bedrooms=kwargs.pop("bedrooms", 2),
            beds=kwargs.pop("beds", 3),
            bathrooms=kwargs.pop("bathrooms", 1),
            description=kwargs.pop("description", "A bright place near the park"),
            contact_name=kwargs.pop("contact_name", "Jane Roe"),
            contact_mobile=kwargs.pop("contact_mobile", "+351 900 000 000"),
            contact_email=kwargs.pop("contact_email", "jane@example.com"),
            **kwargs
        )

    @staticmethod
    async def create_listing(
        listing_service: ListingService,
        author: User,
        filenames: Sequence[str] = ("a.jpg",),
        **kwargs
    ) -> Listing:
        """Create a listing through the service, storing real images."""
        return await listing_service.create_listing(
            ListingFactory.create_listing_data(**kwargs),
            make_uploads(*filenames),
            author
        )

    @staticmethod
    async def insert_listing(
        db_session: AsyncSession,
        author: User,
        name: str = "Test Listing",
        location: str = "Test City"
    ) -> Listing:
        """Insert a listing row directly, with a placeholder image reference."""
        listing = Listing(
            name=name,
            location=location,
            price=Decimal("500.00"),
            author_id=author.id,
            author_username=author.username,
            images=[ListingImage(filename="cover.png", file_path=f"/uploads/{uuid.uuid4().hex}.png", position=0)],
        )
        db_session.add(listing)
        await db_session.commit()
        return listing


# Common test fixtures
@pytest.fixture
async def owner(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, username="owner", email="owner@example.com")


@pytest.fixture
async def other_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(user_repository, username="visitor", email="visitor@example.com")


@pytest.fixture
async def listing(listing_service: ListingService, owner: User) -> Listing:
    return await ListingFactory.create_listing(
        listing_service,
        owner,
        filenames=("a.jpg", "b.png", "c.gif"),
        name="Sunny Loft",
        location="Lisbon"
    )


def auth_headers(user: User) -> dict:
    token = create_access_token(user_id=user.id, username=user.username)
    return {"Authorization": f"Bearer {token}"}
