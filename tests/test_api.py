"""
End-to-end tests of the HTTP API through the ASGI app.
"""

import uuid
import pytest
from httpx import AsyncClient

from app.config import settings
from app.models.listing import Listing
from app.models.user import User
from app.routers.recovery import FORGOT_PASSWORD_MESSAGE
from app.services.search import NO_RESULTS_MESSAGE
from tests.conftest import (
    ListingFactory,
    RecordingMailer,
    TEST_PASSWORD,
    auth_headers,
    multipart_images,
    stored_file,
)

API = settings.api_v1_prefix

LISTING_FORM = {
    "name": "Harbour Flat",
    "price": "1200.50",
    "location": "Porto",
    "bedrooms": "2",
    "beds": "2",
    "bathrooms": "1",
    "description": "Two rooms by the river",
    "contact_name": "Ana",
    "contact_mobile": "+351 911 111 111",
    "contact_email": "ana@example.com",
}


def assert_error(response, status_code: int, code: str) -> dict:
    assert response.status_code == status_code
    error = response.json()["error"]
    assert error["code"] == code
    assert error["message"]
    assert error["timestamp"]
    assert error["request_id"]
    return error


class TestAuthEndpoints:
    """Test /auth endpoints."""

    async def test_register_then_login(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/auth/register", json={
            "username": "renter",
            "email": "Renter@Example.com",
            "password": TEST_PASSWORD,
        })

        assert response.status_code == 201
        data = response.json()
        assert data["user"]["email"] == "renter@example.com"
        assert data["token_type"] == "bearer"
        assert "hashed_password" not in data["user"]

        login = await async_client.post(f"{API}/auth/login", json={"username": "renter", "password": TEST_PASSWORD})
        assert login.status_code == 200

        me = await async_client.get(
            f"{API}/auth/me", headers={"Authorization": f"Bearer {login.json()['access_token']}"}
        )
        assert me.status_code == 200
        assert me.json()["username"] == "renter"

    async def test_register_duplicate(self, async_client: AsyncClient, owner: User):
        response = await async_client.post(f"{API}/auth/register", json={
            "username": "owner",
            "email": "someone-else@example.com",
            "password": TEST_PASSWORD,
        })

        assert_error(response, 409, "CONFLICT")

    async def test_register_validation_details(self, async_client: AsyncClient):
        response = await async_client.post(f"{API}/auth/register", json={"username": "x y", "email": "nope"})

        error = assert_error(response, 422, "VALIDATION_ERROR")
        fields = {detail["field"] for detail in error["details"]}
        assert "body -> password" in fields
        assert "body -> email" in fields

    async def test_login_wrong_password(self, async_client: AsyncClient, owner: User):
        response = await async_client.post(f"{API}/auth/login", json={"username": "owner", "password": "wrong-password"})

        error = assert_error(response, 401, "UNAUTHORIZED")
        assert error["message"] == "Invalid username or password"

    async def test_refresh(self, async_client: AsyncClient, owner: User):
        login = await async_client.post(f"{API}/auth/login", json={"username": "owner", "password": TEST_PASSWORD})

        response = await async_client.post(
            f"{API}/auth/refresh", json={"refresh_token": login.json()["refresh_token"]}
        )

        assert response.status_code == 200
        assert response.json()["access_token"]

    async def test_me_requires_token(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/auth/me")

        error = assert_error(response, 401, "UNAUTHORIZED")
        assert error["message"] == "You need to be logged in to do that"

    async def test_me_with_bad_token(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/auth/me", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401


class TestListingEndpoints:
    """Test /listings endpoints."""

    async def test_create_listing_with_images(self, async_client: AsyncClient, owner: User, upload_dir):
        response = await async_client.post(
            f"{API}/listings",
            data=LISTING_FORM,
            files=multipart_images("front.jpg", "kitchen.png"),
            headers=auth_headers(owner),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Harbour Flat"
        assert data["price"] == 1200.5
        assert data["author"] == {"id": str(owner.id), "username": "owner"}
        assert len(data["images"]) == 2
        assert data["image"] == data["images"][0]
        assert data["image"].endswith("-front.jpg")
        assert stored_file(upload_dir, data["image"]).exists()
        assert data["likes"] == [] and data["comments"] == [] and data["reviews"] == []

    async def test_create_requires_login(self, async_client: AsyncClient, upload_dir):
        response = await async_client.post(
            f"{API}/listings", data=LISTING_FORM, files=multipart_images("front.jpg")
        )

        assert_error(response, 401, "UNAUTHORIZED")
        assert list(upload_dir.iterdir()) == []

    async def test_create_without_images(self, async_client: AsyncClient, owner: User):
        response = await async_client.post(f"{API}/listings", data=LISTING_FORM, headers=auth_headers(owner))

        error = assert_error(response, 422, "VALIDATION_ERROR")
        assert error["message"] == "No files uploaded."

    async def test_create_rejects_non_image(self, async_client: AsyncClient, owner: User, upload_dir):
        files = multipart_images("front.jpg") + [("images", ("notes.txt", b"hello", "text/plain"))]

        response = await async_client.post(
            f"{API}/listings", data=LISTING_FORM, files=files, headers=auth_headers(owner)
        )

        error = assert_error(response, 422, "VALIDATION_ERROR")
        assert "Only image files are allowed" in error["message"]
        assert list(upload_dir.iterdir()) == []

    async def test_create_rejects_missing_fields(self, async_client: AsyncClient, owner: User):
        response = await async_client.post(
            f"{API}/listings",
            data={"name": "No price"},
            files=multipart_images("front.jpg"),
            headers=auth_headers(owner),
        )

        assert_error(response, 422, "VALIDATION_ERROR")

    async def test_index_and_search(self, async_client: AsyncClient, db_session, owner: User):
        await ListingFactory.insert_listing(db_session, owner, name="Harbour View", location="Porto")
        await ListingFactory.insert_listing(db_session, owner, name="Mountain Cabin", location="Alps")

        index = await async_client.get(f"{API}/listings")
        assert index.status_code == 200
        assert index.json()["total"] == 2
        assert index.json()["message"] is None

        search = await async_client.get(f"{API}/listings", params={"search": "porto"})
        assert [item["name"] for item in search.json()["listings"]] == ["Harbour View"]

    async def test_search_without_matches(self, async_client: AsyncClient, db_session, owner: User):
        await ListingFactory.insert_listing(db_session, owner, name="Harbour View")

        response = await async_client.get(f"{API}/listings", params={"search": "castle"})

        assert response.status_code == 200
        data = response.json()
        assert data["listings"] == []
        assert data["no_results"] is True
        assert data["message"] == NO_RESULTS_MESSAGE

    @pytest.mark.parametrize("page", ["abc", "0", "-2"])
    async def test_invalid_page_is_first_page(self, async_client: AsyncClient, db_session, owner: User, page):
        await ListingFactory.insert_listing(db_session, owner)

        response = await async_client.get(f"{API}/listings", params={"page": page})

        assert response.status_code == 200
        assert response.json()["page"] == 1
        assert len(response.json()["listings"]) == 1

    async def test_get_listing(self, async_client: AsyncClient, listing: Listing):
        response = await async_client.get(f"{API}/listings/{listing.id}")

        assert response.status_code == 200
        assert response.json()["name"] == "Sunny Loft"
        assert len(response.json()["images"]) == 3

    async def test_get_missing_listing(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/listings/{uuid.uuid4()}")

        assert_error(response, 404, "NOT_FOUND")

    async def test_get_malformed_id(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/listings/not-a-uuid")

        assert_error(response, 422, "VALIDATION_ERROR")

    async def test_owner_updates_fields(self, async_client: AsyncClient, listing: Listing, owner: User):
        cover = listing.cover_image

        response = await async_client.put(
            f"{API}/listings/{listing.id}", data={"price": "1100"}, headers=auth_headers(owner)
        )

        assert response.status_code == 200
        assert response.json()["price"] == 1100
        assert response.json()["name"] == "Sunny Loft"
        assert response.json()["image"] == cover

    async def test_owner_replaces_images(self, async_client: AsyncClient, listing: Listing, owner: User, upload_dir):
        old_paths = listing.image_paths

        response = await async_client.put(
            f"{API}/listings/{listing.id}",
            data={"name": "Sunny Loft II"},
            files=multipart_images("d.png"),
            headers=auth_headers(owner),
        )

        assert response.status_code == 200
        assert response.json()["image"].endswith("-d.png")
        assert len(response.json()["images"]) == 1
        assert not any(stored_file(upload_dir, path).exists() for path in old_paths)

    async def test_non_owner_cannot_update_or_delete(self, async_client: AsyncClient, listing: Listing, other_user: User):
        update = await async_client.put(
            f"{API}/listings/{listing.id}", data={"name": "Mine"}, headers=auth_headers(other_user)
        )
        delete = await async_client.delete(f"{API}/listings/{listing.id}", headers=auth_headers(other_user))

        assert_error(update, 403, "FORBIDDEN")
        assert_error(delete, 403, "FORBIDDEN")
        assert (await async_client.get(f"{API}/listings/{listing.id}")).json()["name"] == "Sunny Loft"

    async def test_delete_listing(self, async_client: AsyncClient, listing: Listing, owner: User, other_user: User):
        listing_id = listing.id
        await async_client.post(
            f"{API}/listings/{listing_id}/comments", json={"text": "Nice"}, headers=auth_headers(other_user)
        )

        response = await async_client.delete(f"{API}/listings/{listing_id}", headers=auth_headers(owner))

        assert response.status_code == 204
        assert (await async_client.get(f"{API}/listings/{listing_id}")).status_code == 404

    async def test_like_toggle(self, async_client: AsyncClient, listing: Listing, other_user: User):
        url = f"{API}/listings/{listing.id}/like"

        liked = await async_client.post(url, headers=auth_headers(other_user))
        assert liked.status_code == 200
        assert liked.json()["like_count"] == 1
        assert liked.json()["likes"][0]["username"] == "visitor"

        unliked = await async_client.post(url, headers=auth_headers(other_user))
        assert unliked.json()["like_count"] == 0

    async def test_like_requires_login(self, async_client: AsyncClient, listing: Listing):
        response = await async_client.post(f"{API}/listings/{listing.id}/like")

        assert_error(response, 401, "UNAUTHORIZED")

    async def test_comment_and_review(self, async_client: AsyncClient, listing: Listing, other_user: User):
        comment = await async_client.post(
            f"{API}/listings/{listing.id}/comments", json={"text": "Is parking included?"},
            headers=auth_headers(other_user),
        )
        review = await async_client.post(
            f"{API}/listings/{listing.id}/reviews", json={"rating": 4, "text": "Bright"},
            headers=auth_headers(other_user),
        )
        again = await async_client.post(
            f"{API}/listings/{listing.id}/reviews", json={"rating": 1},
            headers=auth_headers(other_user),
        )

        assert comment.status_code == 201
        assert comment.json()["author"]["username"] == "visitor"
        assert review.status_code == 201
        assert review.json()["rating"] == 4
        assert_error(again, 409, "CONFLICT")

        detail = (await async_client.get(f"{API}/listings/{listing.id}")).json()
        assert detail["rating"] == 4
        assert [item["text"] for item in detail["comments"]] == ["Is parking included?"]

    async def test_review_rating_out_of_range(self, async_client: AsyncClient, listing: Listing, other_user: User):
        response = await async_client.post(
            f"{API}/listings/{listing.id}/reviews", json={"rating": 9}, headers=auth_headers(other_user)
        )

        assert_error(response, 422, "VALIDATION_ERROR")


class TestRecoveryEndpoints:
    """Test /recovery endpoints."""

    async def test_forgot_answers_the_same_for_unknown_email(self, async_client: AsyncClient, mailer: RecordingMailer, owner: User):
        known = await async_client.post(f"{API}/recovery/forgot", json={"email": "owner@example.com"})
        unknown = await async_client.post(f"{API}/recovery/forgot", json={"email": "ghost@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json() == {"message": FORGOT_PASSWORD_MESSAGE}
        assert [mail.to for mail in mailer.sent] == ["owner@example.com"]

    async def test_reset_flow(self, async_client: AsyncClient, mailer: RecordingMailer, owner: User):
        await async_client.post(f"{API}/recovery/forgot", json={"email": "owner@example.com"})
        token = owner.reset_password_token
        assert token in mailer.sent[0].body

        check = await async_client.get(f"{API}/recovery/reset/{token}")
        assert check.status_code == 200
        assert check.json() == {"valid": True, "token": token}

        mismatch = await async_client.post(
            f"{API}/recovery/reset/{token}", json={"password": "new-password-1", "confirm": "new-password-2"}
        )
        assert_error(mismatch, 422, "VALIDATION_ERROR")

        reset = await async_client.post(
            f"{API}/recovery/reset/{token}", json={"password": "new-password-1", "confirm": "new-password-1"}
        )
        assert reset.status_code == 200
        assert reset.json()["user"]["username"] == "owner"
        assert reset.json()["access_token"]

        reused = await async_client.post(
            f"{API}/recovery/reset/{token}", json={"password": "new-password-3", "confirm": "new-password-3"}
        )
        assert_error(reused, 400, "INVALID_OR_EXPIRED_TOKEN")

        login = await async_client.post(f"{API}/auth/login", json={"username": "owner", "password": "new-password-1"})
        assert login.status_code == 200

    async def test_unknown_token(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/recovery/reset/{'f' * 40}")

        error = assert_error(response, 400, "INVALID_OR_EXPIRED_TOKEN")
        assert error["message"] == "Password reset token is invalid or has expired."


class TestContactAndProfileEndpoints:
    """Test /contact and /users endpoints."""

    async def test_send_contact_message(self, async_client: AsyncClient, owner: User):
        response = await async_client.post(
            f"{API}/contact",
            json={"name": "Owner", "email": "OWNER@example.com", "subject": "Hi", "message": "Hello there"},
            headers=auth_headers(owner),
        )

        assert response.status_code == 201
        assert response.json()["status"] == "new"
        assert response.json()["email"] == "owner@example.com"

    async def test_contact_requires_login(self, async_client: AsyncClient):
        response = await async_client.post(
            f"{API}/contact", json={"name": "Anon", "email": "anon@example.com", "subject": "Hi", "message": "Hello"}
        )

        assert_error(response, 401, "UNAUTHORIZED")

    async def test_user_profile_lists_own_listings(self, async_client: AsyncClient, db_session, owner: User, other_user: User):
        await ListingFactory.insert_listing(db_session, owner, name="Owner's place")
        await ListingFactory.insert_listing(db_session, other_user, name="Someone else's")

        response = await async_client.get(f"{API}/users/{owner.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["username"] == "owner"
        assert "email" not in data["user"]
        assert data["total"] == 1
        assert data["listings"][0]["name"] == "Owner's place"

    async def test_unknown_profile(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/users/{uuid.uuid4()}")

        assert_error(response, 404, "NOT_FOUND")


class TestHealthEndpoints:
    """Test root and health endpoints."""

    async def test_root(self, async_client: AsyncClient):
        response = await async_client.get("/")

        assert response.status_code == 200
        assert response.json()["api_prefix"] == API

    async def test_health(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    async def test_unknown_route_uses_error_shape(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/nowhere")

        assert_error(response, 404, "HTTP_404")
