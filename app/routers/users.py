"""
Public user profile endpoint.
"""

from fastapi import APIRouter, Depends, status
from uuid import UUID

from app.services.listing import ListingService
from app.schemas.listing import ListingResponse, UserProfileResponse
from app.schemas.user import PublicUserResponse
from app.services.error_handler import ERROR_RESPONSES
from app.utils.dependencies import get_listing_service


router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/{user_id}",
    response_model=UserProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get user profile",
    description="An account's public details and the listings it created",
    responses={404: ERROR_RESPONSES[404]}
)
async def get_user_profile(
    user_id: UUID,
    listing_service: ListingService = Depends(get_listing_service)
) -> UserProfileResponse:
    user, listings = await listing_service.get_author_listings(user_id)

    return UserProfileResponse(
        user=PublicUserResponse.model_validate(user.to_public_dict()),
        listings=[ListingResponse.model_validate(listing.to_dict()) for listing in listings],
        total=len(listings)
    )
