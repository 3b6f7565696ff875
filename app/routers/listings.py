"""
Listing API endpoints: index with search, CRUD with image uploads, likes, comments and reviews.
Creates and updates are multipart forms carrying the listing fields and an `images` file list.
"""

from fastapi import APIRouter, Depends, status, Query, File, Form, UploadFile
from typing import Optional, List
from decimal import Decimal
from uuid import UUID

from app.models.user import User
from app.services.feedback import FeedbackService
from app.services.listing import ListingService
from app.services.search import ListingSearchService, NO_RESULTS_MESSAGE
from app.schemas.feedback import CommentCreate, CommentResponse, ReviewCreate, ReviewResponse
from app.schemas.listing import (
    ListingCreate,
    ListingUpdate,
    ListingResponse,
    ListingDetailResponse,
    ListingListResponse,
)
from app.services.error_handler import ERROR_RESPONSES
from app.utils.dependencies import (
    get_current_active_user,
    get_feedback_service,
    get_listing_service,
    get_search_service,
)


router = APIRouter(prefix="/listings", tags=["Listings"])

MUTATION_RESPONSES = {code: ERROR_RESPONSES[code] for code in (401, 403, 404, 422, 503)}


def _uploaded(images: Optional[List[UploadFile]]) -> List[UploadFile]:
    """Drop the empty parts browsers send for an untouched file input."""
    return [image for image in images or [] if image.filename]


@router.get(
    "",
    response_model=ListingListResponse,
    status_code=status.HTTP_200_OK,
    summary="List listings",
    description="Paginated listing index with optional name/location search"
)
async def list_listings(
    search: Optional[str] = Query(None, description="Text matched literally against name or location"),
    page: Optional[str] = Query(None, description="Page number; invalid values mean page 1"),
    search_service: ListingSearchService = Depends(get_search_service)
) -> ListingListResponse:
    """
    Get one page of listings.

    A search that matches nothing is answered with an empty page and a
    message, not an error.
    """
    result = await search_service.search(query=search, page=page)

    return ListingListResponse(
        listings=[ListingResponse.model_validate(listing.to_dict()) for listing in result.listings],
        page=result.page,
        page_size=result.page_size,
        total=result.total,
        total_pages=result.total_pages,
        has_next=result.has_next,
        has_previous=result.has_previous,
        search=result.search_term,
        no_results=result.no_results,
        message=NO_RESULTS_MESSAGE if result.no_results else None
    )


@router.post(
    "",
    response_model=ListingDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create listing",
    description="Create a listing with up to 10 images; the first image is the cover",
    responses=MUTATION_RESPONSES
)
async def create_listing(
    name: str = Form(...),
    price: Decimal = Form(...),
    location: str = Form(...),
    bedrooms: int = Form(0),
    beds: int = Form(0),
    bathrooms: int = Form(0),
    description: str = Form(""),
    contact_name: str = Form(""),
    contact_mobile: str = Form(""),
    contact_email: str = Form(""),
    images: Optional[List[UploadFile]] = File(None, description="Listing images in display order"),
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingDetailResponse:
    """
    Create a new listing authored by the current user.

    Raises:
        ValidationError: If no images are sent or one is not an allowed image
        StorageError: If the listing or its images cannot be stored
    """
    listing_data = ListingCreate(
        name=name,
        price=price,
        location=location,
        bedrooms=bedrooms,
        beds=beds,
        bathrooms=bathrooms,
        description=description,
        contact_name=contact_name,
        contact_mobile=contact_mobile,
        contact_email=contact_email,
    )

    listing = await listing_service.create_listing(listing_data, _uploaded(images), current_user)
    return ListingDetailResponse.model_validate(listing.to_dict(include_details=True))


@router.get(
    "/{listing_id}",
    response_model=ListingDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get listing",
    description="Get a listing with its likes, comments and reviews",
    responses={404: ERROR_RESPONSES[404]}
)
async def get_listing(
    listing_id: UUID,
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingDetailResponse:
    listing = await listing_service.get_listing(listing_id)
    return ListingDetailResponse.model_validate(listing.to_dict(include_details=True))


@router.put(
    "/{listing_id}",
    response_model=ListingDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Update listing",
    description="Update fields of your own listing; sending images replaces all of them",
    responses=MUTATION_RESPONSES
)
async def update_listing(
    listing_id: UUID,
    name: Optional[str] = Form(None),
    price: Optional[Decimal] = Form(None),
    location: Optional[str] = Form(None),
    bedrooms: Optional[int] = Form(None),
    beds: Optional[int] = Form(None),
    bathrooms: Optional[int] = Form(None),
    description: Optional[str] = Form(None),
    contact_name: Optional[str] = Form(None),
    contact_mobile: Optional[str] = Form(None),
    contact_email: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None, description="Replacement images in display order"),
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingDetailResponse:
    """
    Update a listing owned by the current user.

    Raises:
        AuthorizationError: If the current user is not the author
        ListingNotFoundError: If the listing doesn't exist
    """
    listing_data = ListingUpdate(
        name=name,
        price=price,
        location=location,
        bedrooms=bedrooms,
        beds=beds,
        bathrooms=bathrooms,
        description=description,
        contact_name=contact_name,
        contact_mobile=contact_mobile,
        contact_email=contact_email,
    )

    listing = await listing_service.update_listing(
        listing_id, listing_data, current_user, files=_uploaded(images)
    )
    return ListingDetailResponse.model_validate(listing.to_dict(include_details=True))


@router.delete(
    "/{listing_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete listing",
    description="Delete your own listing together with its comments and reviews",
    responses=MUTATION_RESPONSES
)
async def delete_listing(
    listing_id: UUID,
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> None:
    await listing_service.delete_listing(listing_id, current_user)


@router.post(
    "/{listing_id}/like",
    response_model=ListingDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Like or unlike listing",
    description="Add the current user to the listing's likes, or remove them if already there",
    responses={401: ERROR_RESPONSES[401], 404: ERROR_RESPONSES[404]}
)
async def toggle_like(
    listing_id: UUID,
    current_user: User = Depends(get_current_active_user),
    listing_service: ListingService = Depends(get_listing_service)
) -> ListingDetailResponse:
    listing = await listing_service.toggle_like(listing_id, current_user)
    return ListingDetailResponse.model_validate(listing.to_dict(include_details=True))


@router.post(
    "/{listing_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on listing",
    responses={401: ERROR_RESPONSES[401], 404: ERROR_RESPONSES[404]}
)
async def add_comment(
    listing_id: UUID,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_active_user),
    feedback_service: FeedbackService = Depends(get_feedback_service)
) -> CommentResponse:
    comment = await feedback_service.add_comment(listing_id, comment_data, current_user)
    return CommentResponse.model_validate(comment.to_dict())


@router.post(
    "/{listing_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review listing",
    description="Rate a listing from 1 to 5; one review per user per listing",
    responses={401: ERROR_RESPONSES[401], 404: ERROR_RESPONSES[404], 409: ERROR_RESPONSES[409]}
)
async def add_review(
    listing_id: UUID,
    review_data: ReviewCreate,
    current_user: User = Depends(get_current_active_user),
    feedback_service: FeedbackService = Depends(get_feedback_service)
) -> ReviewResponse:
    review = await feedback_service.add_review(listing_id, review_data, current_user)
    return ReviewResponse.model_validate(review.to_dict())
