"""
Contact form endpoint for logged-in users.
"""

from fastapi import APIRouter, Depends, status

from app.models.user import User
from app.services.contact import ContactService
from app.schemas.contact import ContactCreate, ContactResponse
from app.services.error_handler import ERROR_RESPONSES
from app.utils.dependencies import get_contact_service, get_current_active_user


router = APIRouter(prefix="/contact", tags=["Contact"])


@router.post(
    "",
    response_model=ContactResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a contact message",
    responses={401: ERROR_RESPONSES[401], 422: ERROR_RESPONSES[422]}
)
async def send_contact_message(
    contact_data: ContactCreate,
    current_user: User = Depends(get_current_active_user),
    contact_service: ContactService = Depends(get_contact_service)
) -> ContactResponse:
    message = await contact_service.create_message(contact_data, current_user)
    return ContactResponse.model_validate(message.to_dict())
