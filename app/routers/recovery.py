"""
Password recovery endpoints: request a reset link, check a token, redeem it.
"""

from fastapi import APIRouter, Depends, status

from app.services.auth import AuthService
from app.services.recovery import RecoveryService
from app.schemas.auth import LoginResponse
from app.schemas.recovery import (
    ForgotPasswordRequest,
    ResetPasswordRequest,
    MessageResponse,
    ResetTokenStatusResponse,
)
from app.routers.auth import build_login_response
from app.services.error_handler import ERROR_RESPONSES
from app.utils.dependencies import get_auth_service, get_recovery_service


router = APIRouter(prefix="/recovery", tags=["Account Recovery"])

FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email exists, an email has been sent with further instructions."
)


@router.post(
    "/forgot",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Request password reset",
    description="Mail a single-use reset link; the answer is the same whether or not the account exists"
)
async def forgot_password(
    forgot_data: ForgotPasswordRequest,
    recovery_service: RecoveryService = Depends(get_recovery_service)
) -> MessageResponse:
    await recovery_service.issue(forgot_data.email)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.get(
    "/reset/{token}",
    response_model=ResetTokenStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Check reset token",
    responses={400: ERROR_RESPONSES[400]}
)
async def check_reset_token(
    token: str,
    recovery_service: RecoveryService = Depends(get_recovery_service)
) -> ResetTokenStatusResponse:
    """
    Confirm the token can still be redeemed.

    Raises:
        InvalidOrExpiredTokenError: If the token is unknown, used or expired
    """
    await recovery_service.validate(token)
    return ResetTokenStatusResponse(valid=True, token=token)


@router.post(
    "/reset/{token}",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Reset password",
    description="Redeem a reset token, set the new password and log in",
    responses={400: ERROR_RESPONSES[400], 422: ERROR_RESPONSES[422]}
)
async def reset_password(
    token: str,
    reset_data: ResetPasswordRequest,
    recovery_service: RecoveryService = Depends(get_recovery_service),
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """
    Set a new password with a reset token.

    Raises:
        ValidationError: If the passwords do not match
        InvalidOrExpiredTokenError: If the token is unknown, used or expired
    """
    user = await recovery_service.consume(token, reset_data.password, reset_data.confirm)
    access_token, refresh_token = auth_service.create_tokens(user)
    return build_login_response(user, access_token, refresh_token)
