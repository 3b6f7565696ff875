"""
Authentication API endpoints for registration, login, token refresh and user information.
Provides JWT-based authentication for the listing endpoints.
"""

from fastapi import APIRouter, Depends, status
from app.models.user import User
from app.services.auth import AuthService
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    AccessTokenResponse,
)
from app.schemas.user import RegisterRequest, UserResponse
from app.services.error_handler import ERROR_RESPONSES
from app.utils.dependencies import get_auth_service, get_current_active_user
from app.config import settings


router = APIRouter(prefix="/auth", tags=["Authentication"])


def build_login_response(user: User, access_token: str, refresh_token: str) -> LoginResponse:
    return LoginResponse(
        user=UserResponse.model_validate(user.to_dict()),
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.post(
    "/register",
    response_model=LoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account and log it in",
    responses={409: ERROR_RESPONSES[409], 422: ERROR_RESPONSES[422]}
)
async def register(
    register_data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """
    Create an account and return JWT tokens for it.

    Raises:
        DuplicateResourceError: If the username or email is taken
    """
    user = await auth_service.register(register_data)
    access_token, refresh_token = auth_service.create_tokens(user)
    return build_login_response(user, access_token, refresh_token)


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate user with username and password, returns JWT tokens",
    responses={401: ERROR_RESPONSES[401]}
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """
    Authenticate user and return JWT tokens.

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveUserError: If user account is inactive
    """
    user, access_token, refresh_token = await auth_service.login(
        username=login_data.username,
        password=login_data.password
    )
    return build_login_response(user, access_token, refresh_token)


@router.post(
    "/refresh",
    response_model=AccessTokenResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
    description="Generate new access token using refresh token",
    responses={401: ERROR_RESPONSES[401]}
)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AccessTokenResponse:
    """
    Create new access token from refresh token.

    Raises:
        InvalidTokenError: If refresh token is invalid
        TokenExpiredError: If refresh token is expired
    """
    access_token = await auth_service.refresh_access_token(refresh_data.refresh_token)

    return AccessTokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60
    )


@router.get(
    "/me",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Get current authenticated user information",
    responses={401: ERROR_RESPONSES[401]}
)
async def get_current_user_info(
    current_user: User = Depends(get_current_active_user)
) -> UserResponse:
    return UserResponse.model_validate(current_user.to_dict())
