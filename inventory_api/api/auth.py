"""Authentication API endpoints.

Core errors (UserAlreadyExists, InvalidCredentials, InvalidRefreshToken)
propagate out of these handlers and are mapped to responses by the
exception handlers registered in inventory_api.main.
"""

from fastapi import APIRouter, Depends, status

from inventory_api.api.dependencies import get_auth_service, get_current_user
from inventory_api.models.auth import (
    CurrentUser,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from inventory_api.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Register a new user and return their first token pair.

    Raises:
        UserAlreadyExists: 409 if the email is taken
    """
    return await auth_service.register(
        username=request.username,
        email=request.email,
        password=request.password,
    )


@router.post("/login")
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Login with email and password.

    Raises:
        InvalidCredentials: 401 for unknown email or wrong password
    """
    return await auth_service.login(email=request.email, password=request.password)


@router.post("/refresh")
async def refresh(
    request: RefreshRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Exchange a refresh token for a new pair. The presented token is rotated out.

    Raises:
        InvalidRefreshToken: 401 if the token is unknown, already used, or expired
    """
    return await auth_service.refresh(request.refresh_token)


@router.get("/me")
async def get_me(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Identity carried by the caller's access token."""
    return current_user
