"""Models package exports."""

from inventory_api.models.auth import (
    AccessTokenClaims,
    CurrentUser,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from inventory_api.models.response import ErrorResponse
from inventory_api.models.user import User

__all__ = [
    "AccessTokenClaims",
    "CurrentUser",
    "ErrorResponse",
    "LoginRequest",
    "RefreshRequest",
    "RegisterRequest",
    "TokenResponse",
    "User",
]
