"""Services package exports."""

from inventory_api.services.auth_service import AuthService
from inventory_api.services.credential_store import CredentialStore, PostgresCredentialStore
from inventory_api.services.errors import (
    AuthError,
    InvalidAccessToken,
    InvalidCredentials,
    InvalidRefreshToken,
    StorageUnavailable,
    UserAlreadyExists,
)
from inventory_api.services.logging_service import configure_logging, get_logger
from inventory_api.services.memory_store import InMemoryCredentialStore
from inventory_api.services.password_hasher import PasswordHasher
from inventory_api.services.token_issuer import TokenIssuer

__all__ = [
    "AuthError",
    "AuthService",
    "CredentialStore",
    "InMemoryCredentialStore",
    "InvalidAccessToken",
    "InvalidCredentials",
    "InvalidRefreshToken",
    "PasswordHasher",
    "PostgresCredentialStore",
    "StorageUnavailable",
    "TokenIssuer",
    "UserAlreadyExists",
    "configure_logging",
    "get_logger",
]
