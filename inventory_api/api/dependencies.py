"""FastAPI dependencies for the auth core and bearer authentication."""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from inventory_api.config import Settings
from inventory_api.models.auth import CurrentUser
from inventory_api.services.auth_service import AuthService
from inventory_api.services.credential_store import CredentialStore, PostgresCredentialStore
from inventory_api.services.errors import InvalidAccessToken
from inventory_api.services.memory_store import InMemoryCredentialStore
from inventory_api.services.password_hasher import PasswordHasher
from inventory_api.services.token_issuer import TokenIssuer

bearer_scheme = HTTPBearer(auto_error=False)


def build_credential_store(settings: Settings) -> CredentialStore:
    """Select the credential store backend named in settings."""
    if settings.credential_store == "memory":
        return InMemoryCredentialStore()
    return PostgresCredentialStore()


def build_auth_service(settings: Settings, store: CredentialStore) -> AuthService:
    """Wire an AuthService from settings. Called once at startup."""
    return AuthService(
        store=store,
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        issuer=TokenIssuer(settings.token_settings()),
    )


def get_auth_service(request: Request) -> AuthService:
    """Return the process-wide AuthService built during lifespan startup."""
    return request.app.state.auth_service


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> CurrentUser:
    """Resolve the caller from a Bearer access token, without a store lookup.

    Raises:
        InvalidAccessToken: If the header is missing or the token fails verification
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise InvalidAccessToken("Missing bearer access token")

    claims = auth_service.issuer.decode_access_token(credentials.credentials)
    return CurrentUser(id=claims.sub, email=claims.email)
