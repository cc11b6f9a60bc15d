"""Authentication service: registration, login and refresh-token rotation."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable
from uuid import uuid4

import structlog

from inventory_api.models.auth import TokenResponse
from inventory_api.models.user import User
from inventory_api.services.credential_store import CredentialStore
from inventory_api.services.errors import (
    InvalidCredentials,
    InvalidRefreshToken,
    UserAlreadyExists,
)
from inventory_api.services.password_hasher import PasswordHasher
from inventory_api.services.token_issuer import TokenIssuer

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuthService:
    """Issues token pairs for registered users.

    Every successful call stores a new refresh-token digest for the user,
    replacing the previous one, so at most one refresh token is live per user.
    Refresh uses a conditional swap in the store: of several concurrent calls
    presenting the same token, exactly one succeeds.
    """

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.hasher = hasher
        self.issuer = issuer
        self.clock = clock

    async def register(self, username: str, email: str, password: str) -> TokenResponse:
        """Create a user and issue their first token pair.

        The user row is inserted together with its first refresh token in a
        single write.

        Args:
            username: Display handle
            email: Login key (already normalized)
            password: Plain-text password (hashed before storage)

        Returns:
            TokenResponse with a fresh access and refresh token

        Raises:
            UserAlreadyExists: If the email is already registered
        """
        if await self.store.find_by_email(email) is not None:
            logger.info("registration_rejected", reason="email_taken")
            raise UserAlreadyExists()

        password_hash = await self._run_blocking(self.hasher.hash, password)

        now = self.clock()
        raw_refresh, refresh_expiry = self.issuer.issue_refresh_token(now)
        user = User(
            id=uuid4(),
            username=username,
            email=email,
            password_hash=password_hash,
            refresh_token_hash=self.issuer.fingerprint(raw_refresh),
            refresh_token_expiry=refresh_expiry,
            created_at=now,
            updated_at=now,
        )

        # Unique email constraint catches a concurrent registration.
        if not await self.store.insert(user):
            logger.info("registration_rejected", reason="email_taken_concurrently")
            raise UserAlreadyExists()

        logger.info("user_registered", user_id=str(user.id))
        return self._token_response(user, raw_refresh, now)

    async def login(self, email: str, password: str) -> TokenResponse:
        """Verify credentials and issue a token pair.

        Overwrites any refresh token the user already had.

        Raises:
            InvalidCredentials: Unknown email or wrong password (same error)
        """
        user = await self.store.find_by_email(email)

        if user is None:
            await self._run_blocking(self.hasher.verify_dummy, password)
            logger.info("login_failed", reason="unknown_email")
            raise InvalidCredentials()

        if not await self._run_blocking(self.hasher.verify, password, user.password_hash):
            logger.info("login_failed", reason="bad_password", user_id=str(user.id))
            raise InvalidCredentials()

        now = self.clock()
        raw_refresh, refresh_expiry = self.issuer.issue_refresh_token(now)
        updated = await self.store.update_refresh_token(
            user.id, self.issuer.fingerprint(raw_refresh), refresh_expiry, now
        )
        if not updated:
            logger.warning("login_failed", reason="user_vanished", user_id=str(user.id))
            raise InvalidCredentials()

        logger.info("user_logged_in", user_id=str(user.id))
        return self._token_response(user, raw_refresh, now)

    async def refresh(self, refresh_token: str) -> TokenResponse:
        """Exchange a refresh token for a new pair, rotating it.

        The presented token stops working the moment this call succeeds.

        Raises:
            InvalidRefreshToken: Unknown, already rotated, or expired token,
                or another call rotated it first
        """
        now = self.clock()
        presented_hash = self.issuer.fingerprint(refresh_token)

        user = await self.store.find_by_valid_refresh_token(presented_hash, now)
        if user is None:
            logger.info("refresh_token_rejected")
            raise InvalidRefreshToken()

        raw_refresh, refresh_expiry = self.issuer.issue_refresh_token(now)
        swapped = await self.store.replace_refresh_token(
            user.id,
            presented_hash,
            self.issuer.fingerprint(raw_refresh),
            refresh_expiry,
            now,
        )
        if not swapped:
            logger.warning("refresh_token_race_lost", user_id=str(user.id))
            raise InvalidRefreshToken()

        logger.info("refresh_token_rotated", user_id=str(user.id))
        return self._token_response(user, raw_refresh, now)

    def _token_response(self, user: User, raw_refresh: str, now: datetime) -> TokenResponse:
        return TokenResponse(
            access_token=self.issuer.issue_access_token(user.id, user.email, now),
            refresh_token=raw_refresh,
            token_type="bearer",
            expires_in=self.issuer.settings.access_token_ttl_minutes * 60,
        )

    @staticmethod
    async def _run_blocking(func: Callable[..., Any], *args: Any) -> Any:
        """Run CPU-heavy bcrypt work in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)
