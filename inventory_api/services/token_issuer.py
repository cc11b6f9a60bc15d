"""Access and refresh token issuance."""

import hashlib
import secrets
from datetime import datetime, timedelta
from uuid import UUID

import jwt
import structlog
from pydantic import ValidationError

from inventory_api.config import TokenSettings
from inventory_api.models.auth import AccessTokenClaims
from inventory_api.services.errors import InvalidAccessToken

logger = structlog.get_logger(__name__)

REQUIRED_CLAIMS = ["sub", "email", "iss", "aud", "iat", "exp"]


class TokenIssuer:
    """Builds signed access tokens and random refresh tokens.

    Holds the signing key for the lifetime of the process; it is never
    mutated after construction and is safe to share between requests.
    """

    def __init__(self, token_settings: TokenSettings):
        self.settings = token_settings

    @property
    def access_token_ttl(self) -> timedelta:
        return timedelta(minutes=self.settings.access_token_ttl_minutes)

    @property
    def refresh_token_ttl(self) -> timedelta:
        return timedelta(days=self.settings.refresh_token_ttl_days)

    def issue_access_token(self, user_id: UUID, email: str, now: datetime) -> str:
        """Create a signed JWT access token.

        Args:
            user_id: User UUID (placed in the 'sub' claim)
            email: User email (placed in the 'email' claim)
            now: Issue time; 'exp' is now plus the access TTL

        Returns:
            Encoded JWT string
        """
        payload = {
            "sub": str(user_id),
            "email": email,
            "iss": self.settings.issuer,
            "aud": self.settings.audience,
            "iat": now,
            "exp": now + self.access_token_ttl,
        }
        token = jwt.encode(
            payload, self.settings.signing_key, algorithm=self.settings.algorithm
        )
        logger.debug(
            "access_token_issued",
            user_id=str(user_id),
            expires_minutes=self.settings.access_token_ttl_minutes,
        )
        return token

    def issue_refresh_token(self, now: datetime) -> tuple[str, datetime]:
        """Draw a new refresh token from a CSPRNG.

        Args:
            now: Issue time; expiry is now plus the refresh TTL

        Returns:
            Tuple of (raw_token, expiry)
        """
        raw_token = secrets.token_urlsafe(self.settings.refresh_token_bytes)
        return raw_token, now + self.refresh_token_ttl

    @staticmethod
    def fingerprint(raw_token: str) -> str:
        """SHA-256 hex digest under which a refresh token is stored."""
        return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()

    def decode_access_token(self, token: str) -> AccessTokenClaims:
        """Verify an access token and return its claims.

        Checks signature, issuer, audience and expiry (with clock-skew
        leeway). No store lookup is needed.

        Raises:
            InvalidAccessToken: If the token is invalid, expired, or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.signing_key,
                algorithms=[self.settings.algorithm],
                audience=self.settings.audience,
                issuer=self.settings.issuer,
                leeway=self.settings.clock_skew_seconds,
                options={"require": REQUIRED_CLAIMS},
            )
            return AccessTokenClaims(**payload)
        except jwt.ExpiredSignatureError:
            raise InvalidAccessToken("Access token has expired")
        except (jwt.InvalidTokenError, ValidationError) as e:
            logger.info("access_token_rejected", reason=type(e).__name__)
            raise InvalidAccessToken()
