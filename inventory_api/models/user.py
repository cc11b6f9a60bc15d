"""User credential record."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class User(BaseModel):
    """A registered user as held by the credential store.

    The refresh token is never stored raw: ``refresh_token_hash`` holds the
    SHA-256 digest of the single currently valid token.
    """

    id: UUID
    username: str
    email: str
    password_hash: str = Field(repr=False)
    refresh_token_hash: Optional[str] = Field(default=None, repr=False)
    refresh_token_expiry: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    def has_live_refresh_token(self, now: datetime) -> bool:
        """True when a refresh token is stored and has not yet expired."""
        return (
            self.refresh_token_hash is not None
            and self.refresh_token_expiry is not None
            and self.refresh_token_expiry > now
        )
