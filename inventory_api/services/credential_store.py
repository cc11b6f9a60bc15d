"""Credential store contract and its PostgreSQL implementation."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional, Protocol
from uuid import UUID

import asyncpg
import structlog

from inventory_api.database import get_pool, health_check as db_health_check
from inventory_api.models.user import User
from inventory_api.services.errors import StorageUnavailable

logger = structlog.get_logger(__name__)

USER_COLUMNS = (
    "id, username, email, password_hash, refresh_token_hash, "
    "refresh_token_expiry, created_at, updated_at"
)


class CredentialStore(Protocol):
    """Persistence of user identity, password hash and refresh-token state.

    Every write is a single atomic operation. Implementations raise
    StorageUnavailable on I/O failure.
    """

    async def find_by_email(self, email: str) -> Optional[User]:
        """Return the user registered under ``email``, if any."""
        ...

    async def find_by_valid_refresh_token(
        self, token_hash: str, now: datetime
    ) -> Optional[User]:
        """Return the user whose stored token digest matches and is unexpired."""
        ...

    async def insert(self, user: User) -> bool:
        """Insert a new user. Returns False if the email is already taken."""
        ...

    async def update_refresh_token(
        self, user_id: UUID, token_hash: str, expiry: datetime, now: datetime
    ) -> bool:
        """Unconditionally overwrite the user's refresh token. False if no such user."""
        ...

    async def replace_refresh_token(
        self,
        user_id: UUID,
        expected_hash: str,
        token_hash: str,
        expiry: datetime,
        now: datetime,
    ) -> bool:
        """Swap the refresh token only if it still equals ``expected_hash`` and is unexpired.

        Returns True if this call performed the swap.
        """
        ...

    async def health_check(self) -> bool:
        ...


def _affected_rows(status: str) -> int:
    """Parse the row count out of an asyncpg command status ("UPDATE 1")."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


class PostgresCredentialStore:
    """CredentialStore backed by the ``users`` table via asyncpg."""

    @asynccontextmanager
    async def _connection(self, operation: str) -> AsyncIterator[asyncpg.Connection]:
        try:
            pool = await get_pool()
            async with pool.acquire() as conn:
                yield conn
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, RuntimeError) as e:
            logger.error(
                "credential_store_error",
                operation=operation,
                error_type=type(e).__name__,
            )
            raise StorageUnavailable(operation) from e

    async def find_by_email(self, email: str) -> Optional[User]:
        async with self._connection("find_by_email") as conn:
            row = await conn.fetchrow(
                f"SELECT {USER_COLUMNS} FROM users WHERE email = $1",
                email,
            )
        return User(**dict(row)) if row is not None else None

    async def find_by_valid_refresh_token(
        self, token_hash: str, now: datetime
    ) -> Optional[User]:
        async with self._connection("find_by_valid_refresh_token") as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE refresh_token_hash = $1 AND refresh_token_expiry > $2
                """,
                token_hash,
                now,
            )
        return User(**dict(row)) if row is not None else None

    async def insert(self, user: User) -> bool:
        async with self._connection("insert") as conn:
            status = await conn.execute(
                """
                INSERT INTO users (id, username, email, password_hash, refresh_token_hash,
                                   refresh_token_expiry, created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                ON CONFLICT (email) DO NOTHING
                """,
                user.id,
                user.username,
                user.email,
                user.password_hash,
                user.refresh_token_hash,
                user.refresh_token_expiry,
                user.created_at,
                user.updated_at,
            )
        return _affected_rows(status) == 1

    async def update_refresh_token(
        self, user_id: UUID, token_hash: str, expiry: datetime, now: datetime
    ) -> bool:
        async with self._connection("update_refresh_token") as conn:
            status = await conn.execute(
                """
                UPDATE users
                SET refresh_token_hash = $2, refresh_token_expiry = $3, updated_at = $4
                WHERE id = $1
                """,
                user_id,
                token_hash,
                expiry,
                now,
            )
        return _affected_rows(status) == 1

    async def replace_refresh_token(
        self,
        user_id: UUID,
        expected_hash: str,
        token_hash: str,
        expiry: datetime,
        now: datetime,
    ) -> bool:
        async with self._connection("replace_refresh_token") as conn:
            status = await conn.execute(
                """
                UPDATE users
                SET refresh_token_hash = $3, refresh_token_expiry = $4, updated_at = $5
                WHERE id = $1
                  AND refresh_token_hash = $2
                  AND refresh_token_expiry > $5
                """,
                user_id,
                expected_hash,
                token_hash,
                expiry,
                now,
            )
        return _affected_rows(status) == 1

    async def health_check(self) -> bool:
        return await db_health_check()
