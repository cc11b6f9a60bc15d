"""In-memory CredentialStore for development and tests."""

import threading
from datetime import datetime
from typing import Optional
from uuid import UUID

from inventory_api.models.user import User


class InMemoryCredentialStore:
    """Dict-backed credential store.

    Each operation runs entirely under a lock and never awaits while holding
    it, so check-and-set operations are atomic across coroutines and threads.
    """

    def __init__(self) -> None:
        self._by_id: dict[UUID, User] = {}
        self._id_by_email: dict[str, UUID] = {}
        self._id_by_token: dict[str, UUID] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._by_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            user_id = self._id_by_email.get(email)
            return self._by_id[user_id].model_copy() if user_id else None

    async def find_by_valid_refresh_token(
        self, token_hash: str, now: datetime
    ) -> Optional[User]:
        with self._lock:
            user_id = self._id_by_token.get(token_hash)
            if user_id is None:
                return None
            user = self._by_id[user_id]
            if not user.has_live_refresh_token(now):
                return None
            return user.model_copy()

    async def insert(self, user: User) -> bool:
        with self._lock:
            if user.email in self._id_by_email:
                return False
            self._by_id[user.id] = user.model_copy()
            self._id_by_email[user.email] = user.id
            if user.refresh_token_hash is not None:
                self._id_by_token[user.refresh_token_hash] = user.id
            return True

    async def update_refresh_token(
        self, user_id: UUID, token_hash: str, expiry: datetime, now: datetime
    ) -> bool:
        with self._lock:
            if user_id not in self._by_id:
                return False
            self._set_refresh_token(user_id, token_hash, expiry, now)
            return True

    async def replace_refresh_token(
        self,
        user_id: UUID,
        expected_hash: str,
        token_hash: str,
        expiry: datetime,
        now: datetime,
    ) -> bool:
        with self._lock:
            user = self._by_id.get(user_id)
            if user is None or user.refresh_token_hash != expected_hash:
                return False
            if not user.has_live_refresh_token(now):
                return False
            self._set_refresh_token(user_id, token_hash, expiry, now)
            return True

    async def health_check(self) -> bool:
        return True

    def _set_refresh_token(
        self, user_id: UUID, token_hash: str, expiry: datetime, now: datetime
    ) -> None:
        # caller holds the lock
        user = self._by_id[user_id]
        if user.refresh_token_hash is not None:
            self._id_by_token.pop(user.refresh_token_hash, None)
        self._by_id[user_id] = user.model_copy(
            update={
                "refresh_token_hash": token_hash,
                "refresh_token_expiry": expiry,
                "updated_at": now,
            }
        )
        self._id_by_token[token_hash] = user_id
