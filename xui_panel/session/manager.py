"""Session key derivation and refresh policy on top of a SessionStore."""

import hashlib
import logging
import time
from typing import Any, Dict, Optional

from ..config.settings import REFRESH_THRESHOLD, SESSION_TTL
from ..xui_models import XUIConfigError
from .stores import (
    CustomSessionHandler,
    DatabaseSessionStore,
    MemorySessionStore,
    RedisSessionStore,
    SessionData,
    SessionStore,
)

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session_"


class SessionManager:
    """Maps ``(base_url, username)`` to stored panel sessions.

    A session is "valid" only while it is younger than
    ``session_ttl * refresh_threshold``, so callers re-authenticate before the
    panel starts rejecting the cookie.

    Usage:
        manager = SessionManager(RedisSessionStore(redis_client), session_ttl=1800)
        await manager.store_session(base_url, username, {"cookie": cookie})
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        session_ttl: Optional[int] = SESSION_TTL,
        refresh_threshold: float = REFRESH_THRESHOLD,
        auto_refresh: bool = True,
    ):
        if not 0 < refresh_threshold <= 1:
            raise XUIConfigError("refresh_threshold must be in (0, 1]")
        self.store = store if store is not None else MemorySessionStore()
        self.session_ttl = session_ttl or 0
        self.refresh_threshold = refresh_threshold
        self.auto_refresh = auto_refresh

    @classmethod
    def from_options(
        cls,
        *,
        store: Optional[SessionStore] = None,
        redis=None,
        redis_options: Optional[Dict[str, Any]] = None,
        database=None,
        database_options: Optional[Dict[str, Any]] = None,
        custom_handler: Optional[Dict[str, Any]] = None,
        **manager_options,
    ) -> "SessionManager":
        """Pick a backend: explicit store, Redis client, SQLAlchemy engine,
        custom handler functions, or memory (in that order of precedence)."""
        if store is None:
            if redis is not None:
                store = RedisSessionStore(redis, **(redis_options or {}))
            elif database is not None:
                store = DatabaseSessionStore(database, **(database_options or {}))
            elif custom_handler is not None:
                store = CustomSessionHandler(**custom_handler)
        return cls(store=store, **manager_options)

    @staticmethod
    def generate_session_key(base_url: str, username: str) -> str:
        """Stable one-way key for a credential pair (no salt, survives restarts)."""
        digest = hashlib.sha256(f"{base_url}:{username}".encode("utf-8")).hexdigest()
        return f"{SESSION_KEY_PREFIX}{digest}"

    async def store_session(self, base_url: str, username: str, session_data: SessionData) -> str:
        """Persist a fresh session record.

        Returns:
            The storage key

        Raises:
            XUISessionStoreError: If the backend cannot persist it
        """
        key = self.generate_session_key(base_url, username)
        record = {
            **session_data,
            "created_at": time.time(),
            "base_url": base_url,
            "username": username,
        }
        await self.store.set(key, record, self.session_ttl)
        return key

    async def get_session(self, base_url: str, username: str) -> Optional[SessionData]:
        session = await self.store.get(self.generate_session_key(base_url, username))
        # A record must belong to exactly this credential pair
        if session and (
            session.get("base_url", base_url) != base_url
            or session.get("username", username) != username
        ):
            logger.warning("Discarding session record stored for a different credential pair")
            return None
        return session

    async def has_valid_session(self, base_url: str, username: str) -> bool:
        session = await self.get_session(base_url, username)
        if not session:
            return False
        if self.auto_refresh and self.should_refresh_session(session):
            return False
        return True

    def should_refresh_session(self, session: SessionData) -> bool:
        """True when the record has no timestamp or crossed the refresh threshold."""
        created_at = session.get("created_at")
        if not created_at:
            return True
        if self.session_ttl <= 0:
            return False
        age = time.time() - created_at
        return age >= self.session_ttl * self.refresh_threshold

    async def delete_session(self, base_url: str, username: str) -> None:
        await self.store.delete(self.generate_session_key(base_url, username))

    async def clear_all_sessions(self) -> None:
        await self.store.clear()

    async def get_stats(self) -> Dict[str, Any]:
        get_stats = getattr(self.store, "get_stats", None)
        if get_stats is None:
            return {"message": "Statistics not available for this store type"}
        return get_stats()
