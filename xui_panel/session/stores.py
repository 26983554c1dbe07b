"""Session storage backends.

All stores share one contract: ``get`` returns ``None`` for absent or expired
keys, never a stale value. Read, delete and clear failures of remote backends
are logged and degrade to "no session"; a failed write raises
XUISessionStoreError so the caller can decide to continue without caching.
"""

import asyncio
import copy
import inspect
import json
import logging
import time
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from redis.exceptions import RedisError
from sqlalchemy import MetaData, delete, insert, or_, select
from sqlalchemy.engine import Dialect, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateIndex, CreateTable

from ..config.settings import REDIS_SESSION_PREFIX, SESSION_TABLE_NAME, SESSION_TTL
from ..database.models import build_session_table, utcnow
from ..xui_models import XUIConfigError, XUISessionStoreError

logger = logging.getLogger(__name__)

SessionData = Dict[str, Any]


class SessionStore(ABC):
    """Async key/value contract shared by every backend."""

    @abstractmethod
    async def get(self, key: str) -> Optional[SessionData]:
        ...

    @abstractmethod
    async def set(self, key: str, value: SessionData, ttl: Optional[int] = None) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def clear(self) -> None:
        ...

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None


class MemorySessionStore(SessionStore):
    """Process-local store with per-key eviction timers.

    ``get`` also checks the deadline itself, so a late or cancelled timer can
    never hand out an expired session.
    """

    def __init__(self, default_ttl: int = SESSION_TTL):
        self.default_ttl = default_ttl
        self._cache: Dict[str, tuple[SessionData, Optional[float]]] = {}
        self._timers: Dict[str, asyncio.TimerHandle] = {}

    async def get(self, key: str) -> Optional[SessionData]:
        item = self._cache.get(key)
        if item is None:
            return None

        value, expires_at = item
        if expires_at is not None and time.monotonic() >= expires_at:
            self._evict(key)
            return None

        return copy.deepcopy(value)

    async def set(self, key: str, value: SessionData, ttl: Optional[int] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        self._cancel_timer(key)

        expires_at = time.monotonic() + ttl if ttl > 0 else None
        self._cache[key] = (copy.deepcopy(value), expires_at)

        if ttl > 0:
            loop = asyncio.get_running_loop()
            self._timers[key] = loop.call_later(ttl, self._evict, key)

    async def delete(self, key: str) -> None:
        self._evict(key)

    async def clear(self) -> None:
        # Cancel timers first so none fires into the emptied cache
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        self._cache.clear()

    def _cancel_timer(self, key: str) -> None:
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()

    def _evict(self, key: str) -> None:
        self._cache.pop(key, None)
        self._cancel_timer(key)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "size": len(self._cache),
            "keys": list(self._cache.keys()),
        }


class RedisSessionStore(SessionStore):
    """Store backed by a ``redis.asyncio.Redis`` client.

    Usage:
        store = RedisSessionStore(redis.asyncio.from_url("redis://localhost"))
    """

    def __init__(self, redis_client, key_prefix: str = REDIS_SESSION_PREFIX, default_ttl: int = SESSION_TTL):
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.default_ttl = default_ttl

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> Optional[SessionData]:
        try:
            raw = await self.redis.get(self._key(key))
            return json.loads(raw) if raw else None
        except (RedisError, OSError, ValueError) as e:
            logger.warning(f"Redis get failed, treating session as absent: {e}")
            return None

    async def set(self, key: str, value: SessionData, ttl: Optional[int] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        try:
            serialized = json.dumps(value)
            if ttl > 0:
                await self.redis.setex(self._key(key), ttl, serialized)
            else:
                await self.redis.set(self._key(key), serialized)
        except (RedisError, OSError, TypeError, ValueError) as e:
            logger.error(f"Redis set failed: {e}")
            raise XUISessionStoreError(f"Failed to store session in Redis: {e}", e)

    async def delete(self, key: str) -> None:
        try:
            await self.redis.delete(self._key(key))
        except (RedisError, OSError) as e:
            logger.warning(f"Redis delete failed: {e}")

    async def clear(self) -> None:
        try:
            keys = [k async for k in self.redis.scan_iter(match=f"{self.key_prefix}*")]
            if keys:
                await self.redis.delete(*keys)
        except (RedisError, OSError) as e:
            logger.warning(f"Redis clear failed: {e}")

    async def exists(self, key: str) -> bool:
        try:
            return await self.redis.exists(self._key(key)) == 1
        except (RedisError, OSError) as e:
            logger.warning(f"Redis exists failed: {e}")
            return False


class DatabaseSessionStore(SessionStore):
    """Store backed by one SQL table, accessed through a SQLAlchemy engine.

    Queries run in worker threads so the event loop never blocks on the
    database driver. The table can be created with :meth:`create_table` or
    with the DDL from :meth:`get_create_table_sql`.
    """

    def __init__(
        self,
        engine: Engine,
        table_name: str = SESSION_TABLE_NAME,
        key_column: str = "session_key",
        value_column: str = "session_data",
        expires_column: str = "expires_at",
        default_ttl: int = SESSION_TTL,
    ):
        self.engine = engine
        self.default_ttl = default_ttl
        self.key_column = key_column
        self.value_column = value_column
        self.expires_column = expires_column
        self.metadata = MetaData()
        self.table = build_session_table(
            self.metadata, table_name, key_column, value_column, expires_column
        )

    @property
    def _key_col(self):
        return self.table.c[self.key_column]

    @property
    def _value_col(self):
        return self.table.c[self.value_column]

    @property
    def _expires_col(self):
        return self.table.c[self.expires_column]

    def _not_expired(self):
        return or_(self._expires_col.is_(None), self._expires_col > utcnow())

    # --- synchronous bodies, run via asyncio.to_thread ---

    def _get_sync(self, key: str) -> Optional[str]:
        stmt = select(self._value_col).where(self._key_col == key, self._not_expired())
        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar_one_or_none()

    def _upsert_statement(self, values: dict):
        dialect = self.engine.dialect.name
        update_cols = [self.value_column, self.expires_column, "updated_at"]

        if dialect in ("sqlite", "postgresql"):
            if dialect == "sqlite":
                from sqlalchemy.dialects.sqlite import insert as dialect_insert
            else:
                from sqlalchemy.dialects.postgresql import insert as dialect_insert
            stmt = dialect_insert(self.table).values(**values)
            return stmt.on_conflict_do_update(
                index_elements=[self.key_column],
                set_={col: stmt.excluded[col] for col in update_cols},
            )

        if dialect in ("mysql", "mariadb"):
            from sqlalchemy.dialects.mysql import insert as dialect_insert
            stmt = dialect_insert(self.table).values(**values)
            return stmt.on_duplicate_key_update(
                {col: stmt.inserted[col] for col in update_cols}
            )

        return None

    def _set_sync(self, key: str, serialized: str, ttl: int) -> None:
        now = utcnow()
        expires_at = now + timedelta(seconds=ttl) if ttl > 0 else None
        values = {
            self.key_column: key,
            self.value_column: serialized,
            self.expires_column: expires_at,
            "updated_at": now,
        }

        with self.engine.begin() as conn:
            stmt = self._upsert_statement(values)
            if stmt is not None:
                conn.execute(stmt)
            else:
                conn.execute(delete(self.table).where(self._key_col == key))
                conn.execute(insert(self.table).values(**values))

    def _delete_sync(self, key: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(self.table).where(self._key_col == key))

    def _clear_sync(self) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(self.table))

    def _cleanup_sync(self) -> int:
        with self.engine.begin() as conn:
            result = conn.execute(delete(self.table).where(self._expires_col <= utcnow()))
            return result.rowcount or 0

    # --- async contract ---

    async def get(self, key: str) -> Optional[SessionData]:
        try:
            raw = await asyncio.to_thread(self._get_sync, key)
            return json.loads(raw) if raw else None
        except (SQLAlchemyError, ValueError) as e:
            logger.warning(f"Database get failed, treating session as absent: {e}")
            return None

    async def set(self, key: str, value: SessionData, ttl: Optional[int] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        try:
            await asyncio.to_thread(self._set_sync, key, json.dumps(value), ttl)
        except (SQLAlchemyError, TypeError, ValueError) as e:
            logger.error(f"Database set failed: {e}")
            raise XUISessionStoreError(f"Failed to store session in database: {e}", e)

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._delete_sync, key)
        except SQLAlchemyError as e:
            logger.warning(f"Database delete failed: {e}")

    async def clear(self) -> None:
        try:
            await asyncio.to_thread(self._clear_sync)
        except SQLAlchemyError as e:
            logger.warning(f"Database clear failed: {e}")

    async def cleanup_expired(self) -> int:
        """Delete expired rows.

        Returns:
            Number of rows removed (0 on failure)
        """
        try:
            removed = await asyncio.to_thread(self._cleanup_sync)
            logger.info(f"Removed {removed} expired session(s)")
            return removed
        except SQLAlchemyError as e:
            logger.warning(f"Database cleanup failed: {e}")
            return 0

    async def create_table(self) -> None:
        """Create the session table if it does not exist."""
        await asyncio.to_thread(self.metadata.create_all, self.engine)

    @staticmethod
    def get_create_table_sql(table_name: str = "sessions", dialect: Optional[Dialect] = None) -> str:
        """Canonical DDL for the session table, for hosts that manage schema themselves.

        Args:
            table_name: Name of the table
            dialect: SQLAlchemy dialect to render for (generic SQL if omitted)
        """
        table = build_session_table(MetaData(), table_name)
        statements = [str(CreateTable(table).compile(dialect=dialect)).strip()]
        statements.extend(
            str(CreateIndex(index).compile(dialect=dialect)).strip() for index in table.indexes
        )
        return ";\n".join(statements) + ";"


Handler = Callable[..., Union[Any, Awaitable[Any]]]


class CustomSessionHandler(SessionStore):
    """Store that delegates to caller-supplied functions (sync or async).

    Failures of the getters become ``None``/``False``; failures of the setter
    become XUISessionStoreError. Raw exceptions never escape.
    """

    def __init__(
        self,
        get_session: Handler,
        set_session: Handler,
        delete_session: Handler,
        clear_sessions: Optional[Handler] = None,
        validate_session: Optional[Handler] = None,
    ):
        if not all(callable(h) for h in (get_session, set_session, delete_session)):
            raise XUIConfigError("Custom session handler needs get, set and delete callables")
        self._get = get_session
        self._set = set_session
        self._delete = delete_session
        self._clear = clear_sessions
        self._validate = validate_session

    @staticmethod
    async def _call(handler: Handler, *args) -> Any:
        result = handler(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def get(self, key: str) -> Optional[SessionData]:
        try:
            return await self._call(self._get, key)
        except Exception as e:
            logger.warning(f"Custom session get failed: {e}")
            return None

    async def set(self, key: str, value: SessionData, ttl: Optional[int] = None) -> None:
        try:
            await self._call(self._set, key, value, ttl)
        except Exception as e:
            logger.error(f"Custom session set failed: {e}")
            raise XUISessionStoreError(f"Custom session handler failed to store session: {e}", e)

    async def delete(self, key: str) -> None:
        try:
            await self._call(self._delete, key)
        except Exception as e:
            logger.warning(f"Custom session delete failed: {e}")

    async def clear(self) -> None:
        if self._clear is None:
            logger.info("Custom session handler has no clear function, nothing cleared")
            return
        try:
            await self._call(self._clear)
        except Exception as e:
            logger.warning(f"Custom session clear failed: {e}")

    async def exists(self, key: str) -> bool:
        try:
            if self._validate is not None:
                return bool(await self._call(self._validate, key))
            return await self.get(key) is not None
        except Exception as e:
            logger.warning(f"Custom session validate failed: {e}")
            return False
