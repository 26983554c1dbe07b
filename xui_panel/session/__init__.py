"""Session caching for panel logins.

Usage:
    from xui_panel.session import SessionManager, RedisSessionStore

    manager = SessionManager(RedisSessionStore(redis_client))
    client = ThreeXUI(url, username, password, session_manager=manager)
"""

from .manager import SESSION_KEY_PREFIX, SessionManager
from .stores import (
    CustomSessionHandler,
    DatabaseSessionStore,
    MemorySessionStore,
    RedisSessionStore,
    SessionStore,
)

__all__ = [
    # Manager
    "SessionManager",
    "SESSION_KEY_PREFIX",
    # Stores
    "SessionStore",
    "MemorySessionStore",
    "RedisSessionStore",
    "DatabaseSessionStore",
    "CustomSessionHandler",
]
