"""Database package for persisted panel sessions."""

from .connection import (
    create_db_engine,
    init_test_db,
)
from .models import build_session_table, utcnow

__all__ = [
    # Models
    "build_session_table",
    "utcnow",
    # Connection
    "create_db_engine",
    "init_test_db",
]
