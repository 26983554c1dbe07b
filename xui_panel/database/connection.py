"""Database engine helpers for the session store."""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from ..config.settings import SESSION_DATABASE_URL


def create_db_engine(database_url: str | None = None, echo: bool = False) -> Engine:
    """Create database engine.

    Args:
        database_url: SQLAlchemy URL. Uses XUI_SESSION_DATABASE_URL if not provided.
        echo: If True, log all SQL statements.

    Returns:
        SQLAlchemy engine instance.
    """
    url = make_url(database_url or SESSION_DATABASE_URL)

    if url.get_backend_name() == "sqlite":
        # Ensure directory exists for file databases
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False}  # Store runs queries in worker threads
        )

    return create_engine(url, echo=echo, pool_pre_ping=True)


# For testing: in-memory database
def init_test_db() -> Engine:
    """In-memory SQLite engine sharing one connection across threads."""
    return create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
