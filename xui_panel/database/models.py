"""SQLAlchemy table definition for persisted panel sessions."""

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    MetaData,
    String,
    Table,
    Text,
)


def utcnow() -> datetime:
    """Naive UTC timestamp (the column type stores no timezone)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def build_session_table(
    metadata: MetaData,
    table_name: str = "sessions",
    key_column: str = "session_key",
    value_column: str = "session_data",
    expires_column: str = "expires_at",
) -> Table:
    """Session table with caller-chosen table and column names.

    One row per session key; ``expires_column`` is NULL for sessions that
    never expire.
    """
    return Table(
        table_name,
        metadata,
        Column(key_column, String(255), primary_key=True),
        Column(value_column, Text, nullable=False),
        Column(expires_column, DateTime, nullable=True),
        Column("created_at", DateTime, default=utcnow),
        Column("updated_at", DateTime, default=utcnow, onupdate=utcnow),
        Index(f"idx_{table_name}_expires", expires_column),
    )
