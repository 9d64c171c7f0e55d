"""UTC time helpers shared by services and adapters."""

from __future__ import annotations

from datetime import UTC, datetime


def now_utc() -> datetime:
    """Return the current timezone-aware UTC instant."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Label naive datetimes as UTC; convert aware ones to UTC.

    SQLite drops offsets on ``DateTime(timezone=True)`` columns, so values
    read back from it are naive even though they were written in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
