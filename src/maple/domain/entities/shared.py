"""Shared utilities and helper functions for domain entities.

Pure utility functions with zero external dependencies.
"""

from datetime import UTC, datetime


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure datetime is timezone-aware with UTC.

    Naive values are taken to already be UTC (SQLite drops tzinfo on read).
    Aware values in another zone are converted.
    """
    if dt is None:
        return None
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt.astimezone(UTC)


def is_unset_id(value: int | None) -> bool:
    """Return True when an identifier means "not yet persisted"."""
    return value is None or value == 0
