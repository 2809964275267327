"""Time helpers for UTC handling at the storage boundary."""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return timezone-aware current UTC datetime."""
    return datetime.now(UTC)


def to_naive_utc(value: datetime) -> datetime:
    """Convert to a naive UTC datetime, the form DATETIME2 columns store.

    Naive input is assumed to already be UTC and is returned unchanged.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
