"""Shared utility functions."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Normalize datetime to UTC timezone; naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def add_minutes(dt: datetime, minutes: int) -> datetime:
    """Shift datetime by a number of minutes."""
    return dt + timedelta(minutes=minutes)
