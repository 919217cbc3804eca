"""Scheduling conflict detection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from app.shared.utils import add_minutes

if TYPE_CHECKING:
    from app.modules.booking.ports import BookingStore


@dataclass(frozen=True, slots=True)
class BookingWindow:
    """Half-open time interval ``[start, end)`` occupied by a booking."""

    start: datetime
    end: datetime

    @classmethod
    def from_duration(cls, start: datetime, duration_minutes: int) -> BookingWindow:
        return cls(start=start, end=add_minutes(start, duration_minutes))

    def overlaps(self, other: BookingWindow) -> bool:
        # Touching windows (one ends exactly when the other starts) do not overlap.
        return self.start < other.end and other.start < self.end


class ConflictDetector:
    """Decide whether a proposed window collides with a professional's active bookings."""

    def __init__(self, store: BookingStore) -> None:
        self.store = store

    async def has_conflict(self, professional_id: UUID, window: BookingWindow) -> bool:
        candidates = await self.store.find_active_windows_for_professional(professional_id, window)
        return any(window.overlaps(existing) for existing in candidates)
