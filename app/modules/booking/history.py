"""Active/past partition of booking history."""

from __future__ import annotations

from app.core.enums import BookingHistoryFilterEnum, BookingStatusEnum
from app.modules.booking.lifecycle import ACTIVE_STATUSES

PAST_STATUSES = frozenset(
    {
        BookingStatusEnum.COMPLETED,
        BookingStatusEnum.CANCELLED,
        BookingStatusEnum.REJECTED,
        BookingStatusEnum.DISPUTED,
        BookingStatusEnum.RESOLVED,
    },
)

if ACTIVE_STATUSES & PAST_STATUSES:
    raise RuntimeError(f"Statuses both active and past: {sorted(ACTIVE_STATUSES & PAST_STATUSES)}")
_unclassified = frozenset(BookingStatusEnum) - ACTIVE_STATUSES - PAST_STATUSES
if _unclassified:
    raise RuntimeError(f"Statuses missing from history partition: {sorted(_unclassified)}")


def statuses_for_filter(history_filter: BookingHistoryFilterEnum) -> frozenset[BookingStatusEnum] | None:
    """Status set for a history view; ``None`` means no restriction."""
    if history_filter == BookingHistoryFilterEnum.ACTIVE:
        return ACTIVE_STATUSES
    if history_filter == BookingHistoryFilterEnum.PAST:
        return PAST_STATUSES
    return None


def classify_status(status: BookingStatusEnum) -> BookingHistoryFilterEnum:
    return BookingHistoryFilterEnum.ACTIVE if status in ACTIVE_STATUSES else BookingHistoryFilterEnum.PAST
