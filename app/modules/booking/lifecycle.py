"""Booking status state machine."""

from __future__ import annotations

from datetime import datetime

from app.core.enums import BookingStatusEnum
from app.modules.booking.models import Booking
from app.shared.exceptions import InvalidTransitionException

S = BookingStatusEnum

TRANSITIONS: dict[BookingStatusEnum, frozenset[BookingStatusEnum]] = {
    S.PENDING: frozenset({S.CONFIRMED, S.REJECTED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.IN_PROGRESS, S.CANCELLED}),
    S.IN_PROGRESS: frozenset({S.COMPLETED, S.DISPUTED}),
    S.DISPUTED: frozenset({S.RESOLVED}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
    S.REJECTED: frozenset(),
    S.RESOLVED: frozenset(),
}

ACTIVE_STATUSES = frozenset({S.PENDING, S.CONFIRMED, S.IN_PROGRESS})
TERMINAL_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)
CANCELLABLE_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if S.CANCELLED in targets)

_missing = set(BookingStatusEnum) - set(TRANSITIONS)
if _missing:
    raise RuntimeError(f"Transition table has no entry for: {sorted(_missing)}")


def is_transition_allowed(current: BookingStatusEnum, target: BookingStatusEnum) -> bool:
    return target in TRANSITIONS[current]


def ensure_transition_allowed(current: BookingStatusEnum, target: BookingStatusEnum) -> None:
    if not is_transition_allowed(current, target):
        raise InvalidTransitionException(current_status=current.value, target_status=target.value)


def apply_transition(
    booking: Booking,
    target: BookingStatusEnum,
    now: datetime,
    reason: str | None = None,
) -> BookingStatusEnum:
    """Move booking to target status and stamp the matching timestamp.

    Validation happens before any attribute is touched, so a rejected
    transition leaves the record exactly as it was. Returns the previous
    status.
    """
    previous = booking.status
    ensure_transition_allowed(previous, target)

    booking.status = target
    if target == S.IN_PROGRESS:
        booking.started_at = now
    elif target == S.COMPLETED:
        booking.completed_at = now
    elif target == S.CANCELLED:
        created_at = booking.created_at
        booking.cancelled_at = max(now, created_at) if created_at is not None else now
        booking.cancellation_reason = reason if reason is not None else ""
    return previous
