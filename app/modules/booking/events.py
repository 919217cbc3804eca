"""Domain events emitted by booking creation and transitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.core.enums import BookingStatusEnum
from app.modules.booking.models import Booking

BOOKING_CREATED = "booking.created"

STATUS_EVENT_TYPES: dict[BookingStatusEnum, str] = {
    BookingStatusEnum.PENDING: BOOKING_CREATED,
    BookingStatusEnum.CONFIRMED: "booking.confirmed",
    BookingStatusEnum.REJECTED: "booking.rejected",
    BookingStatusEnum.IN_PROGRESS: "booking.started",
    BookingStatusEnum.COMPLETED: "booking.completed",
    BookingStatusEnum.CANCELLED: "booking.cancelled",
    BookingStatusEnum.DISPUTED: "booking.disputed",
    BookingStatusEnum.RESOLVED: "booking.resolved",
}

_missing = set(BookingStatusEnum) - set(STATUS_EVENT_TYPES)
if _missing:
    raise RuntimeError(f"No booking event type for: {sorted(_missing)}")


@dataclass(frozen=True, slots=True)
class BookingEvent:
    """Event published after a booking write; payload is JSON-safe."""

    event_type: str
    booking_id: str
    payload: dict[str, Any] = field(default_factory=dict)


def _base_payload(booking: Booking) -> dict[str, Any]:
    return {
        "booking_id": str(booking.id),
        "customer_id": str(booking.customer_id),
        "professional_id": str(booking.professional_id),
        "professional_type": booking.professional_type.value,
        "service_category": booking.service_category,
        "status": booking.status.value,
        "scheduled_date": booking.scheduled_date.isoformat(),
    }


def booking_created_event(booking: Booking) -> BookingEvent:
    return BookingEvent(event_type=BOOKING_CREATED, booking_id=str(booking.id), payload=_base_payload(booking))


def status_changed_event(booking: Booking, previous: BookingStatusEnum) -> BookingEvent:
    payload = _base_payload(booking)
    payload["previous_status"] = previous.value
    if booking.status == BookingStatusEnum.CANCELLED:
        payload["reason"] = booking.cancellation_reason
    return BookingEvent(
        event_type=STATUS_EVENT_TYPES[booking.status],
        booking_id=str(booking.id),
        payload=payload,
    )
