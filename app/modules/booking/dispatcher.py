"""Post-write side-effect dispatch for booking events."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from app.core.metrics import record_side_effect_failure
from app.modules.audit.repository import AuditRepository
from app.modules.booking.events import BookingEvent
from app.modules.booking.ports import BookingEventSubscriber

logger = logging.getLogger(__name__)


class SideEffectDispatcher:
    """Fan booking events out to subscribers.

    Every subscriber is called on its own; one raising does not stop the
    others and never reaches the caller, whose write is already done.
    """

    def __init__(self, subscribers: Iterable[BookingEventSubscriber] = ()) -> None:
        self._subscribers: tuple[BookingEventSubscriber, ...] = tuple(subscribers)

    async def dispatch(self, events: Iterable[BookingEvent]) -> None:
        for event in events:
            for subscriber in self._subscribers:
                try:
                    await subscriber(event)
                except Exception:
                    logger.exception(
                        "Booking side effect failed: event=%s booking_id=%s subscriber=%r",
                        event.event_type,
                        event.booking_id,
                        subscriber,
                    )
                    record_side_effect_failure(event.event_type)


class OutboxEventRecorder:
    """Persist booking events into the transactional outbox."""

    def __init__(self, audit_repository: AuditRepository) -> None:
        self.audit_repository = audit_repository

    async def __call__(self, event: BookingEvent) -> None:
        async with self.audit_repository.savepoint():
            await self.audit_repository.create_outbox_event(
                aggregate_type="booking",
                aggregate_id=event.booking_id,
                event_type=event.event_type,
                payload=event.payload,
            )
