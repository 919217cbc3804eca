"""Outbox consumer that turns booking and dispute events into notifications."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from uuid import UUID

from app.core.enums import NotificationTypeEnum
from app.modules.audit.models import OutboxEvent
from app.modules.audit.repository import AuditRepository
from app.modules.notifications.senders import NotificationMessage, NotificationSender
from app.shared.utils import utc_now

logger = logging.getLogger(__name__)

# Events recorded for audit trail only; nobody is notified.
SILENT_EVENT_TYPES = frozenset({"booking.disputed", "booking.resolved"})

_CUSTOMER_STATUS_MESSAGES: dict[str, tuple[NotificationTypeEnum, str, str]] = {
    "booking.confirmed": (
        NotificationTypeEnum.BOOKING_CONFIRMED,
        "Booking confirmed",
        "Your {service_category} booking has been confirmed.",
    ),
    "booking.rejected": (
        NotificationTypeEnum.BOOKING_REJECTED,
        "Booking declined",
        "The professional declined your {service_category} booking.",
    ),
    "booking.started": (
        NotificationTypeEnum.BOOKING_STARTED,
        "Work started",
        "Work on your {service_category} booking has started.",
    ),
}


class NotificationsOutboxWorker:
    """Process outbox events and send user notifications."""

    def __init__(
        self,
        audit_repository: AuditRepository,
        sender: NotificationSender,
        *,
        batch_size: int = 100,
        max_retries: int = 5,
        base_backoff_seconds: int = 30,
        max_backoff_seconds: int = 300,
        send_timeout_seconds: float = 5.0,
        now_provider=utc_now,
    ) -> None:
        self.audit_repository = audit_repository
        self.sender = sender
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.base_backoff_seconds = base_backoff_seconds
        self.max_backoff_seconds = max_backoff_seconds
        self.send_timeout_seconds = send_timeout_seconds
        self.now_provider = now_provider

    async def run_once(self) -> dict[str, int]:
        """Run one processing cycle."""
        stats = {"requeued": 0, "processed": 0, "failed": 0, "dispatched": 0}
        stats["requeued"] = await self._requeue_retryable_failed_events()

        events = await self.audit_repository.list_pending_outbox(limit=self.batch_size, lock=True)
        for event in events:
            try:
                messages = self._build_messages(event)
                # All of an event's notifications land together or not at all.
                async with self.audit_repository.savepoint():
                    for message in messages:
                        await self._send(message)
                stats["dispatched"] += len(messages)

                await self.audit_repository.mark_outbox_processed(event, self.now_provider())
                stats["processed"] += 1
            except Exception as exc:
                logger.warning("Outbox event %s (%s) failed: %s", event.id, event.event_type, exc)
                await self.audit_repository.mark_outbox_failed(event, str(exc) or type(exc).__name__)
                stats["failed"] += 1
        return stats

    async def _send(self, message: NotificationMessage) -> None:
        try:
            await asyncio.wait_for(self.sender.send(message), timeout=self.send_timeout_seconds)
        except TimeoutError as exc:
            raise TimeoutError(
                f"Notification send to {message.user_id} exceeded {self.send_timeout_seconds}s",
            ) from exc

    async def _requeue_retryable_failed_events(self) -> int:
        now = self.now_provider()
        failed_events = await self.audit_repository.list_failed_outbox(
            limit=self.batch_size,
            max_retries=self.max_retries,
        )
        requeued = 0
        for event in failed_events:
            if self._is_backoff_elapsed(event, now):
                await self.audit_repository.mark_outbox_pending(event)
                requeued += 1
        return requeued

    def _is_backoff_elapsed(self, event: OutboxEvent, now: datetime) -> bool:
        retries = max(event.retries, 1)
        backoff_seconds = min(
            self.max_backoff_seconds,
            self.base_backoff_seconds * (2 ** (retries - 1)),
        )
        last_attempt_at = event.updated_at or event.occurred_at
        return now >= last_attempt_at + timedelta(seconds=backoff_seconds)

    def _build_messages(self, event: OutboxEvent) -> list[NotificationMessage]:
        payload = event.payload or {}
        event_type = event.event_type

        if event_type in SILENT_EVENT_TYPES:
            return []

        if event_type == "booking.created":
            professional_id = self._required_uuid(payload, "professional_id")
            return [
                NotificationMessage(
                    user_id=professional_id,
                    type=NotificationTypeEnum.BOOKING_CREATED,
                    title="New booking request",
                    body=f"You have a new {payload.get('service_category', 'service')} booking request.",
                    data=self._booking_data(payload),
                ),
            ]

        if event_type in _CUSTOMER_STATUS_MESSAGES:
            notification_type, title, body = _CUSTOMER_STATUS_MESSAGES[event_type]
            customer_id = self._required_uuid(payload, "customer_id")
            return [
                NotificationMessage(
                    user_id=customer_id,
                    type=notification_type,
                    title=title,
                    body=body.format(service_category=payload.get("service_category", "service")),
                    data=self._booking_data(payload),
                ),
            ]

        if event_type == "booking.completed":
            customer_id = self._required_uuid(payload, "customer_id")
            return [
                NotificationMessage(
                    user_id=customer_id,
                    type=NotificationTypeEnum.BOOKING_COMPLETED,
                    title="Booking completed",
                    body="Your booking is complete. Please rate your experience.",
                    data={
                        "booking_id": payload.get("booking_id"),
                        "professional_id": payload.get("professional_id"),
                        "service_category": payload.get("service_category"),
                        "professional_type": payload.get("professional_type"),
                    },
                ),
            ]

        if event_type == "booking.cancelled":
            reason = payload.get("reason") or ""
            recipients = self._unique_recipients(
                self._optional_uuid(payload, "customer_id"),
                self._optional_uuid(payload, "professional_id"),
            )
            data = self._booking_data(payload)
            data["reason"] = reason
            return [
                NotificationMessage(
                    user_id=user_id,
                    type=NotificationTypeEnum.BOOKING_CANCELLED,
                    title="Booking cancelled",
                    body=f"Booking was cancelled. Reason: {reason}" if reason else "Booking was cancelled.",
                    data=dict(data),
                )
                for user_id in recipients
            ]

        if event_type == "dispute.resolved":
            recipients = self._unique_recipients(
                self._optional_uuid(payload, "reporter_id"),
                self._optional_uuid(payload, "reported_user_id"),
            )
            return [
                NotificationMessage(
                    user_id=user_id,
                    type=NotificationTypeEnum.DISPUTE_RESOLVED,
                    title="Dispute resolved",
                    body=payload.get("resolution_notes") or "Your dispute has been resolved.",
                    data={
                        "dispute_id": payload.get("dispute_id"),
                        "booking_id": payload.get("booking_id"),
                    },
                )
                for user_id in recipients
            ]

        logger.debug("No notification mapping for outbox event type %s", event_type)
        return []

    @staticmethod
    def _booking_data(payload: dict) -> dict:
        return {
            "booking_id": payload.get("booking_id"),
            "service_category": payload.get("service_category"),
            "scheduled_date": payload.get("scheduled_date"),
        }

    @staticmethod
    def _required_uuid(payload: dict, key: str) -> UUID:
        value = payload.get(key)
        if value is None:
            raise ValueError(f"Missing required key: {key}")
        return UUID(str(value))

    @staticmethod
    def _optional_uuid(payload: dict, key: str) -> UUID | None:
        value = payload.get(key)
        if value is None:
            return None
        return UUID(str(value))

    @staticmethod
    def _unique_recipients(*recipients: UUID | None) -> list[UUID]:
        unique: list[UUID] = []
        seen: set[UUID] = set()
        for recipient in recipients:
            if recipient is not None and recipient not in seen:
                unique.append(recipient)
                seen.add(recipient)
        return unique
