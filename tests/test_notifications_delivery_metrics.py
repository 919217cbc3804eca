from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from app.core.enums import NotificationStatusEnum, OutboxStatusEnum
from app.modules.notifications.service import NotificationsService
from app.shared.exceptions import NotFoundException, UnauthorizedException


@dataclass
class FakeNotificationsRepository:
    notification_counts: dict[NotificationStatusEnum, int] = field(default_factory=dict)
    notifications: dict[UUID, SimpleNamespace] = field(default_factory=dict)

    async def count_by_status(self) -> dict[NotificationStatusEnum, int]:
        return self.notification_counts

    async def get_notification_by_id(self, notification_id: UUID) -> SimpleNamespace | None:
        return self.notifications.get(notification_id)

    async def mark_read(self, notification: SimpleNamespace, read_at: datetime) -> SimpleNamespace:
        notification.is_read = True
        notification.read_at = read_at
        return notification


@dataclass
class FakeAuditRepository:
    outbox_counts: dict[OutboxStatusEnum, int] = field(default_factory=dict)
    retryable_failed: int = 0
    dead_letter: int = 0

    async def count_outbox_by_status(self) -> dict[OutboxStatusEnum, int]:
        return self.outbox_counts

    async def count_failed_outbox_by_retry_budget(self, max_retries: int) -> tuple[int, int]:
        return self.retryable_failed, self.dead_letter


def make_service(
    repository: FakeNotificationsRepository | None = None,
    audit_repository: FakeAuditRepository | None = None,
) -> NotificationsService:
    return NotificationsService(
        repository=repository or FakeNotificationsRepository(),  # type: ignore[arg-type]
        audit_repository=audit_repository or FakeAuditRepository(),  # type: ignore[arg-type]
    )


@pytest.mark.asyncio
async def test_delivery_metrics_aggregates_notifications_and_outbox_counts() -> None:
    service = make_service(
        FakeNotificationsRepository(
            notification_counts={
                NotificationStatusEnum.PENDING: 3,
                NotificationStatusEnum.SENT: 7,
                NotificationStatusEnum.FAILED: 2,
            },
        ),
        FakeAuditRepository(
            outbox_counts={
                OutboxStatusEnum.PENDING: 4,
                OutboxStatusEnum.PROCESSED: 10,
                OutboxStatusEnum.FAILED: 5,
            },
            retryable_failed=3,
            dead_letter=2,
        ),
    )

    metrics = await service.get_delivery_metrics(max_retries=5)

    assert metrics.notifications_total == 12
    assert metrics.notifications_pending == 3
    assert metrics.notifications_sent == 7
    assert metrics.notifications_failed == 2
    assert metrics.outbox_total == 19
    assert metrics.outbox_pending == 4
    assert metrics.outbox_processed == 10
    assert metrics.outbox_failed == 5
    assert metrics.outbox_retryable_failed == 3
    assert metrics.outbox_dead_letter == 2
    assert metrics.max_retries == 5


@pytest.mark.asyncio
async def test_delivery_metrics_defaults_missing_statuses_to_zero() -> None:
    service = make_service(audit_repository=FakeAuditRepository(outbox_counts={OutboxStatusEnum.PENDING: 1}))

    metrics = await service.get_delivery_metrics(max_retries=3)

    assert metrics.notifications_total == 0
    assert metrics.notifications_sent == 0
    assert metrics.outbox_total == 1
    assert metrics.outbox_pending == 1
    assert metrics.outbox_processed == 0
    assert metrics.outbox_failed == 0


@pytest.mark.asyncio
async def test_recipient_marks_notification_read() -> None:
    recipient_id = uuid4()
    notification = SimpleNamespace(id=uuid4(), user_id=recipient_id, is_read=False, read_at=None)
    service = make_service(FakeNotificationsRepository(notifications={notification.id: notification}))

    updated = await service.mark_read(notification.id, SimpleNamespace(id=recipient_id))

    assert updated.is_read is True
    assert updated.read_at is not None


@pytest.mark.asyncio
async def test_other_user_cannot_mark_notification_read() -> None:
    notification = SimpleNamespace(id=uuid4(), user_id=uuid4(), is_read=False, read_at=None)
    service = make_service(FakeNotificationsRepository(notifications={notification.id: notification}))

    with pytest.raises(UnauthorizedException):
        await service.mark_read(notification.id, SimpleNamespace(id=uuid4()))
    assert notification.is_read is False


@pytest.mark.asyncio
async def test_mark_read_unknown_notification_is_not_found() -> None:
    service = make_service()

    with pytest.raises(NotFoundException):
        await service.mark_read(uuid4(), SimpleNamespace(id=uuid4()))
