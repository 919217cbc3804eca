"""Notifications schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.core.enums import NotificationStatusEnum, NotificationTypeEnum


class NotificationRead(BaseModel):
    """Notification response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    type: NotificationTypeEnum
    channel: str
    title: str
    body: str
    data: dict
    status: NotificationStatusEnum
    sent_at: datetime | None
    is_read: bool
    read_at: datetime | None
    created_at: datetime


class NotificationDeliveryMetricsRead(BaseModel):
    """Snapshot of the notification delivery pipeline."""

    notifications_total: int
    notifications_pending: int
    notifications_sent: int
    notifications_failed: int
    outbox_total: int
    outbox_pending: int
    outbox_processed: int
    outbox_failed: int
    outbox_retryable_failed: int
    outbox_dead_letter: int
    max_retries: int
