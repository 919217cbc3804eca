"""Notification delivery channels."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from app.core.enums import NotificationStatusEnum, NotificationTypeEnum
from app.modules.notifications.repository import NotificationsRepository
from app.shared.utils import utc_now


@dataclass(slots=True)
class NotificationMessage:
    user_id: UUID
    type: NotificationTypeEnum
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)
    channel: str = "in_app"


class NotificationSender(Protocol):
    async def send(self, message: NotificationMessage) -> None: ...


class InAppNotificationSender:
    """Deliver by storing the notification for the recipient's inbox."""

    def __init__(self, repository: NotificationsRepository, now_provider=utc_now) -> None:
        self.repository = repository
        self.now_provider = now_provider

    async def send(self, message: NotificationMessage) -> None:
        notification = await self.repository.create_notification(
            user_id=message.user_id,
            type=message.type,
            channel=message.channel,
            title=message.title,
            body=message.body,
            data=message.data,
        )
        sent_at: datetime = self.now_provider()
        await self.repository.set_status(notification, NotificationStatusEnum.SENT, sent_at)
