"""Notifications repository layer."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import NotificationStatusEnum, NotificationTypeEnum
from app.modules.notifications.models import Notification


class NotificationsRepository:
    """DB operations for notifications domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_notification(
        self,
        user_id: UUID,
        type: NotificationTypeEnum,
        channel: str,
        title: str,
        body: str,
        data: dict,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type,
            channel=channel,
            title=title,
            body=body,
            data=data,
        )
        self.session.add(notification)
        await self.session.flush()
        return notification

    async def get_notification_by_id(self, notification_id: UUID) -> Notification | None:
        stmt = select(Notification).where(Notification.id == notification_id)
        return await self.session.scalar(stmt)

    async def list_notifications_for_user(
        self,
        user_id: UUID,
        limit: int,
        offset: int,
        unread_only: bool = False,
    ) -> tuple[Sequence[Notification], int]:
        base_stmt: Select[tuple[Notification]] = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            base_stmt = base_stmt.where(Notification.is_read.is_(False))
        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(Notification.created_at.desc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return items, total

    async def set_status(
        self,
        notification: Notification,
        status: NotificationStatusEnum,
        sent_at: datetime | None,
    ) -> Notification:
        notification.status = status
        notification.sent_at = sent_at
        await self.session.flush()
        return notification

    async def mark_read(self, notification: Notification, read_at: datetime) -> Notification:
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = read_at
            await self.session.flush()
        return notification

    async def count_by_status(self) -> dict[NotificationStatusEnum, int]:
        stmt = select(Notification.status, func.count()).group_by(Notification.status)
        rows = (await self.session.execute(stmt)).all()
        return {status: int(count) for status, count in rows}
