"""Notifications ORM models."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BaseModelMixin
from app.core.enums import NotificationStatusEnum, NotificationTypeEnum

if TYPE_CHECKING:
    from app.modules.identity.models import User


class Notification(BaseModelMixin, Base):
    """Message addressed to one user."""

    __tablename__ = "notifications"

    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type: Mapped[NotificationTypeEnum] = mapped_column(
        SAEnum(NotificationTypeEnum, name="notification_type_enum", native_enum=False),
        nullable=False,
        index=True,
    )
    channel: Mapped[str] = mapped_column(String(32), default="in_app", nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)
    status: Mapped[NotificationStatusEnum] = mapped_column(
        SAEnum(NotificationStatusEnum, name="notification_status_enum", native_enum=False),
        default=NotificationStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped["User"] = relationship(back_populates="notifications")
