"""Disputes ORM models."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin
from app.core.enums import DisputeStatusEnum, IssueTypeEnum


class Dispute(BaseModelMixin, Base):
    """Complaint raised by one party of a booking against the other."""

    __tablename__ = "disputes"

    booking_id: Mapped[UUID] = mapped_column(ForeignKey("bookings.id", ondelete="RESTRICT"), nullable=False, index=True)
    reporter_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    reported_user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    issue_type: Mapped[IssueTypeEnum] = mapped_column(
        SAEnum(IssueTypeEnum, name="issue_type_enum", native_enum=False),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    photos: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)
    status: Mapped[DisputeStatusEnum] = mapped_column(
        SAEnum(DisputeStatusEnum, name="dispute_status_enum", native_enum=False),
        default=DisputeStatusEnum.OPEN,
        nullable=False,
        index=True,
    )
    resolution_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    admin_action: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_by: Mapped[UUID | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
