"""Booking ORM models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin
from app.core.enums import BookingStatusEnum, ProfessionalTypeEnum


class Booking(BaseModelMixin, Base):
    """Service booking between a customer and a professional.

    Lifecycle timestamps are written once by the transition that owns them
    and never cleared. Rows are never deleted.
    """

    __tablename__ = "bookings"

    customer_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    professional_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    professional_type: Mapped[ProfessionalTypeEnum] = mapped_column(
        SAEnum(ProfessionalTypeEnum, name="professional_type_enum", native_enum=False),
        nullable=False,
    )
    service_category: Mapped[str] = mapped_column(String(128), nullable=False)

    scheduled_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    estimated_duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[BookingStatusEnum] = mapped_column(
        SAEnum(BookingStatusEnum, name="booking_status_enum", native_enum=False),
        default=BookingStatusEnum.PENDING,
        nullable=False,
        index=True,
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    service_address: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    estimated_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    project_details: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    reference_images: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)
    progress_photos: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)
