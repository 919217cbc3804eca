"""Booking repository layer."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from uuid import UUID

from sqlalchemy import Interval, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import BookingStatusEnum, RoleEnum
from app.modules.booking.conflicts import BookingWindow
from app.modules.booking.lifecycle import ACTIVE_STATUSES
from app.modules.booking.models import Booking
from app.modules.professionals.models import ProfessionalProfile


class BookingRepository:
    """DB operations for booking domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_booking_by_id(self, booking_id: UUID, for_update: bool = False) -> Booking | None:
        stmt = select(Booking).where(Booking.id == booking_id)
        if for_update:
            # The locked row wins over any copy already in the identity map.
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return await self.session.scalar(stmt)

    async def lock_professional_schedule(self, professional_id: UUID) -> None:
        """Hold the professional's profile row until the transaction ends.

        Concurrent creations for the same professional queue here, so the
        conflict read and the insert that follows cannot interleave.
        """
        stmt = (
            select(ProfessionalProfile.id)
            .where(ProfessionalProfile.user_id == professional_id)
            .with_for_update()
        )
        await self.session.execute(stmt)

    async def find_active_windows_for_professional(
        self,
        professional_id: UUID,
        window: BookingWindow,
    ) -> list[BookingWindow]:
        ends_at = Booking.scheduled_date + func.make_interval(
            0, 0, 0, 0, 0, Booking.estimated_duration_minutes, type_=Interval(),
        )
        stmt = select(Booking.scheduled_date, Booking.estimated_duration_minutes).where(
            Booking.professional_id == professional_id,
            Booking.status.in_(sorted(ACTIVE_STATUSES)),
            Booking.scheduled_date < window.end,
            ends_at > window.start,
        )
        rows = (await self.session.execute(stmt)).all()
        return [BookingWindow.from_duration(start, duration) for start, duration in rows]

    async def create_booking(self, **fields: Any) -> Booking:
        booking = Booking(status=BookingStatusEnum.PENDING, **fields)
        self.session.add(booking)
        await self.session.flush()
        return booking

    async def save(self, booking: Booking) -> Booking:
        await self.session.flush()
        return booking

    async def list_bookings(
        self,
        owner_id: UUID,
        role: RoleEnum,
        statuses: frozenset[BookingStatusEnum] | None,
        limit: int,
        offset: int,
    ) -> tuple[Sequence[Booking], int]:
        base_stmt: Select[tuple[Booking]] = select(Booking)

        if role == RoleEnum.PROFESSIONAL:
            base_stmt = base_stmt.where(Booking.professional_id == owner_id)
        else:
            base_stmt = base_stmt.where(Booking.customer_id == owner_id)
        if statuses is not None:
            base_stmt = base_stmt.where(Booking.status.in_(sorted(statuses)))

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(Booking.created_at.desc(), Booking.id.desc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return items, total
