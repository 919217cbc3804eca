"""Collaborator interfaces consumed by the booking engine."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol
from uuid import UUID

from app.core.enums import BookingStatusEnum, ProfessionalTypeEnum, RoleEnum

if TYPE_CHECKING:
    from app.modules.booking.conflicts import BookingWindow
    from app.modules.booking.events import BookingEvent
    from app.modules.booking.models import Booking


@dataclass(frozen=True, slots=True)
class PartyRecord:
    """Eligibility view of a customer or professional."""

    id: UUID
    is_eligible: bool
    professional_type: ProfessionalTypeEnum | None = None


class BookingStore(Protocol):
    async def get_booking_by_id(self, booking_id: UUID, for_update: bool = False) -> Booking | None: ...

    async def lock_professional_schedule(self, professional_id: UUID) -> None: ...

    async def find_active_windows_for_professional(
        self,
        professional_id: UUID,
        window: BookingWindow,
    ) -> Sequence[BookingWindow]: ...

    async def create_booking(self, **fields: Any) -> Booking: ...

    async def save(self, booking: Booking) -> Booking: ...

    async def list_bookings(
        self,
        owner_id: UUID,
        role: RoleEnum,
        statuses: frozenset[BookingStatusEnum] | None,
        limit: int,
        offset: int,
    ) -> tuple[Sequence[Booking], int]: ...


class PartyDirectory(Protocol):
    async def get_customer(self, user_id: UUID) -> PartyRecord | None: ...

    async def get_professional(self, user_id: UUID) -> PartyRecord | None: ...


class BookingEventSubscriber(Protocol):
    """Receives each published booking event; may raise, never blocks the write."""

    async def __call__(self, event: BookingEvent) -> None: ...
