"""Booking business logic layer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from typing import TypeVar
from uuid import UUID, uuid4

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import BookingHistoryFilterEnum, BookingStatusEnum, ProfessionalTypeEnum, RoleEnum
from app.core.metrics import record_booking_conflict, record_booking_transition
from app.modules.audit.repository import AuditRepository
from app.modules.booking.conflicts import BookingWindow, ConflictDetector
from app.modules.booking.dispatcher import OutboxEventRecorder, SideEffectDispatcher
from app.modules.booking.events import booking_created_event, status_changed_event
from app.modules.booking.history import statuses_for_filter
from app.modules.booking.lifecycle import apply_transition
from app.modules.booking.models import Booking
from app.modules.booking.ports import BookingStore, PartyDirectory
from app.modules.booking.repository import BookingRepository
from app.modules.booking.schemas import BookingCreate, ProgressPhotoCreate
from app.modules.identity.models import User
from app.modules.identity.parties import IdentityPartyDirectory
from app.modules.identity.repository import IdentityRepository
from app.shared.exceptions import (
    InvalidTransitionException,
    NotFoundException,
    OperationTimeoutException,
    SchedulingConflictException,
    UnauthorizedException,
    ValidationException,
)
from app.shared.utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)
settings = get_settings()

T = TypeVar("T")

_PROFESSIONAL_TARGETS = frozenset(
    {
        BookingStatusEnum.CONFIRMED,
        BookingStatusEnum.REJECTED,
        BookingStatusEnum.IN_PROGRESS,
        BookingStatusEnum.COMPLETED,
        BookingStatusEnum.DISPUTED,
    },
)
_CUSTOMER_TARGETS = frozenset({BookingStatusEnum.DISPUTED})


class BookingService:
    """Booking creation, lifecycle transitions and history queries."""

    def __init__(
        self,
        store: BookingStore,
        parties: PartyDirectory,
        dispatcher: SideEffectDispatcher,
        *,
        clock: Callable[[], datetime] = utc_now,
        operation_timeout_seconds: float | None = None,
        max_duration_minutes: int | None = None,
    ) -> None:
        self.store = store
        self.parties = parties
        self.dispatcher = dispatcher
        self.conflict_detector = ConflictDetector(store)
        self.clock = clock
        self.operation_timeout_seconds = (
            operation_timeout_seconds
            if operation_timeout_seconds is not None
            else settings.booking_operation_timeout_seconds
        )
        self.max_duration_minutes = (
            max_duration_minutes if max_duration_minutes is not None else settings.booking_max_duration_minutes
        )

    async def _with_deadline(self, operation: Awaitable[T], action: str) -> T:
        try:
            return await asyncio.wait_for(operation, timeout=self.operation_timeout_seconds)
        except TimeoutError as exc:
            logger.warning("Booking %s exceeded %.1fs deadline", action, self.operation_timeout_seconds)
            raise OperationTimeoutException(f"Booking {action} timed out") from exc

    @staticmethod
    def _validate_actor_access(booking: Booking, actor: User) -> None:
        if actor.role.name == RoleEnum.ADMIN:
            return
        if actor.id in (booking.customer_id, booking.professional_id):
            return
        raise UnauthorizedException("You cannot manage this booking")

    def _validate_create_payload(self, payload: BookingCreate, actor: User) -> None:
        if not 1 <= payload.estimated_duration_minutes <= self.max_duration_minutes:
            raise ValidationException(
                f"Estimated duration must be between 1 and {self.max_duration_minutes} minutes",
            )
        if payload.professional_type == ProfessionalTypeEnum.ARTIST and not payload.project_details:
            raise ValidationException("Project details are required for artist bookings")
        if payload.professional_id == actor.id:
            raise ValidationException("Customers cannot book themselves")

    async def _validate_parties(self, payload: BookingCreate, actor: User) -> None:
        customer = await self.parties.get_customer(actor.id)
        if customer is None:
            raise NotFoundException("User not found")
        if not customer.is_eligible:
            raise ValidationException("Customer account cannot create bookings")

        professional = await self.parties.get_professional(payload.professional_id)
        if professional is None:
            raise NotFoundException("Professional not found")
        if not professional.is_eligible:
            raise ValidationException("Professional is not available")
        if professional.professional_type != payload.professional_type:
            raise ValidationException(
                f"Professional type mismatch: professional is {professional.professional_type}, "
                f"booking requested {payload.professional_type}",
            )

    async def _create(self, payload: BookingCreate, actor: User) -> Booking:
        scheduled_date = ensure_utc(payload.scheduled_date)
        window = BookingWindow.from_duration(scheduled_date, payload.estimated_duration_minutes)

        await self._validate_parties(payload, actor)

        await self.store.lock_professional_schedule(payload.professional_id)
        if await self.conflict_detector.has_conflict(payload.professional_id, window):
            record_booking_conflict()
            raise SchedulingConflictException("Professional has a conflicting booking at this time")

        return await self.store.create_booking(
            customer_id=actor.id,
            professional_id=payload.professional_id,
            professional_type=payload.professional_type,
            service_category=payload.service_category,
            scheduled_date=scheduled_date,
            estimated_duration_minutes=payload.estimated_duration_minutes,
            service_address=payload.service_address.model_dump(mode="json"),
            description=payload.description,
            estimated_price=payload.estimated_price,
            project_details=payload.project_details,
            reference_images=list(payload.reference_images),
        )

    async def create_booking(self, payload: BookingCreate, actor: User) -> Booking:
        """Create a pending booking if the professional's window is free."""
        if actor.role.name != RoleEnum.CUSTOMER:
            raise UnauthorizedException("Only customers can create bookings")
        self._validate_create_payload(payload, actor)

        booking = await self._with_deadline(self._create(payload, actor), "creation")
        await self.dispatcher.dispatch([booking_created_event(booking)])
        return booking

    async def get_booking(self, booking_id: UUID, actor: User) -> Booking:
        booking = await self.store.get_booking_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found")
        self._validate_actor_access(booking, actor)
        return booking

    @staticmethod
    def _validate_status_change(booking: Booking, target: BookingStatusEnum, actor: User) -> None:
        role = actor.role.name
        if role == RoleEnum.PROFESSIONAL:
            allowed = target in _PROFESSIONAL_TARGETS and booking.professional_id == actor.id
        elif role == RoleEnum.CUSTOMER:
            allowed = target in _CUSTOMER_TARGETS and booking.customer_id == actor.id
        else:
            allowed = role == RoleEnum.ADMIN
        if not allowed:
            raise UnauthorizedException(f"Role {role} cannot move booking to {target}")

    @staticmethod
    def _validate_progress_photos(booking: Booking, status: BookingStatusEnum) -> None:
        if booking.professional_type != ProfessionalTypeEnum.ARTIST:
            raise ValidationException("Progress photos are only available for artist bookings")
        if status != BookingStatusEnum.IN_PROGRESS:
            raise ValidationException("Progress photos can only be added to in-progress bookings")

    @staticmethod
    def _attach_progress_photos(
        booking: Booking,
        photos: Sequence[ProgressPhotoCreate],
        uploaded_by: UUID,
        now: datetime,
    ) -> None:
        added = [
            {
                "id": uuid4().hex,
                "url": photo.url,
                "caption": photo.caption,
                "uploaded_at": now.isoformat(),
                "uploaded_by": str(uploaded_by),
            }
            for photo in photos
        ]
        # New list so the JSONB column is flagged dirty.
        booking.progress_photos = [*(booking.progress_photos or []), *added]

    async def _transition(
        self,
        booking_id: UUID,
        target: BookingStatusEnum,
        actor: User | None,
        reason: str | None,
        role_checked: bool,
        photos: Sequence[ProgressPhotoCreate],
    ) -> tuple[Booking, BookingStatusEnum]:
        booking = await self.store.get_booking_by_id(booking_id, for_update=True)
        if booking is None:
            raise NotFoundException("Booking not found")
        if actor is not None:
            self._validate_actor_access(booking, actor)
            if role_checked:
                self._validate_status_change(booking, target, actor)
        if photos:
            self._validate_progress_photos(booking, target)

        now = self.clock()
        previous = apply_transition(booking, target, now, reason=reason)
        if photos:
            uploaded_by = actor.id if actor is not None else booking.professional_id
            self._attach_progress_photos(booking, photos, uploaded_by, now)
        await self.store.save(booking)
        record_booking_transition(previous.value, target.value)
        return booking, previous

    async def transition_booking(
        self,
        booking_id: UUID,
        target: BookingStatusEnum,
        actor: User | None = None,
        reason: str | None = None,
        *,
        role_checked: bool = False,
        photos: Sequence[ProgressPhotoCreate] = (),
    ) -> Booking:
        """Apply one lifecycle transition and publish its event.

        Without an actor no identity check is made; internal workflows such
        as dispute resolution call it that way. Every check runs against the
        locked row, never against a copy read earlier in the request.
        """
        booking, previous = await self._with_deadline(
            self._transition(booking_id, target, actor, reason, role_checked, photos),
            "transition",
        )
        await self.dispatcher.dispatch([status_changed_event(booking, previous)])
        return booking

    async def cancel_booking(self, booking_id: UUID, reason: str, actor: User | None = None) -> Booking:
        """Cancel a pending or confirmed booking, keeping the reason as given."""
        return await self.transition_booking(
            booking_id,
            BookingStatusEnum.CANCELLED,
            actor=actor,
            reason=reason,
        )

    async def update_status(
        self,
        booking_id: UUID,
        target: BookingStatusEnum,
        actor: User,
        notes: str | None = None,
        progress_photos: Sequence[ProgressPhotoCreate] = (),
    ) -> Booking:
        """Role-checked status change requested over the API."""
        if target == BookingStatusEnum.CANCELLED:
            return await self.transition_booking(
                booking_id,
                target,
                actor=actor,
                reason=notes if notes is not None else "",
                photos=progress_photos,
            )
        return await self.transition_booking(
            booking_id,
            target,
            actor=actor,
            role_checked=True,
            photos=progress_photos,
        )

    async def _add_progress_photos(
        self,
        booking_id: UUID,
        photos: Sequence[ProgressPhotoCreate],
        actor: User,
    ) -> Booking:
        booking = await self.store.get_booking_by_id(booking_id, for_update=True)
        if booking is None:
            raise NotFoundException("Booking not found")
        self._validate_actor_access(booking, actor)
        if actor.role.name == RoleEnum.CUSTOMER:
            raise UnauthorizedException("Only the professional can add progress photos")
        self._validate_progress_photos(booking, booking.status)

        self._attach_progress_photos(booking, photos, actor.id, self.clock())
        return await self.store.save(booking)

    async def add_progress_photos(
        self,
        booking_id: UUID,
        photos: Sequence[ProgressPhotoCreate],
        actor: User,
    ) -> Booking:
        """Append photos to an artist booking that is in progress."""
        if not photos:
            raise ValidationException("At least one progress photo is required")
        booking = await self._with_deadline(
            self._add_progress_photos(booking_id, photos, actor),
            "photo upload",
        )
        logger.info("Added %d progress photos to booking %s", len(photos), booking_id)
        return booking

    async def resolve_disputed_booking(self, booking_id: UUID) -> Booking | None:
        """Close a disputed booking after its dispute is resolved.

        Any other status, including one changed concurrently, is left alone.
        """
        try:
            return await self.transition_booking(booking_id, BookingStatusEnum.RESOLVED)
        except InvalidTransitionException as exc:
            logger.info(
                "Dispute resolution left booking %s unchanged: status is %s",
                booking_id,
                exc.current_status,
            )
            return None

    async def list_bookings(
        self,
        owner_id: UUID,
        role: RoleEnum,
        history_filter: BookingHistoryFilterEnum,
        limit: int,
        offset: int,
    ) -> tuple[Sequence[Booking], int]:
        return await self.store.list_bookings(
            owner_id,
            role,
            statuses_for_filter(history_filter),
            limit,
            offset,
        )


async def get_booking_service(session: AsyncSession = Depends(get_db_session)) -> BookingService:
    """Dependency provider for booking service."""
    return BookingService(
        store=BookingRepository(session),
        parties=IdentityPartyDirectory(IdentityRepository(session)),
        dispatcher=SideEffectDispatcher([OutboxEventRecorder(AuditRepository(session))]),
    )
