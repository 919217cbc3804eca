"""Disputes business logic layer."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import DisputeStatusEnum, RoleEnum
from app.modules.audit.repository import AuditRepository
from app.modules.booking.service import BookingService, get_booking_service
from app.modules.disputes.models import Dispute
from app.modules.disputes.repository import DisputesRepository
from app.modules.disputes.schemas import DisputeCreate, DisputeResolve
from app.modules.identity.models import User
from app.shared.exceptions import ConflictException, NotFoundException, UnauthorizedException
from app.shared.utils import utc_now

_RESOLVABLE_STATUSES = frozenset({DisputeStatusEnum.OPEN, DisputeStatusEnum.IN_REVIEW})


class DisputesService:
    """Dispute workflow: open, review, resolve, close."""

    def __init__(
        self,
        repository: DisputesRepository,
        booking_service: BookingService,
        audit_repository: AuditRepository,
    ) -> None:
        self.repository = repository
        self.booking_service = booking_service
        self.audit_repository = audit_repository

    @staticmethod
    def _ensure_admin(actor: User) -> None:
        if actor.role.name != RoleEnum.ADMIN:
            raise UnauthorizedException("Only admin can manage disputes")

    async def _audit(self, actor: User, action: str, dispute: Dispute, **extra) -> None:
        await self.audit_repository.create_audit_log(
            actor_id=actor.id,
            action=action,
            entity_type="dispute",
            entity_id=str(dispute.id),
            payload={"booking_id": str(dispute.booking_id), "status": dispute.status.value, **extra},
        )

    async def _get_for_update(self, dispute_id: UUID) -> Dispute:
        dispute = await self.repository.get_dispute_by_id(dispute_id, for_update=True)
        if dispute is None:
            raise NotFoundException("Dispute not found")
        return dispute

    async def open_dispute(self, payload: DisputeCreate, actor: User) -> Dispute:
        """Record a dispute from one booking party against the other.

        The booking itself is not transitioned here.
        """
        booking = await self.booking_service.get_booking(payload.booking_id, actor)
        if actor.id == booking.customer_id:
            reported_user_id = booking.professional_id
        elif actor.id == booking.professional_id:
            reported_user_id = booking.customer_id
        else:
            raise UnauthorizedException("Only booking parties can open a dispute")

        dispute = await self.repository.create_dispute(
            booking_id=booking.id,
            reporter_id=actor.id,
            reported_user_id=reported_user_id,
            issue_type=payload.issue_type,
            description=payload.description,
            photos=list(payload.photos),
        )
        await self._audit(actor, "dispute.opened", dispute, issue_type=dispute.issue_type.value)
        return dispute

    async def get_dispute(self, dispute_id: UUID, actor: User) -> Dispute:
        dispute = await self.repository.get_dispute_by_id(dispute_id)
        if dispute is None:
            raise NotFoundException("Dispute not found")
        if actor.role.name != RoleEnum.ADMIN and actor.id not in (dispute.reporter_id, dispute.reported_user_id):
            raise UnauthorizedException("You cannot view this dispute")
        return dispute

    async def start_review(self, dispute_id: UUID, actor: User) -> Dispute:
        self._ensure_admin(actor)
        dispute = await self._get_for_update(dispute_id)
        if dispute.status != DisputeStatusEnum.OPEN:
            raise ConflictException(f"Dispute in status {dispute.status} cannot move to review")

        dispute.status = DisputeStatusEnum.IN_REVIEW
        await self.repository.save(dispute)
        await self._audit(actor, "dispute.review_started", dispute)
        return dispute

    async def resolve_dispute(self, dispute_id: UUID, payload: DisputeResolve, actor: User) -> Dispute:
        """Resolve dispute and close out its disputed booking.

        The booking moves to resolved only if it is currently disputed;
        otherwise it is left as is.
        """
        self._ensure_admin(actor)
        dispute = await self._get_for_update(dispute_id)
        if dispute.status not in _RESOLVABLE_STATUSES:
            raise ConflictException(f"Dispute in status {dispute.status} cannot be resolved")

        dispute.status = DisputeStatusEnum.RESOLVED
        dispute.resolution_notes = payload.resolution_notes
        dispute.admin_action = payload.admin_action
        dispute.resolved_by = actor.id
        dispute.resolved_at = utc_now()
        await self.repository.save(dispute)

        booking = await self.booking_service.resolve_disputed_booking(dispute.booking_id)

        await self._audit(
            actor,
            "dispute.resolved",
            dispute,
            admin_action=dispute.admin_action,
            booking_resolved=booking is not None,
        )
        await self.audit_repository.create_outbox_event(
            aggregate_type="dispute",
            aggregate_id=str(dispute.id),
            event_type="dispute.resolved",
            payload={
                "dispute_id": str(dispute.id),
                "booking_id": str(dispute.booking_id),
                "reporter_id": str(dispute.reporter_id),
                "reported_user_id": str(dispute.reported_user_id),
                "resolution_notes": dispute.resolution_notes,
            },
        )
        return dispute

    async def close_dispute(self, dispute_id: UUID, actor: User) -> Dispute:
        self._ensure_admin(actor)
        dispute = await self._get_for_update(dispute_id)
        if dispute.status == DisputeStatusEnum.CLOSED:
            raise ConflictException("Dispute is already closed")

        dispute.status = DisputeStatusEnum.CLOSED
        await self.repository.save(dispute)
        await self._audit(actor, "dispute.closed", dispute)
        return dispute


async def get_disputes_service(
    session: AsyncSession = Depends(get_db_session),
    booking_service: BookingService = Depends(get_booking_service),
) -> DisputesService:
    """Dependency provider for disputes service."""
    return DisputesService(
        repository=DisputesRepository(session),
        booking_service=booking_service,
        audit_repository=AuditRepository(session),
    )
