"""Disputes repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import DisputeStatusEnum, IssueTypeEnum
from app.modules.disputes.models import Dispute


class DisputesRepository:
    """DB operations for disputes domain."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_dispute(
        self,
        booking_id: UUID,
        reporter_id: UUID,
        reported_user_id: UUID,
        issue_type: IssueTypeEnum,
        description: str,
        photos: list[str],
    ) -> Dispute:
        dispute = Dispute(
            booking_id=booking_id,
            reporter_id=reporter_id,
            reported_user_id=reported_user_id,
            issue_type=issue_type,
            description=description,
            photos=photos,
            status=DisputeStatusEnum.OPEN,
        )
        self.session.add(dispute)
        await self.session.flush()
        return dispute

    async def get_dispute_by_id(self, dispute_id: UUID, for_update: bool = False) -> Dispute | None:
        stmt = select(Dispute).where(Dispute.id == dispute_id)
        if for_update:
            stmt = stmt.with_for_update()
        return await self.session.scalar(stmt)

    async def save(self, dispute: Dispute) -> Dispute:
        await self.session.flush()
        return dispute
