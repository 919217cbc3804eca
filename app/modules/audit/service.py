"""Audit business logic layer."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.modules.audit.models import AuditLog, OutboxEvent
from app.modules.audit.repository import AuditRepository


class AuditService:
    """Read side of audit log and outbox for administrators."""

    def __init__(self, repository: AuditRepository) -> None:
        self.repository = repository

    async def list_logs(
        self,
        limit: int,
        offset: int,
        entity_type: str | None = None,
        entity_id: str | None = None,
    ) -> tuple[Sequence[AuditLog], int]:
        return await self.repository.list_audit_logs(
            limit=limit,
            offset=offset,
            entity_type=entity_type,
            entity_id=entity_id,
        )

    async def list_pending_outbox(self, limit: int) -> Sequence[OutboxEvent]:
        return await self.repository.list_pending_outbox(limit)


async def get_audit_service(session: AsyncSession = Depends(get_db_session)) -> AuditService:
    """Dependency provider for audit service."""
    return AuditService(AuditRepository(session))
