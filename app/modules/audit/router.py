"""Audit API router (admin only)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.core.enums import RoleEnum
from app.modules.audit.schemas import AuditLogRead, OutboxEventRead
from app.modules.audit.service import AuditService, get_audit_service
from app.modules.identity.service import require_roles
from app.shared.pagination import MAX_PAGE_SIZE, Page, build_page, get_pagination_params

router = APIRouter(
    prefix="/audit",
    tags=["audit"],
    dependencies=[Depends(require_roles(RoleEnum.ADMIN))],
)


@router.get("/logs", response_model=Page[AuditLogRead])
async def list_logs(
    entity_type: str | None = None,
    entity_id: str | None = None,
    pagination=Depends(get_pagination_params),
    service: AuditService = Depends(get_audit_service),
) -> Page[AuditLogRead]:
    """List audit logs, newest first."""
    items, total = await service.list_logs(pagination.limit, pagination.offset, entity_type, entity_id)
    serialized = [AuditLogRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)


@router.get("/outbox/pending", response_model=list[OutboxEventRead])
async def list_pending_outbox(
    limit: int = Query(default=MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: AuditService = Depends(get_audit_service),
) -> list[OutboxEventRead]:
    """List outbox events still waiting for delivery."""
    items = await service.list_pending_outbox(limit=limit)
    return [OutboxEventRead.model_validate(item) for item in items]

