"""Disputes API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.modules.disputes.schemas import DisputeCreate, DisputeRead, DisputeResolve
from app.modules.disputes.service import DisputesService, get_disputes_service
from app.modules.identity.service import get_current_user

router = APIRouter(prefix="/disputes", tags=["disputes"])


@router.post("", response_model=DisputeRead, status_code=status.HTTP_201_CREATED)
async def open_dispute(
    payload: DisputeCreate,
    service: DisputesService = Depends(get_disputes_service),
    current_user=Depends(get_current_user),
) -> DisputeRead:
    """Open dispute for a booking."""
    dispute = await service.open_dispute(payload, current_user)
    return DisputeRead.model_validate(dispute)


@router.get("/{dispute_id}", response_model=DisputeRead)
async def get_dispute(
    dispute_id: UUID,
    service: DisputesService = Depends(get_disputes_service),
    current_user=Depends(get_current_user),
) -> DisputeRead:
    dispute = await service.get_dispute(dispute_id, current_user)
    return DisputeRead.model_validate(dispute)


@router.post("/{dispute_id}/review", response_model=DisputeRead)
async def start_review(
    dispute_id: UUID,
    service: DisputesService = Depends(get_disputes_service),
    current_user=Depends(get_current_user),
) -> DisputeRead:
    """Move open dispute into review (admin)."""
    dispute = await service.start_review(dispute_id, current_user)
    return DisputeRead.model_validate(dispute)


@router.post("/{dispute_id}/resolve", response_model=DisputeRead)
async def resolve_dispute(
    dispute_id: UUID,
    payload: DisputeResolve,
    service: DisputesService = Depends(get_disputes_service),
    current_user=Depends(get_current_user),
) -> DisputeRead:
    """Resolve dispute (admin)."""
    dispute = await service.resolve_dispute(dispute_id, payload, current_user)
    return DisputeRead.model_validate(dispute)


@router.post("/{dispute_id}/close", response_model=DisputeRead)
async def close_dispute(
    dispute_id: UUID,
    service: DisputesService = Depends(get_disputes_service),
    current_user=Depends(get_current_user),
) -> DisputeRead:
    """Close dispute (admin)."""
    dispute = await service.close_dispute(dispute_id, current_user)
    return DisputeRead.model_validate(dispute)
