"""Professionals API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.modules.identity.service import get_current_user
from app.modules.professionals.schemas import (
    ProfessionalProfileCreate,
    ProfessionalProfileRead,
    ProfessionalProfileUpdate,
)
from app.modules.professionals.service import ProfessionalsService, get_professionals_service

router = APIRouter(prefix="/professionals", tags=["professionals"])


@router.post("/profiles", response_model=ProfessionalProfileRead, status_code=status.HTTP_201_CREATED)
async def create_profile(
    payload: ProfessionalProfileCreate,
    service: ProfessionalsService = Depends(get_professionals_service),
    current_user=Depends(get_current_user),
) -> ProfessionalProfileRead:
    """Create profile for the authenticated professional."""
    profile = await service.create_profile(payload, current_user)
    return ProfessionalProfileRead.model_validate(profile)


@router.get("/{user_id}/profile", response_model=ProfessionalProfileRead)
async def get_profile(
    user_id: UUID,
    service: ProfessionalsService = Depends(get_professionals_service),
) -> ProfessionalProfileRead:
    """Public professional profile."""
    profile = await service.get_profile(user_id)
    return ProfessionalProfileRead.model_validate(profile)


@router.patch("/{user_id}/profile", response_model=ProfessionalProfileRead)
async def update_profile(
    user_id: UUID,
    payload: ProfessionalProfileUpdate,
    service: ProfessionalsService = Depends(get_professionals_service),
    current_user=Depends(get_current_user),
) -> ProfessionalProfileRead:
    """Update profile or availability."""
    profile = await service.update_profile(user_id, payload, current_user)
    return ProfessionalProfileRead.model_validate(profile)
