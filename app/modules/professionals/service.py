"""Professionals business logic layer."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import RoleEnum
from app.modules.identity.models import User
from app.modules.professionals.models import ProfessionalProfile
from app.modules.professionals.repository import ProfessionalsRepository
from app.modules.professionals.schemas import ProfessionalProfileCreate, ProfessionalProfileUpdate
from app.shared.exceptions import ConflictException, NotFoundException, UnauthorizedException


class ProfessionalsService:
    """Professional profile management."""

    def __init__(self, repository: ProfessionalsRepository) -> None:
        self.repository = repository

    async def create_profile(self, payload: ProfessionalProfileCreate, actor: User) -> ProfessionalProfile:
        """Create profile for the calling professional."""
        if actor.role.name != RoleEnum.PROFESSIONAL:
            raise UnauthorizedException("Only professionals can create a professional profile")

        existing = await self.repository.get_profile_by_user_id(actor.id)
        if existing is not None:
            raise ConflictException("Professional profile already exists for user")

        return await self.repository.create_profile(
            user_id=actor.id,
            business_name=payload.business_name,
            professional_type=payload.professional_type,
            bio=payload.bio,
        )

    async def get_profile(self, user_id: UUID) -> ProfessionalProfile:
        profile = await self.repository.get_profile_by_user_id(user_id)
        if profile is None:
            raise NotFoundException("Professional profile not found")
        return profile

    async def update_profile(
        self,
        user_id: UUID,
        payload: ProfessionalProfileUpdate,
        actor: User,
    ) -> ProfessionalProfile:
        """Update profile; availability toggles whether new bookings are accepted."""
        profile = await self.get_profile(user_id)
        if actor.role.name != RoleEnum.ADMIN and actor.id != profile.user_id:
            raise UnauthorizedException("Only admin or owner can update profile")

        return await self.repository.update_profile(profile, **payload.model_dump(exclude_none=True))


async def get_professionals_service(session: AsyncSession = Depends(get_db_session)) -> ProfessionalsService:
    """Dependency provider for professionals service."""
    return ProfessionalsService(ProfessionalsRepository(session))
