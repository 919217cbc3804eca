"""Professionals repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import ProfessionalTypeEnum
from app.modules.professionals.models import ProfessionalProfile


class ProfessionalsRepository:
    """DB operations for professional profiles."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_profile(
        self,
        user_id: UUID,
        business_name: str,
        professional_type: ProfessionalTypeEnum,
        bio: str,
    ) -> ProfessionalProfile:
        profile = ProfessionalProfile(
            user_id=user_id,
            business_name=business_name,
            professional_type=professional_type,
            bio=bio,
            is_available=True,
        )
        self.session.add(profile)
        await self.session.flush()
        return profile

    async def get_profile_by_user_id(self, user_id: UUID) -> ProfessionalProfile | None:
        stmt = select(ProfessionalProfile).where(ProfessionalProfile.user_id == user_id)
        return await self.session.scalar(stmt)

    async def update_profile(self, profile: ProfessionalProfile, **changes) -> ProfessionalProfile:
        for key, value in changes.items():
            if value is not None:
                setattr(profile, key, value)
        await self.session.flush()
        return profile
