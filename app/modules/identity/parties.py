"""Party eligibility lookups used by the booking engine."""

from __future__ import annotations

from uuid import UUID

from app.core.enums import RoleEnum
from app.modules.booking.ports import PartyRecord
from app.modules.identity.repository import IdentityRepository


class IdentityPartyDirectory:
    """Resolve booking parties from identity accounts."""

    def __init__(self, repository: IdentityRepository) -> None:
        self.repository = repository

    async def get_customer(self, user_id: UUID) -> PartyRecord | None:
        user = await self.repository.get_account(user_id)
        if user is None:
            return None
        return PartyRecord(
            id=user.id,
            is_eligible=user.is_active and user.role.name == RoleEnum.CUSTOMER,
        )

    async def get_professional(self, user_id: UUID) -> PartyRecord | None:
        """A professional is bookable while active, profiled and available."""
        user = await self.repository.get_account(user_id)
        if user is None:
            return None

        profile = user.professional_profile
        if profile is None:
            return PartyRecord(id=user.id, is_eligible=False)

        return PartyRecord(
            id=user.id,
            is_eligible=user.is_active and user.role.name == RoleEnum.PROFESSIONAL and profile.is_available,
            professional_type=profile.professional_type,
        )
