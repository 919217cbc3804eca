"""Identity repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.enums import RoleEnum
from app.modules.identity.models import Role, User


class IdentityRepository:
    """Accounts and roles lookups."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_role_names(self) -> set[RoleEnum]:
        result = await self.session.scalars(select(Role.name))
        return set(result.all())

    async def add_roles(self, role_names: list[RoleEnum]) -> None:
        self.session.add_all(Role(name=role_name) for role_name in role_names)
        await self.session.flush()

    async def get_account(self, user_id: UUID) -> User | None:
        """Load a user together with role and professional profile."""
        stmt = (
            select(User)
            .options(selectinload(User.role), selectinload(User.professional_profile))
            .where(User.id == user_id)
        )
        return await self.session.scalar(stmt)
