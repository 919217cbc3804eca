"""Identity business logic layer."""

from __future__ import annotations

from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import RoleEnum
from app.core.security import decode_token, get_bearer_token
from app.modules.identity.models import User
from app.modules.identity.repository import IdentityRepository
from app.shared.exceptions import UnauthorizedException


class IdentityService:
    """Resolve authenticated marketplace accounts.

    Accounts are issued by the external identity provider; this service only
    trusts its access tokens and maps them onto local users.
    """

    def __init__(self, repository: IdentityRepository) -> None:
        self.repository = repository

    async def ensure_default_roles(self) -> None:
        """Create whichever of the marketplace roles are missing."""
        existing = await self.repository.list_role_names()
        missing = [role_name for role_name in RoleEnum if role_name not in existing]
        if missing:
            await self.repository.add_roles(missing)

    async def resolve_account(self, token: str) -> User:
        payload = decode_token(token)
        if payload.get("type") != "access":
            raise UnauthorizedException("Invalid access token")

        try:
            user_id = UUID(str(payload["sub"]))
        except (KeyError, ValueError) as exc:
            raise UnauthorizedException("Token subject is missing or malformed") from exc

        user = await self.repository.get_account(user_id)
        if user is None or not user.is_active:
            raise UnauthorizedException("Account is unknown or inactive")
        return user


async def get_identity_service(session: AsyncSession = Depends(get_db_session)) -> IdentityService:
    """Dependency to provide identity service."""
    return IdentityService(IdentityRepository(session))


async def get_current_user(
    token: str = Depends(get_bearer_token),
    service: IdentityService = Depends(get_identity_service),
) -> User:
    """Resolve currently authenticated user from bearer token."""
    return await service.resolve_account(token)


def require_roles(*roles: RoleEnum):
    """Dependency factory for role-based access."""

    async def _checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role.name not in roles:
            raise UnauthorizedException("Operation not permitted for your role")
        return current_user

    return _checker
