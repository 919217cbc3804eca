"""Identity schemas."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr

from app.core.enums import ProfessionalTypeEnum, RoleEnum


class ProfessionalSummaryRead(BaseModel):
    """Bookability facts of a professional account."""

    model_config = ConfigDict(from_attributes=True)

    business_name: str
    professional_type: ProfessionalTypeEnum
    is_available: bool


class AccountRead(BaseModel):
    id: UUID
    email: EmailStr
    full_name: str
    is_active: bool
    role: RoleEnum
    professional_profile: ProfessionalSummaryRead | None = None

    @classmethod
    def from_user(cls, user) -> AccountRead:
        profile = user.professional_profile
        return cls(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            is_active=user.is_active,
            role=user.role.name,
            professional_profile=ProfessionalSummaryRead.model_validate(profile) if profile is not None else None,
        )
