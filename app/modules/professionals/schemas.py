"""Professionals schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import ProfessionalTypeEnum


class ProfessionalProfileCreate(BaseModel):
    """Create professional profile request."""

    business_name: str = Field(min_length=2, max_length=255)
    professional_type: ProfessionalTypeEnum
    bio: str = Field(default="", max_length=5000)


class ProfessionalProfileUpdate(BaseModel):
    """Update professional profile request."""

    business_name: str | None = Field(default=None, min_length=2, max_length=255)
    bio: str | None = Field(default=None, max_length=5000)
    is_available: bool | None = None


class ProfessionalProfileRead(BaseModel):
    """Professional profile response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    business_name: str
    professional_type: ProfessionalTypeEnum
    bio: str
    is_available: bool
    created_at: datetime
    updated_at: datetime
