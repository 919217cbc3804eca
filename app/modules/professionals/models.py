"""Professionals ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Enum as SAEnum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BaseModelMixin
from app.core.enums import ProfessionalTypeEnum

if TYPE_CHECKING:
    from app.modules.identity.models import User


class ProfessionalProfile(BaseModelMixin, Base):
    """Professional profile linked to a user account.

    The row also serves as the per-professional lock taken while a new
    booking is checked for conflicts and inserted.
    """

    __tablename__ = "professional_profiles"

    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    professional_type: Mapped[ProfessionalTypeEnum] = mapped_column(
        SAEnum(ProfessionalTypeEnum, name="professional_type_enum", native_enum=False),
        nullable=False,
    )
    bio: Mapped[str] = mapped_column(Text, default="", nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    user: Mapped["User"] = relationship(back_populates="professional_profile")
