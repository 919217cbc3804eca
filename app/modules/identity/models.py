"""Identity ORM models."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, Enum as SAEnum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BaseModelMixin
from app.core.enums import RoleEnum

if TYPE_CHECKING:
    from app.modules.notifications.models import Notification
    from app.modules.professionals.models import ProfessionalProfile


class Role(BaseModelMixin, Base):
    """System role model."""

    __tablename__ = "roles"

    name: Mapped[RoleEnum] = mapped_column(
        SAEnum(RoleEnum, name="role_enum", native_enum=False),
        unique=True,
        nullable=False,
    )

    users: Mapped[list["User"]] = relationship(back_populates="role")


class User(BaseModelMixin, Base):
    """Marketplace account mirrored from the identity provider."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    role_id: Mapped[UUID] = mapped_column(ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False)
    role: Mapped[Role] = relationship(back_populates="users", lazy="joined")

    professional_profile: Mapped["ProfessionalProfile | None"] = relationship(
        back_populates="user",
        uselist=False,
    )
    notifications: Mapped[list["Notification"]] = relationship(back_populates="user")
