"""Disputes schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import DisputeStatusEnum, IssueTypeEnum


class DisputeCreate(BaseModel):
    """Open dispute request."""

    booking_id: UUID
    issue_type: IssueTypeEnum
    description: str = Field(min_length=1)
    photos: list[str] = Field(default_factory=list)


class DisputeResolve(BaseModel):
    """Resolve dispute request."""

    resolution_notes: str = Field(min_length=1)
    admin_action: str | None = None


class DisputeRead(BaseModel):
    """Dispute response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_id: UUID
    reporter_id: UUID
    reported_user_id: UUID
    issue_type: IssueTypeEnum
    description: str
    photos: list[str]
    status: DisputeStatusEnum
    resolution_notes: str | None
    admin_action: str | None
    resolved_by: UUID | None
    resolved_at: datetime | None
    created_at: datetime
    updated_at: datetime
