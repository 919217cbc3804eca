"""Audit schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.core.enums import OutboxStatusEnum


class _RecordRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    payload: dict


class AuditLogRead(_RecordRead):
    """Who did what to which entity."""

    actor_id: UUID | None
    action: str
    entity_type: str
    entity_id: str | None
    created_at: datetime


class OutboxEventRead(_RecordRead):
    """Delivery state of one domain event."""

    aggregate_type: str
    aggregate_id: str
    event_type: str
    status: OutboxStatusEnum
    occurred_at: datetime
    processed_at: datetime | None
    retries: int
    error_message: str | None
