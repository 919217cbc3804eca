"""Audit repository layer."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import OutboxStatusEnum
from app.modules.audit.models import AuditLog, OutboxEvent


class AuditRepository:
    """DB operations for audit log and transactional outbox."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """Nested transaction; an error inside rolls back only this block."""
        async with self.session.begin_nested():
            yield

    async def create_audit_log(
        self,
        actor_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: str | None,
        payload: dict,
    ) -> AuditLog:
        log = AuditLog(
            actor_id=actor_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            payload=payload,
        )
        self.session.add(log)
        await self.session.flush()
        return log

    async def list_audit_logs(
        self,
        limit: int,
        offset: int,
        entity_type: str | None = None,
        entity_id: str | None = None,
    ) -> tuple[Sequence[AuditLog], int]:
        base_stmt: Select[tuple[AuditLog]] = select(AuditLog)
        if entity_type is not None:
            base_stmt = base_stmt.where(AuditLog.entity_type == entity_type)
        if entity_id is not None:
            base_stmt = base_stmt.where(AuditLog.entity_id == entity_id)

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = base_stmt.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).offset(offset)
        items = (await self.session.scalars(stmt)).all()
        return items, total

    async def create_outbox_event(
        self,
        aggregate_type: str,
        aggregate_id: str,
        event_type: str,
        payload: dict,
    ) -> OutboxEvent:
        event = OutboxEvent(
            aggregate_type=aggregate_type,
            aggregate_id=aggregate_id,
            event_type=event_type,
            payload=payload,
            status=OutboxStatusEnum.PENDING,
        )
        self.session.add(event)
        await self.session.flush()
        return event

    async def list_pending_outbox(self, limit: int, lock: bool = False) -> Sequence[OutboxEvent]:
        stmt = (
            select(OutboxEvent)
            .where(OutboxEvent.status == OutboxStatusEnum.PENDING)
            .order_by(OutboxEvent.occurred_at.asc())
            .limit(limit)
        )
        if lock:
            # Concurrent workers skip rows another worker holds.
            stmt = stmt.with_for_update(skip_locked=True)
        return (await self.session.scalars(stmt)).all()

    async def list_failed_outbox(self, limit: int, max_retries: int) -> Sequence[OutboxEvent]:
        stmt = (
            select(OutboxEvent)
            .where(
                OutboxEvent.status == OutboxStatusEnum.FAILED,
                OutboxEvent.retries < max_retries,
            )
            .order_by(OutboxEvent.updated_at.asc())
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        return (await self.session.scalars(stmt)).all()

    async def _set_outbox_status(
        self,
        event: OutboxEvent,
        status: OutboxStatusEnum,
        *,
        processed_at: datetime | None = None,
        error_message: str | None = None,
    ) -> OutboxEvent:
        event.status = status
        event.processed_at = processed_at
        event.error_message = error_message
        if status == OutboxStatusEnum.FAILED:
            event.retries += 1
        await self.session.flush()
        return event

    async def mark_outbox_pending(self, event: OutboxEvent) -> OutboxEvent:
        return await self._set_outbox_status(event, OutboxStatusEnum.PENDING)

    async def mark_outbox_processed(self, event: OutboxEvent, processed_at: datetime) -> OutboxEvent:
        return await self._set_outbox_status(event, OutboxStatusEnum.PROCESSED, processed_at=processed_at)

    async def mark_outbox_failed(self, event: OutboxEvent, error_message: str) -> OutboxEvent:
        return await self._set_outbox_status(event, OutboxStatusEnum.FAILED, error_message=error_message)

    async def count_outbox_by_status(self) -> dict[OutboxStatusEnum, int]:
        stmt = select(OutboxEvent.status, func.count()).group_by(OutboxEvent.status)
        rows = (await self.session.execute(stmt)).all()
        return {status: int(count) for status, count in rows}

    async def count_failed_outbox_by_retry_budget(self, max_retries: int) -> tuple[int, int]:
        """Split failed events into (still retryable, dead letter)."""
        exhausted = OutboxEvent.retries >= max_retries
        stmt = select(
            func.count().filter(~exhausted),
            func.count().filter(exhausted),
        ).where(OutboxEvent.status == OutboxStatusEnum.FAILED)
        retryable, dead_letter = (await self.session.execute(stmt)).one()
        return int(retryable or 0), int(dead_letter or 0)
