from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.dialects import postgresql
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.database import Base
from app.core.enums import BookingStatusEnum, ProfessionalTypeEnum, RoleEnum
from app.modules.audit import models as audit_models  # noqa: F401
from app.modules.booking.dispatcher import SideEffectDispatcher
from app.modules.booking.models import Booking
from app.modules.booking.repository import BookingRepository
from app.modules.booking.service import BookingService
from app.modules.disputes import models as dispute_models  # noqa: F401
from app.modules.identity.models import Role, User
from app.modules.notifications import models as notification_models  # noqa: F401
from app.modules.professionals import models as professional_models  # noqa: F401
from app.shared.exceptions import InvalidTransitionException

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "")


class CapturingSession:
    def __init__(self) -> None:
        self.statements: list = []

    async def scalar(self, stmt):
        self.statements.append(stmt)
        return None


class UnusedPartyDirectory:
    async def get_customer(self, user_id: UUID) -> None:
        raise AssertionError("transitions do not look up parties")

    async def get_professional(self, user_id: UUID) -> None:
        raise AssertionError("transitions do not look up parties")


@dataclass(frozen=True)
class SeededBooking:
    booking_id: UUID
    customer: SimpleNamespace
    professional: SimpleNamespace


def make_actor(user_id: UUID, role: RoleEnum) -> SimpleNamespace:
    return SimpleNamespace(id=user_id, role=SimpleNamespace(name=role))


def make_service(session: AsyncSession) -> BookingService:
    return BookingService(
        store=BookingRepository(session),
        parties=UnusedPartyDirectory(),  # type: ignore[arg-type]
        dispatcher=SideEffectDispatcher(),
        operation_timeout_seconds=5.0,
    )


@pytest.mark.asyncio
async def test_locked_read_overwrites_identity_map_copy() -> None:
    session = CapturingSession()
    repository = BookingRepository(session)  # type: ignore[arg-type]

    await repository.get_booking_by_id(uuid4(), for_update=True)
    await repository.get_booking_by_id(uuid4())

    locked, plain = session.statements
    assert "FOR UPDATE" in str(locked.compile(dialect=postgresql.dialect()))
    assert locked.get_execution_options().get("populate_existing") is True
    assert "FOR UPDATE" not in str(plain.compile(dialect=postgresql.dialect()))
    assert "populate_existing" not in plain.get_execution_options()


@pytest_asyncio.fixture()
async def session_factory() -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    if not TEST_DATABASE_URL:
        pytest.skip("TEST_DATABASE_URL is not set")

    url = make_url(TEST_DATABASE_URL).set(drivername="postgresql+asyncpg")
    schema = f"booking_locking_{uuid4().hex[:12]}"
    base_engine = create_async_engine(url)
    try:
        async with base_engine.begin() as conn:
            await conn.execute(text(f'CREATE SCHEMA "{schema}"'))
    except (OSError, TimeoutError, SQLAlchemyError) as exc:
        await base_engine.dispose()
        pytest.skip(f"Test database unavailable at {url.render_as_string(hide_password=True)}: {exc}")

    engine = base_engine.execution_options(schema_translate_map={None: schema})
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        async with base_engine.begin() as conn:
            await conn.execute(text(f'DROP SCHEMA "{schema}" CASCADE'))
        await base_engine.dispose()


@pytest_asyncio.fixture()
async def pending_booking(session_factory: async_sessionmaker[AsyncSession]) -> SeededBooking:
    async with session_factory() as session:
        customer = User(
            email="customer@example.com",
            full_name="Casey Customer",
            role=Role(name=RoleEnum.CUSTOMER),
        )
        professional = User(
            email="pro@example.com",
            full_name="Pat Plumber",
            role=Role(name=RoleEnum.PROFESSIONAL),
        )
        session.add_all([customer, professional])
        await session.flush()
        booking = Booking(
            customer_id=customer.id,
            professional_id=professional.id,
            professional_type=ProfessionalTypeEnum.HANDYMAN,
            service_category="plumbing",
            scheduled_date=datetime(2026, 11, 2, 9, 0, tzinfo=UTC),
            estimated_duration_minutes=60,
            status=BookingStatusEnum.PENDING,
            service_address={"address": "12 Elm St", "city": "Austin"},
        )
        session.add(booking)
        await session.commit()
        return SeededBooking(
            booking_id=booking.id,
            customer=make_actor(customer.id, RoleEnum.CUSTOMER),
            professional=make_actor(professional.id, RoleEnum.PROFESSIONAL),
        )


async def _stored_booking(session_factory: async_sessionmaker[AsyncSession], booking_id: UUID) -> Booking:
    async with session_factory() as session:
        booking = await session.get(Booking, booking_id)
        assert booking is not None
        return booking


@pytest.mark.asyncio
async def test_confirm_after_committed_cancel_fails_despite_earlier_read(
    session_factory: async_sessionmaker[AsyncSession],
    pending_booking: SeededBooking,
) -> None:
    async with session_factory() as session:
        service = make_service(session)
        preloaded = await service.get_booking(pending_booking.booking_id, pending_booking.professional)
        assert preloaded.status == BookingStatusEnum.PENDING

        async with session_factory() as other_session:
            await make_service(other_session).cancel_booking(
                pending_booking.booking_id,
                "customer cancelled",
                actor=pending_booking.customer,
            )
            await other_session.commit()

        with pytest.raises(InvalidTransitionException) as exc:
            await service.update_status(
                pending_booking.booking_id,
                BookingStatusEnum.CONFIRMED,
                pending_booking.professional,
            )
        await session.rollback()

    assert exc.value.current_status == "cancelled"
    stored = await _stored_booking(session_factory, pending_booking.booking_id)
    assert stored.status == BookingStatusEnum.CANCELLED
    assert stored.cancellation_reason == "customer cancelled"
    assert stored.cancelled_at is not None


@pytest.mark.asyncio
async def test_confirm_waiting_on_row_lock_sees_the_cancel_it_waited_for(
    session_factory: async_sessionmaker[AsyncSession],
    pending_booking: SeededBooking,
) -> None:
    async with session_factory() as cancelling, session_factory() as confirming:
        confirm_service = make_service(confirming)
        await confirm_service.get_booking(pending_booking.booking_id, pending_booking.professional)

        await make_service(cancelling).cancel_booking(
            pending_booking.booking_id,
            "found someone closer",
            actor=pending_booking.customer,
        )
        confirm = asyncio.create_task(
            confirm_service.update_status(
                pending_booking.booking_id,
                BookingStatusEnum.CONFIRMED,
                pending_booking.professional,
            ),
        )
        await asyncio.sleep(0.2)
        assert not confirm.done()

        await cancelling.commit()
        with pytest.raises(InvalidTransitionException):
            await confirm
        await confirming.rollback()

    stored = await _stored_booking(session_factory, pending_booking.booking_id)
    assert stored.status == BookingStatusEnum.CANCELLED
    assert stored.cancellation_reason == "found someone closer"
