from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.core.enums import BookingHistoryFilterEnum, BookingStatusEnum, ProfessionalTypeEnum
from app.modules.booking.history import PAST_STATUSES, classify_status, statuses_for_filter
from app.modules.booking.lifecycle import ACTIVE_STATUSES
from app.modules.booking.schemas import BookingRead


def test_active_and_past_are_disjoint_and_cover_all_statuses() -> None:
    assert ACTIVE_STATUSES.isdisjoint(PAST_STATUSES)
    assert ACTIVE_STATUSES | PAST_STATUSES == frozenset(BookingStatusEnum)


def test_filter_to_status_sets() -> None:
    assert statuses_for_filter(BookingHistoryFilterEnum.ACTIVE) == {
        BookingStatusEnum.PENDING,
        BookingStatusEnum.CONFIRMED,
        BookingStatusEnum.IN_PROGRESS,
    }
    assert statuses_for_filter(BookingHistoryFilterEnum.PAST) == {
        BookingStatusEnum.COMPLETED,
        BookingStatusEnum.CANCELLED,
        BookingStatusEnum.REJECTED,
        BookingStatusEnum.DISPUTED,
        BookingStatusEnum.RESOLVED,
    }
    assert statuses_for_filter(BookingHistoryFilterEnum.ALL) is None


@pytest.mark.parametrize("status", list(BookingStatusEnum))
def test_every_status_is_classified_into_its_filter_set(status: BookingStatusEnum) -> None:
    history_filter = classify_status(status)
    assert status in statuses_for_filter(history_filter)


def _booking_row(status: BookingStatusEnum) -> SimpleNamespace:
    now = datetime(2026, 5, 4, 8, 0, tzinfo=UTC)
    return SimpleNamespace(
        id=uuid4(),
        customer_id=uuid4(),
        professional_id=uuid4(),
        professional_type=ProfessionalTypeEnum.ARTIST,
        service_category="portrait",
        scheduled_date=now,
        estimated_duration_minutes=120,
        status=status,
        started_at=None,
        completed_at=None,
        cancelled_at=None,
        cancellation_reason=None,
        service_address={"address": "1 Gallery Rd", "city": "Austin"},
        description="",
        estimated_price=None,
        project_details={"style": "oil"},
        reference_images=[],
        progress_photos=[
            {
                "id": "a1",
                "url": "https://cdn.example.com/sketch.jpg",
                "caption": None,
                "uploaded_at": now.isoformat(),
                "uploaded_by": str(uuid4()),
            },
        ],
        created_at=now,
        updated_at=now,
    )


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (BookingStatusEnum.IN_PROGRESS, BookingHistoryFilterEnum.ACTIVE),
        (BookingStatusEnum.DISPUTED, BookingHistoryFilterEnum.PAST),
    ],
)
def test_booking_read_reports_history_view(status: BookingStatusEnum, expected: BookingHistoryFilterEnum) -> None:
    read = BookingRead.model_validate(_booking_row(status))

    assert read.history == expected
    assert read.progress_photos[0].url == "https://cdn.example.com/sketch.jpg"
    assert read.model_dump(mode="json")["history"] == expected.value
