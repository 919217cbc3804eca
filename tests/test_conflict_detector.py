from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from app.modules.booking.conflicts import BookingWindow, ConflictDetector


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 4, 1, hour, minute, tzinfo=UTC)


class FakeWindowStore:
    def __init__(self, windows: dict[UUID, list[BookingWindow]]) -> None:
        self.windows = windows
        self.calls: list[tuple[UUID, BookingWindow]] = []

    async def find_active_windows_for_professional(
        self,
        professional_id: UUID,
        window: BookingWindow,
    ) -> list[BookingWindow]:
        self.calls.append((professional_id, window))
        return self.windows.get(professional_id, [])


def test_window_from_duration_is_half_open() -> None:
    window = BookingWindow.from_duration(at(10), 60)
    assert window.start == at(10)
    assert window.end == at(11)


@pytest.mark.parametrize(
    ("start", "duration", "expected"),
    [
        (at(10, 30), 30, True),
        (at(9, 30), 60, True),
        (at(9), 180, True),
        (at(10, 15), 15, True),
        (at(11), 30, False),
        (at(9), 60, False),
        (at(12), 60, False),
    ],
)
def test_overlap_against_ten_to_eleven(start: datetime, duration: int, expected: bool) -> None:
    existing = BookingWindow(start=at(10), end=at(11))
    proposed = BookingWindow.from_duration(start, duration)

    assert proposed.overlaps(existing) is expected
    assert existing.overlaps(proposed) is expected


@pytest.mark.asyncio
async def test_detector_reports_conflict_for_same_professional() -> None:
    professional_id = uuid4()
    store = FakeWindowStore({professional_id: [BookingWindow(start=at(10), end=at(11))]})
    detector = ConflictDetector(store)  # type: ignore[arg-type]

    proposed = BookingWindow.from_duration(at(10, 30), 30)

    assert await detector.has_conflict(professional_id, proposed) is True
    assert store.calls == [(professional_id, proposed)]


@pytest.mark.asyncio
async def test_detector_ignores_other_professionals() -> None:
    busy_professional = uuid4()
    store = FakeWindowStore({busy_professional: [BookingWindow(start=at(10), end=at(11))]})
    detector = ConflictDetector(store)  # type: ignore[arg-type]

    assert await detector.has_conflict(uuid4(), BookingWindow.from_duration(at(10), 60)) is False


@pytest.mark.asyncio
async def test_detector_decides_touching_candidates_in_python() -> None:
    professional_id = uuid4()
    store = FakeWindowStore(
        {
            professional_id: [
                BookingWindow(start=at(9), end=at(10)),
                BookingWindow(start=at(11), end=at(12)),
            ],
        },
    )
    detector = ConflictDetector(store)  # type: ignore[arg-type]

    assert await detector.has_conflict(professional_id, BookingWindow(start=at(10), end=at(11))) is False
