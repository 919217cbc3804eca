from __future__ import annotations

from app.shared.pagination import PaginationParams, build_page


def test_page_reports_more_items_beyond_current_slice() -> None:
    page = build_page(["a", "b"], total=5, params=PaginationParams(limit=2, offset=0))

    assert page.items == ["a", "b"]
    assert page.total == 5
    assert page.has_more is True


def test_last_page_has_no_more_items() -> None:
    page = build_page(["e"], total=5, params=PaginationParams(limit=2, offset=4))

    assert page.has_more is False


def test_offset_past_end_yields_empty_page() -> None:
    page = build_page([], total=3, params=PaginationParams(limit=20, offset=40))

    assert page.items == []
    assert page.has_more is False
