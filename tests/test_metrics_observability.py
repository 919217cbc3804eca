from __future__ import annotations

import pytest
from fastapi import Request, Response

import app.main as main_module
from app.core.metrics import (
    BOOKING_CONFLICTS_TOTAL,
    BOOKING_TRANSITIONS_TOTAL,
    SIDE_EFFECT_FAILURES_TOTAL,
    build_metrics_response,
    instrument_http_request,
    record_booking_conflict,
    record_booking_transition,
    record_side_effect_failure,
)


def _make_request(path: str) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": [],
        "client": ("127.0.0.1", 12345),
        "scheme": "http",
        "server": ("testserver", 80),
        "query_string": b"",
    }
    return Request(scope)


@pytest.mark.asyncio
async def test_http_metrics_instrumentation_tracks_status_and_path() -> None:
    async def _no_content(_: Request) -> Response:
        return Response(status_code=204)

    request = _make_request("/health")
    await instrument_http_request(request, _no_content)

    payload = build_metrics_response().body.decode("utf-8")
    assert "servicemarket_http_requests_total" in payload
    assert 'path="/health"' in payload
    assert 'status_code="204"' in payload


def test_booking_counters_increment() -> None:
    transitions = BOOKING_TRANSITIONS_TOTAL.labels(from_status="pending", to_status="confirmed")
    failures = SIDE_EFFECT_FAILURES_TOTAL.labels(event_type="booking.completed")
    transitions_before = transitions._value.get()
    conflicts_before = BOOKING_CONFLICTS_TOTAL._value.get()
    failures_before = failures._value.get()

    record_booking_transition("pending", "confirmed")
    record_booking_conflict()
    record_side_effect_failure("booking.completed")

    assert transitions._value.get() == transitions_before + 1
    assert BOOKING_CONFLICTS_TOTAL._value.get() == conflicts_before + 1
    assert failures._value.get() == failures_before + 1


@pytest.mark.asyncio
async def test_metrics_endpoint_exposes_prometheus_payload() -> None:
    response = await main_module.metrics_endpoint(_make_request("/metrics"))
    payload = response.body.decode("utf-8")

    assert response.status_code == 200
    assert "servicemarket_http_requests_total" in payload
    assert "servicemarket_booking_transitions_total" in payload
    assert "servicemarket_booking_conflicts_total" in payload
