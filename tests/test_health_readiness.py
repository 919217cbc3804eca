from __future__ import annotations

import pytest
from fastapi import HTTPException

import app.main as main_module


async def _up() -> bool:
    return True


async def _down() -> bool:
    return False


@pytest.mark.asyncio
async def test_healthcheck_reports_ok() -> None:
    assert await main_module.healthcheck() == {"status": "ok"}


@pytest.mark.asyncio
async def test_readiness_check_returns_ready_when_dependencies_answer(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(main_module, "_is_database_ready", _up)
    monkeypatch.setattr(main_module, "_is_rate_limiter_ready", _up)

    response = await main_module.readiness_check()

    assert response["status"] == "ready"
    assert response["database"] == "ok"
    assert response["rate_limiter"] == "ok"
    assert "timestamp" in response


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("database", "rate_limiter", "expected"),
    [
        (_down, _up, "database"),
        (_up, _down, "rate_limiter"),
        (_down, _down, "database, rate_limiter"),
    ],
)
async def test_readiness_check_names_failing_dependencies(
    monkeypatch: pytest.MonkeyPatch,
    database,
    rate_limiter,
    expected: str,
) -> None:
    monkeypatch.setattr(main_module, "_is_database_ready", database)
    monkeypatch.setattr(main_module, "_is_rate_limiter_ready", rate_limiter)

    with pytest.raises(HTTPException) as exc:
        await main_module.readiness_check()

    assert exc.value.status_code == 503
    assert exc.value.detail == f"Dependencies not ready: {expected}"


@pytest.mark.asyncio
async def test_in_memory_rate_limiter_is_always_ready(monkeypatch: pytest.MonkeyPatch) -> None:
    from app.core.rate_limit import InMemorySlidingWindowRateLimiter

    monkeypatch.setattr(main_module, "get_rate_limiter", InMemorySlidingWindowRateLimiter)

    assert await main_module._is_rate_limiter_ready() is True


def test_all_domain_routers_are_mounted() -> None:
    paths = {route.path for route in main_module.app.routes}

    assert "/api/v1/bookings" in paths
    assert "/api/v1/bookings/{booking_id}/status" in paths
    assert "/api/v1/bookings/{booking_id}/cancel" in paths
    assert "/api/v1/disputes/{dispute_id}/resolve" in paths
    assert "/api/v1/professionals/profiles" in paths
    assert "/api/v1/notifications/my" in paths
    assert "/api/v1/audit/logs" in paths
    assert "/api/v1/identity/users/me" in paths
