from __future__ import annotations

from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.core.rate_limit import InMemorySlidingWindowRateLimiter, RateLimitDecision
from app.modules.booking import rate_limit as booking_rate_limit
from app.shared.exceptions import RateLimitException


def _settings(create_requests: int = 2) -> SimpleNamespace:
    return SimpleNamespace(
        booking_rate_limit_window_seconds=60,
        booking_rate_limit_create_requests=create_requests,
    )


@pytest.mark.asyncio
async def test_booking_creation_blocked_after_threshold(monkeypatch: pytest.MonkeyPatch) -> None:
    limiter = InMemorySlidingWindowRateLimiter(now_provider=lambda: 500.0)
    monkeypatch.setattr(booking_rate_limit, "get_rate_limiter", lambda: limiter)
    monkeypatch.setattr(booking_rate_limit, "get_settings", _settings)
    customer = SimpleNamespace(id=uuid4())

    await booking_rate_limit.enforce_booking_create_rate_limit(customer)
    await booking_rate_limit.enforce_booking_create_rate_limit(customer)
    with pytest.raises(RateLimitException) as exc:
        await booking_rate_limit.enforce_booking_create_rate_limit(customer)

    assert exc.value.status_code == 429
    assert "60 second(s)" in exc.value.message


@pytest.mark.asyncio
async def test_booking_rate_limit_is_tracked_per_customer(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: list[tuple[str, int, int]] = []

    class CapturingLimiter:
        async def hit(self, key: str, *, limit: int, window_seconds: int) -> RateLimitDecision:
            captured.append((key, limit, window_seconds))
            return RateLimitDecision(allowed=True, remaining=limit - 1)

    monkeypatch.setattr(booking_rate_limit, "get_rate_limiter", lambda: CapturingLimiter())
    monkeypatch.setattr(booking_rate_limit, "get_settings", _settings)
    first, second = SimpleNamespace(id=uuid4()), SimpleNamespace(id=uuid4())

    await booking_rate_limit.enforce_booking_create_rate_limit(first)
    await booking_rate_limit.enforce_booking_create_rate_limit(second)

    assert captured == [
        (f"booking:create:{first.id}", 2, 60),
        (f"booking:create:{second.id}", 2, 60),
    ]
