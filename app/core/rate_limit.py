"""Sliding-window rate limiting for write-heavy endpoints.

Two interchangeable backends are provided: a per-process in-memory window for
single-replica deployments and tests, and a Redis sorted-set window shared by
every API replica. Both count hits in the trailing ``window_seconds`` and
report how long a rejected caller has to wait.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from collections import defaultdict, deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol
from uuid import uuid4

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after_seconds: int = 0


class RateLimiter(Protocol):
    async def hit(self, key: str, *, limit: int, window_seconds: int) -> RateLimitDecision:
        """Record one hit for ``key`` unless the window is already full."""

    async def reset(self) -> None:
        """Forget every tracked window."""

    async def ping(self) -> bool:
        """Report whether the backend is reachable."""

    async def close(self) -> None:
        """Release backend connections."""


def _wait_seconds(oldest_hit: float, window_seconds: int, now: float) -> int:
    return max(1, math.ceil(oldest_hit + window_seconds - now))


class InMemorySlidingWindowRateLimiter:
    """Per-process window; counts are lost on restart."""

    def __init__(self, now_provider: Callable[[], float] | None = None) -> None:
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()
        self._now = now_provider or time.monotonic

    async def hit(self, key: str, *, limit: int, window_seconds: int) -> RateLimitDecision:
        now = self._now()
        async with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= now - window_seconds:
                hits.popleft()

            if len(hits) >= limit:
                return RateLimitDecision(
                    allowed=False,
                    remaining=0,
                    retry_after_seconds=_wait_seconds(hits[0], window_seconds, now),
                )

            hits.append(now)
            return RateLimitDecision(allowed=True, remaining=limit - len(hits))

    async def reset(self) -> None:
        async with self._lock:
            self._hits.clear()

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


# KEYS[1] window key; ARGV: now, window, limit, member.
# Returns {allowed, remaining, oldest_hit}.
_REDIS_HIT_SCRIPT = """
local now = tonumber(ARGV[1])
local window = tonumber(ARGV[2])
local limit = tonumber(ARGV[3])

redis.call('ZREMRANGEBYSCORE', KEYS[1], '-inf', now - window)
local used = redis.call('ZCARD', KEYS[1])
if used >= limit then
  local oldest = redis.call('ZRANGE', KEYS[1], 0, 0, 'WITHSCORES')
  return {0, 0, oldest[2] or tostring(now)}
end

redis.call('ZADD', KEYS[1], now, ARGV[4])
redis.call('EXPIRE', KEYS[1], math.ceil(window))
return {1, limit - used - 1, tostring(now)}
"""


class RedisSlidingWindowRateLimiter:
    """Window kept in one Redis sorted set per key, updated atomically by a script."""

    def __init__(
        self,
        *,
        redis_url: str,
        namespace: str,
        now_provider: Callable[[], float] | None = None,
    ) -> None:
        self._redis_url = redis_url
        self._namespace = namespace
        self._now = now_provider or time.time
        self._connect_lock = asyncio.Lock()
        self._client: Any | None = None
        self._hit_script: Any | None = None

    async def _connect(self) -> Any:
        if self._client is not None:
            return self._client

        async with self._connect_lock:
            if self._client is None:
                from redis.asyncio import from_url

                client = from_url(self._redis_url, encoding="utf-8", decode_responses=True)
                self._hit_script = client.register_script(_REDIS_HIT_SCRIPT)
                self._client = client
        return self._client

    async def hit(self, key: str, *, limit: int, window_seconds: int) -> RateLimitDecision:
        await self._connect()
        now = self._now()
        allowed, remaining, oldest_hit = await self._hit_script(
            keys=[f"{self._namespace}:{key}"],
            args=[now, window_seconds, limit, f"{now}:{uuid4().hex}"],
        )
        if int(allowed):
            return RateLimitDecision(allowed=True, remaining=int(remaining))
        return RateLimitDecision(
            allowed=False,
            remaining=0,
            retry_after_seconds=_wait_seconds(float(oldest_hit), window_seconds, now),
        )

    async def reset(self) -> None:
        client = await self._connect()
        async for storage_key in client.scan_iter(match=f"{self._namespace}:*", count=100):
            await client.delete(storage_key)

    async def ping(self) -> bool:
        client = await self._connect()
        return bool(await client.ping())

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self._hit_script = None


_rate_limiter: RateLimiter | None = None
_rate_limiter_signature: tuple[str, str | None, str] | None = None


def _build_rate_limiter(settings: Settings) -> RateLimiter:
    if settings.booking_rate_limit_backend == "redis":
        return RedisSlidingWindowRateLimiter(
            redis_url=settings.redis_url or "",
            namespace=settings.booking_rate_limit_redis_namespace,
        )
    return InMemorySlidingWindowRateLimiter()


def get_rate_limiter() -> RateLimiter:
    """Return the process-wide limiter, rebuilding it when its settings change."""
    global _rate_limiter, _rate_limiter_signature
    settings = get_settings()
    signature = (
        settings.booking_rate_limit_backend,
        settings.redis_url,
        settings.booking_rate_limit_redis_namespace,
    )
    if _rate_limiter is None or _rate_limiter_signature != signature:
        if _rate_limiter is not None:
            logger.info("Rate limiter settings changed, switching to %s backend", signature[0])
        _rate_limiter = _build_rate_limiter(settings)
        _rate_limiter_signature = signature
    return _rate_limiter


async def close_rate_limiter() -> None:
    global _rate_limiter, _rate_limiter_signature
    if _rate_limiter is not None:
        await _rate_limiter.close()
    _rate_limiter = None
    _rate_limiter_signature = None
