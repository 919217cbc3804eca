"""Rate-limit dependency for booking creation."""

from __future__ import annotations

import logging

from fastapi import Depends

from app.core.config import get_settings
from app.core.rate_limit import get_rate_limiter
from app.modules.identity.models import User
from app.modules.identity.service import get_current_user
from app.shared.exceptions import RateLimitException

logger = logging.getLogger(__name__)


async def enforce_booking_create_rate_limit(current_user: User = Depends(get_current_user)) -> None:
    """Cap how many bookings one customer may request per window."""
    settings = get_settings()
    decision = await get_rate_limiter().hit(
        f"booking:create:{current_user.id}",
        limit=settings.booking_rate_limit_create_requests,
        window_seconds=settings.booking_rate_limit_window_seconds,
    )
    if not decision.allowed:
        logger.info("Booking creation throttled for customer %s", current_user.id)
        raise RateLimitException(
            f"Too many booking requests. Try again in {decision.retry_after_seconds} second(s).",
        )
