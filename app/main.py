"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status
from sqlalchemy import text

from app.core.config import get_settings
from app.core.database import SessionLocal, close_engine, session_scope
from app.core.metrics import build_metrics_response, instrument_http_request
from app.core.rate_limit import close_rate_limiter, get_rate_limiter
from app.modules.audit.router import router as audit_router
from app.modules.booking.router import router as booking_router
from app.modules.disputes.router import router as disputes_router
from app.modules.identity.repository import IdentityRepository
from app.modules.identity.router import router as identity_router
from app.modules.identity.service import IdentityService
from app.modules.notifications.router import router as notifications_router
from app.modules.professionals.router import router as professionals_router
from app.shared.exceptions import register_exception_handlers
from app.shared.utils import utc_now

settings = get_settings()
logger = logging.getLogger(__name__)

DOMAIN_ROUTERS = (
    identity_router,
    professionals_router,
    booking_router,
    disputes_router,
    notifications_router,
    audit_router,
)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Seed marketplace roles on startup; release pools on shutdown."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info("Starting %s (%s)", settings.app_name, settings.app_env)

    try:
        async with session_scope() as session:
            await IdentityService(IdentityRepository(session)).ensure_default_roles()
    except Exception:
        logger.exception("Could not seed marketplace roles")
        raise

    yield

    logger.info("Shutting down %s", settings.app_name)
    await close_rate_limiter()
    await close_engine()


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)
app.middleware("http")(instrument_http_request)

register_exception_handlers(app)

for domain_router in DOMAIN_ROUTERS:
    app.include_router(domain_router, prefix=settings.api_prefix)


@app.get("/health")
async def healthcheck() -> dict[str, str]:
    """Liveness probe endpoint."""
    return {"status": "ok"}


async def _is_database_ready() -> bool:
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("Database readiness check failed")
        return False


async def _is_rate_limiter_ready() -> bool:
    try:
        return await get_rate_limiter().ping()
    except Exception:
        logger.exception("Rate limiter readiness check failed")
        return False


@app.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Readiness probe: database and booking rate limiter backend must answer."""
    checks = {
        "database": await _is_database_ready(),
        "rate_limiter": await _is_rate_limiter_ready(),
    }
    failing = sorted(name for name, ok in checks.items() if not ok)
    if failing:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Dependencies not ready: {', '.join(failing)}",
        )
    return {
        "status": "ready",
        **{name: "ok" for name in checks},
        "timestamp": utc_now().isoformat(),
    }


@app.get("/metrics", include_in_schema=False)
async def metrics_endpoint(_: Request) -> Response:
    """Prometheus metrics endpoint."""
    return build_metrics_response()
