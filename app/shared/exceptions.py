"""Custom exception hierarchy and handlers."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppException(Exception):
    """Base application exception."""

    status_code = 400
    code = "app_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundException(AppException):
    """Raised when entity is not found."""

    status_code = 404
    code = "not_found"


class ConflictException(AppException):
    """Raised when entity conflicts with current state."""

    status_code = 409
    code = "conflict"


class SchedulingConflictException(ConflictException):
    """Raised when a booking window overlaps an active booking of the professional."""

    code = "scheduling_conflict"


class InvalidTransitionException(ConflictException):
    """Raised when a booking cannot move from its current status to the requested one."""

    code = "invalid_transition"

    def __init__(self, current_status: str, target_status: str, message: str | None = None) -> None:
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(message or f"Invalid status transition from {current_status} to {target_status}")


class UnauthorizedException(AppException):
    """Raised when user has no rights for operation."""

    status_code = 403
    code = "forbidden"


class ValidationException(AppException):
    """Raised when input is structurally valid JSON but breaks a domain rule."""

    status_code = 422
    code = "validation_failure"


class RateLimitException(AppException):
    """Raised when caller exceeds request quota."""

    status_code = 429
    code = "rate_limited"


class OperationTimeoutException(AppException):
    """Raised when an operation does not finish within its deadline."""

    status_code = 504
    code = "operation_timeout"


async def app_exception_handler(_: Request, exc: AppException) -> JSONResponse:
    """Handle custom domain exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.code, "message": exc.message}},
    )


async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions in unified shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "http_error", "message": str(exc.detail)}},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request body/query validation errors in unified shape."""
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": ValidationException.code,
                "message": "Request validation failed",
                "details": jsonable_encoder(exc.errors()),
            },
        },
    )


async def unhandled_exception_handler(_: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception("Unhandled error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "internal_error", "message": "Internal server error"}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
