from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.core.config import Settings


def test_default_secret_key_allowed_in_development() -> None:
    settings = Settings(_env_file=None, app_env="development", secret_key="change-me")
    assert settings.secret_key == "change-me"


def test_booking_engine_defaults() -> None:
    settings = Settings(_env_file=None)
    assert settings.booking_max_duration_minutes == 1440
    assert settings.booking_operation_timeout_seconds == 10.0
    assert settings.notification_send_timeout_seconds == 5.0
    assert settings.booking_rate_limit_backend == "memory"


def test_default_secret_key_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(
            _env_file=None,
            app_env="production",
            secret_key="change-me",
            booking_rate_limit_allow_in_memory_in_production=True,
        )


def test_placeholder_secret_key_prefix_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(
            _env_file=None,
            app_env="prod",
            secret_key="change-me-in-production",
            booking_rate_limit_allow_in_memory_in_production=True,
        )


def test_in_memory_rate_limiter_requires_explicit_ack_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="production", secret_key="super-secure-value")


def test_custom_secret_key_allowed_in_production_with_explicit_ack() -> None:
    settings = Settings(
        _env_file=None,
        app_env="production",
        secret_key="super-secure-value",
        booking_rate_limit_allow_in_memory_in_production=True,
    )
    assert settings.secret_key == "super-secure-value"


def test_redis_backend_requires_redis_url() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, booking_rate_limit_backend="redis", redis_url=None)


def test_backend_name_is_case_insensitive() -> None:
    settings = Settings(
        _env_file=None,
        booking_rate_limit_backend=" Redis ",
        redis_url="redis://localhost:6379/0",
    )
    assert settings.booking_rate_limit_backend == "redis"


def test_non_positive_operation_timeout_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, booking_operation_timeout_seconds=0)
