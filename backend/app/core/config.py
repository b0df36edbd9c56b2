"""
Application configuration loaded from environment variables.

The booking core never reads the environment itself: routes build a
``BookingConfig`` once and pass it explicitly into the availability
calculator and the booking handler.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, time

from dotenv import load_dotenv

from app.core.logging_context import install_request_id_filter

load_dotenv()

logger = logging.getLogger(__name__)

CONFLICT_POLICIES = ("exact", "sampled")
REMINDER_PROVIDERS = ("log", "sms")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid integer for {env_var}: {raw!r}") from None


def _safe_bool(env_var: str, default: str) -> bool:
    raw = os.getenv(env_var, default)
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def parse_clock(value: str) -> time:
    """Parse an ``HH:MM`` (or ``HH:MM:SS``) 24h string into a ``time``."""
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value, fmt).time()
        except (ValueError, TypeError):
            continue
    raise ValueError(f"Invalid time of day: {value!r}; expected HH:MM (24h)")


@dataclass(frozen=True)
class BookingConfig:
    """Settings that shape slot computation and booking validation."""

    notes_max_length: int = field(
        default_factory=lambda: _safe_int("BOOKING_NOTES_MAX_LENGTH", "500")
    )
    default_opening_time: str = field(
        default_factory=lambda: os.getenv("DEFAULT_OPENING_TIME", "09:00")
    )
    default_closing_time: str = field(
        default_factory=lambda: os.getenv("DEFAULT_CLOSING_TIME", "19:00")
    )
    conflict_policy: str = field(
        default_factory=lambda: os.getenv("SLOT_CONFLICT_POLICY", "exact").lower()
    )
    sample_granularity_minutes: int = field(
        default_factory=lambda: _safe_int("SLOT_SAMPLE_GRANULARITY", "30")
    )
    enforce_operating_hours: bool = field(
        default_factory=lambda: _safe_bool("ENFORCE_OPERATING_HOURS", "true")
    )


@dataclass(frozen=True)
class ReminderConfig:
    """Downstream reminder collaborator settings."""

    provider: str = field(
        default_factory=lambda: os.getenv("REMINDER_PROVIDER", "log").lower()
    )
    twilio_account_sid: str | None = field(
        default_factory=lambda: os.getenv("TWILIO_ACCOUNT_SID")
    )
    twilio_auth_token: str | None = field(
        default_factory=lambda: os.getenv("TWILIO_AUTH_TOKEN")
    )
    twilio_phone_number: str | None = field(
        default_factory=lambda: os.getenv("TWILIO_PHONE_NUMBER")
    )


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    booking: BookingConfig = field(default_factory=BookingConfig)
    reminders: ReminderConfig = field(default_factory=ReminderConfig)
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    app_env: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))


def validate_booking_config(config: BookingConfig) -> None:
    """Validate booking settings are within acceptable ranges."""
    if config.notes_max_length < 1:
        raise ValueError(
            f"BOOKING_NOTES_MAX_LENGTH must be >= 1, got {config.notes_max_length}"
        )
    if config.sample_granularity_minutes < 1:
        raise ValueError(
            f"SLOT_SAMPLE_GRANULARITY must be >= 1, got {config.sample_granularity_minutes}"
        )
    if config.conflict_policy not in CONFLICT_POLICIES:
        raise ValueError(
            f"SLOT_CONFLICT_POLICY must be one of {CONFLICT_POLICIES}, "
            f"got {config.conflict_policy!r}"
        )
    opening = parse_clock(config.default_opening_time)
    closing = parse_clock(config.default_closing_time)
    if opening >= closing:
        raise ValueError(
            "DEFAULT_OPENING_TIME must be earlier than DEFAULT_CLOSING_TIME, "
            f"got {config.default_opening_time} >= {config.default_closing_time}"
        )


def _validate_config(config: AppConfig) -> None:
    validate_booking_config(config.booking)
    if config.reminders.provider not in REMINDER_PROVIDERS:
        raise ValueError(
            f"REMINDER_PROVIDER must be one of {REMINDER_PROVIDERS}, "
            f"got {config.reminders.provider!r}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_request_id_filter()
    logger.info(f"Configuration loaded for environment '{config.app_env}'")
    return config


settings = load_config()


def get_booking_config() -> BookingConfig:
    """FastAPI dependency; tests override it with a tailored config."""
    return settings.booking
