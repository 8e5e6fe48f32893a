"""Application configuration module.

Reads settings from environment variables with sane defaults for a single
process picker service.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from core.constants import NotificationDefaults, RateLimitDefaults

# Load environment variables from .env file
load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    """Get integer from environment variable with fallback."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    """Get float from environment variable with fallback."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_str(name: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.getenv(name, default)


def _get_optional(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


@dataclass(frozen=True)
class Config:
    environment: str
    debug: bool
    web_host: str
    web_port: int
    secret_key: str
    admin_username: str
    admin_password: str
    database_path: str
    participants_file: str
    participants_cache_ttl: int
    log_folder: str
    log_level: str
    trust_proxy: bool
    rate_limit_max: int
    rate_limit_window: float

    # Email configuration
    email_service: Optional[str]
    email_from: str
    smtp_host: str
    smtp_port: int
    smtp_user: Optional[str]
    smtp_pass: Optional[str]
    sendgrid_api_key: Optional[str]
    sendgrid_from_email: str


def load_config() -> Config:
    """Load application configuration from environment variables.

    Returns:
        Config: Application configuration with validated values
    """
    config = Config(
        environment=_get_str("ENVIRONMENT", "development"),
        debug=_get_bool("DEBUG", False),
        web_host=_get_str("WEB_HOST", "0.0.0.0"),
        web_port=_get_int("WEB_PORT", _get_int("PORT", 3000)),
        secret_key=_get_str(
            "SECRET_KEY",
            "production_secret_key_must_be_changed_in_production_environment"
        ),
        admin_username=_get_str("ADMIN_USERNAME", "admin"),
        admin_password=_get_str("ADMIN_PASSWORD", "123456"),
        database_path=_get_str("DATABASE_PATH", "data/picker.sqlite"),
        participants_file=_get_str("PARTICIPANTS_FILE", "data/participants.json"),
        participants_cache_ttl=_get_int("PARTICIPANTS_CACHE_TTL", 0),
        log_folder=_get_str("LOG_FOLDER", "logs"),
        log_level=_get_str("LOG_LEVEL", "INFO"),
        trust_proxy=_get_bool("TRUST_PROXY", False),
        rate_limit_max=_get_int("RATE_LIMIT_MAX", RateLimitDefaults.MAX_REQUESTS),
        rate_limit_window=_get_float("RATE_LIMIT_WINDOW", RateLimitDefaults.WINDOW_SECONDS),
        # Email configuration
        email_service=_get_optional("EMAIL_SERVICE"),
        email_from=_get_str("EMAIL_FROM", NotificationDefaults.FROM_ADDRESS),
        smtp_host=_get_str("SMTP_HOST", NotificationDefaults.TEST_SMTP_HOST),
        smtp_port=_get_int("SMTP_PORT", NotificationDefaults.TEST_SMTP_PORT),
        smtp_user=_get_optional("SMTP_USER"),
        smtp_pass=_get_optional("SMTP_PASS"),
        sendgrid_api_key=_get_optional("SENDGRID_API_KEY"),
        sendgrid_from_email=_get_str("SENDGRID_FROM_EMAIL", NotificationDefaults.FROM_ADDRESS),
    )

    return config
