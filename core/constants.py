"""Application-wide constants and configuration values."""

from __future__ import annotations

from enum import Enum


# Status enums
class RoomStatus(str, Enum):
    """Room draw lifecycle status."""
    ACTIVE = "active"
    COMPLETED = "completed"


class NotifierKind(str, Enum):
    """Outbound email transports selectable at start-up."""
    CONSOLE = "console"
    TEST = "test"
    PROVIDER = "provider"


# Picker constants
class PickerDefaults:
    """Selection ledger configuration."""
    UNKNOWN_IDENTITY = "unknown"
    UNKNOWN_USER_AGENT = "unknown"
    PICKS_LOG_LIMIT = 50
    SAMPLE_PARTICIPANTS = (
        "Alice Johnson",
        "Bob Smith",
        "Charlie Brown",
        "Diana Prince",
        "Edward Norton",
        "Fiona Green",
        "George Wilson",
        "Hannah Davis",
        "Ian Miller",
        "Julia Roberts",
    )


# Rate limiting
class RateLimitDefaults:
    """Per-address HTTP rate limiting."""
    MAX_REQUESTS = 20  # per window
    WINDOW_SECONDS = 60.0
    EXEMPT_PATHS = frozenset({"/health", "/api/status"})


# Notification settings
class NotificationDefaults:
    """Notification service defaults."""
    FROM_ADDRESS = "noreply@randompicker.app"
    FROM_NAME = "Random Picker"
    PREVIEW_LENGTH = 200  # characters of HTML echoed by the console notifier
    CONSOLE_OUTBOX_SIZE = 100
    SMTP_TIMEOUT = 10  # seconds
    TEST_SMTP_HOST = "smtp.ethereal.email"
    TEST_SMTP_PORT = 587
    ETHEREAL_PREVIEW_URL = "https://ethereal.email/message"
    SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"
    HTTP_TIMEOUT = 10  # seconds
