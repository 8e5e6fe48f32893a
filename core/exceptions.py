"""Application-wide exception classes.

Every error that reaches a caller carries a machine-readable ``code`` and the
HTTP status the web layer answers with.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional


class ApplicationError(Exception):
    """Base exception for all application errors."""

    code = "APPLICATION_ERROR"
    http_status = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error for JSON responses."""
        return {"error": self.message, "code": self.code}


class ConfigurationError(ApplicationError):
    """Raised when configuration is invalid."""
    code = "CONFIGURATION_ERROR"
    default_message = "Invalid configuration"


class StorageError(ApplicationError):
    """Raised when the persistent store cannot be read or written."""
    code = "STORAGE_ERROR"
    default_message = "Storage operation failed"


class LotteryError(ApplicationError):
    """Base exception for selection operations."""
    code = "SELECTION_ERROR"
    http_status = 400
    default_message = "Selection failed"


class AlreadyPickedError(LotteryError):
    """Raised when an identity or a room already has its selection."""
    code = "ALREADY_PICKED"
    http_status = 403
    default_message = "You have already made a pick from this device/network."

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["canPick"] = False
        return data


class NoParticipantsError(LotteryError):
    """Raised when there are no participants to draw from."""
    code = "NO_PARTICIPANTS"
    default_message = "No participants available"


class NotActiveError(LotteryError):
    """Raised when a room is no longer accepting a draw."""
    code = "NOT_ACTIVE"
    default_message = "Room is no longer active"


class NotFoundError(ApplicationError):
    """Raised when a requested entity does not exist."""
    code = "NOT_FOUND"
    http_status = 404
    default_message = "Not found"


class ValidationError(ApplicationError):
    """Raised when data validation fails."""
    code = "VALIDATION_ERROR"
    http_status = 400
    default_message = "Validation failed"


class InvalidInputError(ValidationError):
    """Raised when required input is missing or malformed."""
    code = "INVALID_INPUT"
    default_message = "Invalid input"


class InvalidEmailError(ValidationError):
    """Raised when one or more email addresses are malformed."""
    code = "INVALID_EMAIL"
    default_message = "Invalid email addresses found"

    def __init__(self, invalid_emails: Iterable[str], message: Optional[str] = None) -> None:
        self.invalid_emails: List[str] = list(invalid_emails)
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["invalidEmails"] = self.invalid_emails
        return data


class NotificationFailure(ApplicationError):
    """Raised by a notifier transport when one recipient cannot be reached.

    Caught by the notification fan-out and never surfaced to callers.
    """
    code = "NOTIFICATION_FAILURE"
    http_status = 502
    default_message = "Notification failed"

    def __init__(self, recipient: str, reason: str) -> None:
        self.recipient = recipient
        self.reason = reason
        super().__init__(f"Failed to notify {recipient}: {reason}")


class RateLimitError(ApplicationError):
    """Raised when rate limit is exceeded."""
    code = "RATE_LIMITED"
    http_status = 429
    default_message = "Too many requests from this IP, please try again later."

    def __init__(self, retry_after: int = 60, message: Optional[str] = None) -> None:
        self.retry_after = retry_after
        super().__init__(message)


class AuthenticationError(ApplicationError):
    """Raised when operator authentication fails."""
    code = "UNAUTHORIZED"
    http_status = 401
    default_message = "Operator credentials required"
