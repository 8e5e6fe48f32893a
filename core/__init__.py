"""Core application components."""

from core.logger import setup_logger, get_logger
from core.constants import (
    RoomStatus,
    NotifierKind,
    PickerDefaults,
    RateLimitDefaults,
    NotificationDefaults,
)
from core.exceptions import (
    ApplicationError,
    ConfigurationError,
    StorageError,
    LotteryError,
    AlreadyPickedError,
    NoParticipantsError,
    NotActiveError,
    NotFoundError,
    ValidationError,
    InvalidInputError,
    InvalidEmailError,
    NotificationFailure,
    RateLimitError,
    AuthenticationError,
)

__all__ = [
    # Logging
    'setup_logger',
    'get_logger',
    # Constants
    'RoomStatus',
    'NotifierKind',
    'PickerDefaults',
    'RateLimitDefaults',
    'NotificationDefaults',
    # Exceptions
    'ApplicationError',
    'ConfigurationError',
    'StorageError',
    'LotteryError',
    'AlreadyPickedError',
    'NoParticipantsError',
    'NotActiveError',
    'NotFoundError',
    'ValidationError',
    'InvalidInputError',
    'InvalidEmailError',
    'NotificationFailure',
    'RateLimitError',
    'AuthenticationError',
]
