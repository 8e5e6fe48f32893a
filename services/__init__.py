"""Services package."""

from .participants import ParticipantSource, StaticParticipantSource, FileParticipantSource
from .ledger import SelectionLedger, Eligibility
from .notifier import (
    Notifier,
    ConsoleNotifier,
    TestNotifier,
    ProviderNotifier,
    DeliveryResult,
    create_notifier,
)
from .notification_service import NotificationService
from .rooms import RoomDraw, RoomDrawResult
from .context import ServiceContext, build_services

__all__ = [
    "ParticipantSource",
    "StaticParticipantSource",
    "FileParticipantSource",
    "SelectionLedger",
    "Eligibility",
    "Notifier",
    "ConsoleNotifier",
    "TestNotifier",
    "ProviderNotifier",
    "DeliveryResult",
    "create_notifier",
    "NotificationService",
    "RoomDraw",
    "RoomDrawResult",
    "ServiceContext",
    "build_services",
]
