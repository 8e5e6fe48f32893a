"""Service wiring for one process."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from config import Config
from core import get_logger
from database import LedgerStore, SQLiteStore
from services.ledger import SelectionLedger
from services.notification_service import NotificationService
from services.notifier import Notifier, create_notifier
from services.participants import FileParticipantSource, ParticipantSource
from services.rooms import RoomDraw

logger = get_logger(__name__)


@dataclass
class ServiceContext:
    """Everything a request handler needs, built once at start-up."""
    config: Config
    store: LedgerStore
    participants: ParticipantSource
    notifier: Notifier
    ledger: SelectionLedger
    rooms: RoomDraw

    @property
    def email_service(self) -> str:
        return self.notifier.service


def build_services(
    config: Config,
    store: Optional[LedgerStore] = None,
    participants: Optional[ParticipantSource] = None,
    notifier: Optional[Notifier] = None,
) -> ServiceContext:
    """Create the service context, substituting any collaborator given."""
    store = store or SQLiteStore(config.database_path)
    participants = participants or FileParticipantSource(
        config.participants_file,
        cache_ttl=config.participants_cache_ttl,
    )
    notifier = notifier or create_notifier(config)

    context = ServiceContext(
        config=config,
        store=store,
        participants=participants,
        notifier=notifier,
        ledger=SelectionLedger(store, participants),
        rooms=RoomDraw(store, NotificationService(notifier)),
    )
    logger.info("Services initialized (email service: %s)", context.email_service)
    return context
