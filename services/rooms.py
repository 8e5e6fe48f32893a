"""Room draws: one random winner per named group of email participants."""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from core import get_logger, RoomStatus
from core.exceptions import (
    AlreadyPickedError,
    InvalidEmailError,
    InvalidInputError,
    NotActiveError,
    NotFoundError,
)
from database.models import Room, utcnow
from database.store import LedgerStore
from services.notification_service import NotificationService
from services.notifier import DeliveryResult
from utils.locks import KeyedLock
from utils.performance import monitor
from utils.validators import split_emails, validate_room_name

logger = get_logger(__name__)


@dataclass
class RoomDrawResult:
    room: Room
    deliveries: List[DeliveryResult] = field(default_factory=list)

    @property
    def winner(self) -> str:
        return self.room.winner

    @property
    def emails_sent(self) -> int:
        return sum(1 for delivery in self.deliveries if delivery.delivered)


class RoomDraw:
    """Creates rooms and draws their single winner.

    The winner is committed before any participant is notified, so a crash or
    a failing transport can never lose or change it.
    """

    def __init__(
        self,
        store: LedgerStore,
        notifications: NotificationService,
        rng: Optional[random.Random] = None,
        clock: Callable = utcnow,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.store = store
        self.notifications = notifications
        self._rng = rng or random.Random()
        self._clock = clock
        self._id_factory = id_factory
        self._locks = KeyedLock()

    def create_room(
        self,
        name: str,
        emails: Sequence[str],
        description: Optional[str] = "",
        created_by: Optional[str] = None,
    ) -> Room:
        """Validate and store a new active room.

        Raises:
            InvalidInputError: If the name is blank or no email list is given
            InvalidEmailError: Listing every malformed address
        """
        if (
            not validate_room_name(name)
            or not isinstance(emails, (list, tuple))
            or not emails
            or not all(isinstance(email, str) for email in emails)
        ):
            raise InvalidInputError("Room name and email list are required")

        valid, invalid = split_emails(emails)
        if invalid:
            raise InvalidEmailError(invalid)

        room = Room(
            id=self._id_factory(),
            name=name.strip(),
            description=(description or "").strip(),
            emails=valid,
            created_at=self._clock(),
            created_by=created_by,
        )
        self.store.insert_room(room)
        logger.info("Room created: %s with %d participants", room.name, len(room.emails))
        return room

    def list_rooms(self) -> List[Room]:
        return self.store.list_rooms()

    def get_room(self, room_id: str) -> Room:
        room = self.store.get_room(room_id)
        if room is None:
            raise NotFoundError("Room not found")
        return room

    def pick_room_winner(self, room_id: str) -> RoomDrawResult:
        """Draw the room's winner, persist it, then notify every participant.

        Raises:
            NotFoundError: If the room does not exist
            AlreadyPickedError: If the room already has a winner
            NotActiveError: If the room is not active
            StorageError: If the winner could not be recorded
        """
        # Unknown ids are rejected before a lock is taken for them
        self.get_room(room_id)

        with self._locks.hold(room_id), monitor.track_draw():
            room = self.get_room(room_id)
            if room.winner is not None:
                monitor.record_room_draw("already_picked")
                raise AlreadyPickedError("Winner already selected for this room")
            if room.status is not RoomStatus.ACTIVE:
                monitor.record_room_draw("not_active")
                raise NotActiveError()

            winner = room.emails[self._rng.randrange(len(room.emails))]
            completed = self.store.complete_room(room_id, winner, self._clock())
            if completed is None:
                monitor.record_room_draw("already_picked")
                raise AlreadyPickedError("Winner already selected for this room")

        monitor.record_room_draw("success")
        logger.info("Winner selected for room %s: %s", completed.name, winner)

        deliveries = self.notifications.notify_room_result(completed)
        return RoomDrawResult(room=completed, deliveries=deliveries)
