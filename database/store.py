"""Persistence contract for the picker and its in-memory implementation."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from core.exceptions import StorageError
from database.models import PickRecord, Room, UsedIdentity


class LedgerStore(ABC):
    """Storage for used identities, the pick audit log and rooms.

    Implementations must make ``record_pick`` all-or-nothing and make
    ``complete_room`` a conditional update that only lands while the room has
    no winner.
    """

    # Selection ledger

    @abstractmethod
    def is_identity_used(self, identity: str) -> bool:
        """Return True if the identity already has a recorded pick."""

    @abstractmethod
    def record_pick(self, used: UsedIdentity, record: PickRecord) -> bool:
        """Insert the identity if absent and append the pick record.

        Returns:
            False, writing nothing, if the identity was already present
        """

    @abstractmethod
    def list_used_identities(self) -> List[UsedIdentity]:
        ...

    @abstractmethod
    def list_picks(self, limit: Optional[int] = None) -> List[PickRecord]:
        """Return pick records in insertion order, the last ``limit`` if given."""

    @abstractmethod
    def count_picks(self) -> int:
        ...

    @abstractmethod
    def count_identities(self) -> int:
        ...

    @abstractmethod
    def clear_picks(self) -> None:
        """Delete all used identities and pick records together."""

    # Rooms

    @abstractmethod
    def insert_room(self, room: Room) -> None:
        """Store a new room; raises ``StorageError`` if the id is taken."""

    @abstractmethod
    def get_room(self, room_id: str) -> Optional[Room]:
        ...

    @abstractmethod
    def list_rooms(self) -> List[Room]:
        ...

    @abstractmethod
    def complete_room(self, room_id: str, winner: str, picked_at: datetime) -> Optional[Room]:
        """Set winner, completion time and status if the room has no winner.

        Returns:
            The updated room, or None if it is unknown or already has a winner
        """


class InMemoryStore(LedgerStore):
    """Process-local store used for tests and ephemeral deployments."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._used: Dict[str, UsedIdentity] = {}
        self._picks: List[PickRecord] = []
        self._rooms: Dict[str, Room] = {}

    def is_identity_used(self, identity: str) -> bool:
        with self._lock:
            return identity in self._used

    def record_pick(self, used: UsedIdentity, record: PickRecord) -> bool:
        with self._lock:
            if used.identity in self._used:
                return False
            self._used[used.identity] = used
            self._picks.append(record)
            return True

    def list_used_identities(self) -> List[UsedIdentity]:
        with self._lock:
            return list(self._used.values())

    def list_picks(self, limit: Optional[int] = None) -> List[PickRecord]:
        with self._lock:
            if limit is None:
                return list(self._picks)
            return self._picks[-limit:] if limit > 0 else []

    def count_picks(self) -> int:
        with self._lock:
            return len(self._picks)

    def count_identities(self) -> int:
        with self._lock:
            return len(self._used)

    def clear_picks(self) -> None:
        with self._lock:
            self._used.clear()
            self._picks.clear()

    def insert_room(self, room: Room) -> None:
        with self._lock:
            if room.id in self._rooms:
                raise StorageError(f"Failed to store room {room.id}: duplicate id")
            self._rooms[room.id] = room

    def get_room(self, room_id: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(room_id)

    def list_rooms(self) -> List[Room]:
        with self._lock:
            return list(self._rooms.values())

    def complete_room(self, room_id: str, winner: str, picked_at: datetime) -> Optional[Room]:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None or room.winner is not None:
                return None
            updated = room.completed(winner, picked_at)
            self._rooms[room_id] = updated
            return updated
