"""Data access layer models.

Field names are snake_case; ``to_dict`` emits the camelCase wire format the
JSON API exposes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.constants import RoomStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    """Render timestamps as ISO-8601 with a ``Z`` suffix."""
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True, slots=True)
class UsedIdentity:
    identity: str
    timestamp: datetime
    user_agent: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ip": self.identity,
            "timestamp": isoformat(self.timestamp),
            "userAgent": self.user_agent,
        }


@dataclass(frozen=True, slots=True)
class PickRecord:
    identity: str
    selected_participant: str
    timestamp: datetime
    user_agent: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ip": self.identity,
            "selectedParticipant": self.selected_participant,
            "timestamp": isoformat(self.timestamp),
            "userAgent": self.user_agent,
        }


@dataclass(frozen=True, slots=True)
class Room:
    id: str
    name: str
    description: str
    emails: List[str]
    created_at: datetime
    created_by: Optional[str] = None
    status: RoomStatus = RoomStatus.ACTIVE
    winner: Optional[str] = None
    picked_at: Optional[datetime] = None

    def completed(self, winner: str, picked_at: datetime) -> "Room":
        """Return the completed copy of this room."""
        return replace(self, winner=winner, picked_at=picked_at, status=RoomStatus.COMPLETED)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "emails": list(self.emails),
            "createdAt": isoformat(self.created_at),
            "createdBy": self.created_by,
            "status": self.status.value,
            "winner": self.winner,
            "pickedAt": isoformat(self.picked_at),
        }


@dataclass(slots=True)
class PicksLog:
    recent: List[PickRecord] = field(default_factory=list)
    total_picks: int = 0
    total_unique_identities: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "picksLog": [record.to_dict() for record in self.recent],
            "totalPicks": self.total_picks,
            "totalUniqueIPs": self.total_unique_identities,
        }
