"""Database package public API."""

from .models import PickRecord, PicksLog, Room, UsedIdentity
from .store import InMemoryStore, LedgerStore
from .sqlite_store import SQLiteStore
from .migrations import run_migrations

__all__ = [
    "PickRecord",
    "PicksLog",
    "Room",
    "UsedIdentity",
    "LedgerStore",
    "InMemoryStore",
    "SQLiteStore",
    "run_migrations",
]
