"""SQLite-backed implementation of the ledger store."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence

from core import get_logger
from core.constants import RoomStatus
from core.exceptions import StorageError
from database.migrations import run_migrations
from database.models import (
    PickRecord,
    Room,
    UsedIdentity,
    isoformat,
    parse_timestamp,
)
from database.store import LedgerStore

logger = get_logger(__name__)


class SQLiteStore(LedgerStore):
    """File-backed store using one short-lived connection per operation.

    Reads that fail are logged and answered as empty collections. Writes run
    inside ``BEGIN IMMEDIATE`` transactions and raise ``StorageError``.
    """

    def __init__(self, db_path: str, busy_timeout: float = 30.0) -> None:
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self._connection() as conn:
                # WAL is persistent for the database file
                conn.execute("PRAGMA journal_mode=WAL")
                run_migrations(conn)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot initialise database {self.db_path}: {e}") from e
        logger.info("SQLite store ready at %s", self.db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.db_path,
            timeout=self.busy_timeout,
            isolation_level=None  # Explicit transactions only
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.rollback()
                raise
            else:
                conn.commit()

    def _fetch_all(self, what: str, query: str, params: Sequence[Any] = ()) -> List[sqlite3.Row]:
        try:
            with self._connection() as conn:
                return conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            logger.error("Error reading %s from %s, treating as empty: %s", what, self.db_path, e)
            return []

    def _fetch_value(self, what: str, query: str, params: Sequence[Any] = ()) -> int:
        rows = self._fetch_all(what, query, params)
        return rows[0][0] if rows else 0

    # Selection ledger

    def is_identity_used(self, identity: str) -> bool:
        rows = self._fetch_all(
            "used identities",
            "SELECT 1 FROM used_identities WHERE identity=?",
            (identity,),
        )
        return bool(rows)

    def record_pick(self, used: UsedIdentity, record: PickRecord) -> bool:
        try:
            with self._transaction() as conn:
                cursor = conn.execute(
                    "INSERT OR IGNORE INTO used_identities (identity, timestamp, user_agent) VALUES (?, ?, ?)",
                    (used.identity, isoformat(used.timestamp), used.user_agent),
                )
                if cursor.rowcount == 0:
                    return False
                conn.execute(
                    """
                    INSERT INTO picks_log (identity, selected_participant, timestamp, user_agent)
                    VALUES (?, ?, ?, ?)
                    """,
                    (record.identity, record.selected_participant,
                     isoformat(record.timestamp), record.user_agent),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to record pick for {used.identity}: {e}") from e
        return True

    def list_used_identities(self) -> List[UsedIdentity]:
        rows = self._fetch_all(
            "used identities",
            "SELECT identity, timestamp, user_agent FROM used_identities ORDER BY timestamp",
        )
        return [
            UsedIdentity(
                identity=row["identity"],
                timestamp=parse_timestamp(row["timestamp"]),
                user_agent=row["user_agent"],
            )
            for row in rows
        ]

    def list_picks(self, limit: Optional[int] = None) -> List[PickRecord]:
        if limit is None:
            rows = self._fetch_all("picks log", "SELECT * FROM picks_log ORDER BY id")
        else:
            # Newest ``limit`` rows, returned oldest first
            rows = self._fetch_all(
                "picks log",
                "SELECT * FROM (SELECT * FROM picks_log ORDER BY id DESC LIMIT ?) ORDER BY id",
                (max(limit, 0),),
            )
        return [
            PickRecord(
                identity=row["identity"],
                selected_participant=row["selected_participant"],
                timestamp=parse_timestamp(row["timestamp"]),
                user_agent=row["user_agent"],
            )
            for row in rows
        ]

    def count_picks(self) -> int:
        return self._fetch_value("picks log", "SELECT COUNT(*) FROM picks_log")

    def count_identities(self) -> int:
        return self._fetch_value("used identities", "SELECT COUNT(*) FROM used_identities")

    def clear_picks(self) -> None:
        try:
            with self._transaction() as conn:
                conn.execute("DELETE FROM used_identities")
                conn.execute("DELETE FROM picks_log")
        except sqlite3.Error as e:
            raise StorageError(f"Failed to reset picks: {e}") from e

    # Rooms

    @staticmethod
    def _row_to_room(row: sqlite3.Row) -> Room:
        return Room(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            emails=json.loads(row["emails"]),
            created_at=parse_timestamp(row["created_at"]),
            created_by=row["created_by"],
            status=RoomStatus(row["status"]),
            winner=row["winner"],
            picked_at=parse_timestamp(row["picked_at"]),
        )

    def insert_room(self, room: Room) -> None:
        try:
            with self._transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO rooms (id, name, description, emails, created_at, created_by, status, winner, picked_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        room.id,
                        room.name,
                        room.description,
                        json.dumps(room.emails),
                        isoformat(room.created_at),
                        room.created_by,
                        room.status.value,
                        room.winner,
                        isoformat(room.picked_at),
                    ),
                )
        except sqlite3.Error as e:
            raise StorageError(f"Failed to store room {room.id}: {e}") from e

    def get_room(self, room_id: str) -> Optional[Room]:
        rows = self._fetch_all("rooms", "SELECT * FROM rooms WHERE id=?", (room_id,))
        return self._row_to_room(rows[0]) if rows else None

    def list_rooms(self) -> List[Room]:
        rows = self._fetch_all("rooms", "SELECT * FROM rooms ORDER BY created_at")
        return [self._row_to_room(row) for row in rows]

    def complete_room(self, room_id: str, winner: str, picked_at: datetime) -> Optional[Room]:
        try:
            with self._transaction() as conn:
                cursor = conn.execute(
                    """
                    UPDATE rooms SET winner=?, picked_at=?, status=?
                    WHERE id=? AND winner IS NULL
                    """,
                    (winner, isoformat(picked_at), RoomStatus.COMPLETED.value, room_id),
                )
                if cursor.rowcount == 0:
                    return None
                row = conn.execute("SELECT * FROM rooms WHERE id=?", (room_id,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to record winner for room {room_id}: {e}") from e
        return self._row_to_room(row)
