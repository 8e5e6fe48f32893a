"""Database schema migrations."""

from __future__ import annotations

import sqlite3


SCHEMA_SQL: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS used_identities (
        identity TEXT PRIMARY KEY,
        timestamp TEXT NOT NULL,
        user_agent TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS picks_log (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        identity TEXT NOT NULL,
        selected_participant TEXT NOT NULL,
        timestamp TEXT NOT NULL,
        user_agent TEXT NOT NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_picks_log_identity ON picks_log(identity);",
    """
    CREATE TABLE IF NOT EXISTS rooms (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        emails TEXT NOT NULL,
        created_at TEXT NOT NULL,
        created_by TEXT,
        status TEXT NOT NULL DEFAULT 'active',
        winner TEXT,
        picked_at TEXT
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_rooms_created_at ON rooms(created_at);",
)


def run_migrations(conn: sqlite3.Connection) -> None:
    """Create tables and indexes if they do not exist."""
    for statement in SCHEMA_SQL:
        conn.execute(statement)
