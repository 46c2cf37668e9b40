"""SQLite record store for the profile and history snapshots.

Each record is a whole JSON document under a fixed key, overwritten on
every save. No partial-field updates, no schema versioning.
"""

import sqlite3
from datetime import datetime
from pathlib import Path

PROFILE_RECORD = "profile"
HISTORY_RECORD = "history"

_RECORDS_TABLE = """
CREATE TABLE IF NOT EXISTS records (
    name        TEXT PRIMARY KEY,
    body        TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    if str(path) != ":memory:":
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute(_RECORDS_TABLE)
    conn.commit()
    return conn


def read_record(conn: sqlite3.Connection, name: str) -> str | None:
    """Return the raw body of a record, or None if it was never written."""
    row = conn.execute(
        "SELECT body FROM records WHERE name = ?",
        (name,),
    ).fetchone()
    if row is None:
        return None
    return row["body"]  # type: ignore[no-any-return]


def write_record(conn: sqlite3.Connection, name: str, body: str) -> None:
    """Replace a record in a single transaction."""
    with conn:
        conn.execute(
            """
            INSERT INTO records (name, body, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(name)
            DO UPDATE SET body = excluded.body, updated_at = excluded.updated_at
            """,
            (name, body, datetime.now().isoformat()),
        )


def delete_record(conn: sqlite3.Connection, name: str) -> None:
    """Remove a record. No-op if absent."""
    with conn:
        conn.execute("DELETE FROM records WHERE name = ?", (name,))
