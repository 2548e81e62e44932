# src/store/sqlite_store.py — v2
"""SQLite-based task store (STORE_BACKEND=sqlite).

Uses stdlib sqlite3, one row per collection key.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from doctasks.core.models import TaskCollection
from doctasks.store.base_task_store import (
    BaseTaskStore,
    TaskStoreError,
    decode_collection,
    encode_collection,
)

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS task_collections (
    key TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteTaskStore(BaseTaskStore):
    """SQLite-backed key/value task store."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def load(self, key: str) -> TaskCollection:
        """Retrieve the collection stored under key."""
        try:
            cursor = self._conn.execute(
                "SELECT data FROM task_collections WHERE key = ?", (key,)
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise TaskStoreError(key, str(e)) from e
        if row is None:
            return {}
        return decode_collection(key, row[0])

    async def save(self, key: str, tasks: TaskCollection) -> None:
        """Store the collection (upsert)."""
        try:
            self._conn.execute(
                """INSERT OR REPLACE INTO task_collections (key, data, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)""",
                (key, encode_collection(tasks)),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise TaskStoreError(key, str(e)) from e

    async def keys(self) -> list[str]:
        """List stored collection keys."""
        try:
            cursor = self._conn.execute("SELECT key FROM task_collections ORDER BY key")
            return [row[0] for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise TaskStoreError("task_collections", str(e)) from e

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
