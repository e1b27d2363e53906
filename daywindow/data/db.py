"""
DayWindow: SQLite completion store.

Persists per-user, per-day tracking records across restarts. Values are
stored JSON-encoded in a single key-value table; key scoping is up to the
caller (see daywindow.core.tracking_service).
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from daywindow.ports.completion_store import StoreError

logger = logging.getLogger(__name__)


class SQLiteStore:
    """SQLite-backed KeyValueStore."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from daywindow.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        # An in-memory DB only lives as long as its connection, so keep one.
        self._shared_conn: sqlite3.Connection | None = None
        if db_path == ":memory:":
            self._shared_conn = sqlite3.connect(db_path)
            self._shared_conn.row_factory = sqlite3.Row
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        if self._shared_conn is not None:
            return self._shared_conn
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the kv_store table if it doesn't exist."""
        try:
            with self._connect() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key         TEXT PRIMARY KEY,
                        value       TEXT NOT NULL,
                        updated_at  TEXT NOT NULL
                    )
                """)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot initialize store at {self._db_path}: {exc}") from exc
        logger.debug("kv_store table initialized at %s", self._db_path)

    def get(self, key: str) -> Any | None:
        """Fetch and decode a value, or None if the key is absent."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"get({key!r}) failed: {exc}") from exc
        if row is None:
            return None
        return json.loads(row["value"])

    def set(self, key: str, value: Any) -> None:
        """Insert or replace a value. Writing the same value twice is harmless."""
        now = datetime.now().isoformat()
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, json.dumps(value), now),
                )
        except sqlite3.Error as exc:
            raise StoreError(f"set({key!r}) failed: {exc}") from exc
        logger.debug("Stored %s", key)

    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        try:
            with self._connect() as conn:
                cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise StoreError(f"delete({key!r}) failed: {exc}") from exc
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Deleted %s", key)
        return deleted

    def keys(self, prefix: str = "") -> list[str]:
        """List keys starting with ``prefix``, sorted."""
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT key FROM kv_store WHERE substr(key, 1, ?) = ? ORDER BY key",
                    (len(prefix), prefix),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"keys({prefix!r}) failed: {exc}") from exc
        return [r["key"] for r in rows]
