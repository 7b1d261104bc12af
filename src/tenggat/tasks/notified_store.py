# tasks/notified_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)

NOTIFIED_PREFIX = "notified-"


def notified_key(task_id: str) -> str:
    return f"{NOTIFIED_PREFIX}{task_id}"


class NotifiedStore:
    """
    SQLite record of task ids that already fired a near-deadline alert.

    Keys are "notified-<task id>". An entry only goes away through discard(),
    which task_api calls when a task is deleted or rescheduled.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "notified.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("NotifiedStore ready db=%s total=%s", self._db_path, self.count())

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS notified (
                    key TEXT PRIMARY KEY,
                    created_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def has(self, key: str) -> bool:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT 1 FROM notified WHERE key = ?", (key,)).fetchone()
            return row is not None
        finally:
            conn.close()

    def set(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT OR IGNORE INTO notified(key, created_at) VALUES (?, ?)",
                (key, time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    def discard(self, key: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM notified WHERE key = ?", (key,))
            conn.commit()
        finally:
            conn.close()

    def count(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM notified").fetchone()
            return int(n)
        finally:
            conn.close()


class MemoryNotifiedStore:
    """Process-local notified set (tests, ephemeral runs)."""

    def __init__(self, keys: set[str] | None = None) -> None:
        self.keys: set[str] = set(keys or ())

    def has(self, key: str) -> bool:
        return key in self.keys

    def set(self, key: str) -> None:
        self.keys.add(key)

    def discard(self, key: str) -> None:
        self.keys.discard(key)

    def count(self) -> int:
        return len(self.keys)

    def close(self) -> None:
        return
