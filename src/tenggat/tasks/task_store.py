# tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
import uuid
from pathlib import Path
from typing import Any

from .task_models import Task

logger = logging.getLogger(__name__)


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Ids are opaque strings (uuid4 hex), stable for the task's lifetime.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except Exception:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    text TEXT NOT NULL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    deadline TEXT NOT NULL,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("deadline", "TEXT NOT NULL DEFAULT ''")
            add_col("created_at", "REAL NOT NULL DEFAULT 0")
            add_col("updated_at", "REAL NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_created ON tasks(created_at)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=str(row["id"]),
            text=str(row["text"] or ""),
            completed=bool(row["completed"]),
            deadline=str(row["deadline"] or ""),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
        )

    @staticmethod
    def _require(value: str | None, name: str) -> str:
        if value is None or not str(value).strip():
            raise ValueError(f"{name} is required")
        return str(value).strip()

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def add_task(self, *, text: str, deadline: str) -> str:
        text = self._require(text, "text")
        deadline = self._require(deadline, "deadline")

        task_id = uuid.uuid4().hex
        now = time.time()

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO tasks(id, text, completed, deadline, created_at, updated_at)
                VALUES (?, ?, 0, ?, ?, ?)
                """,
                (task_id, text, deadline, now, now),
            )
            conn.commit()
            logger.debug("Task added id=%s deadline=%s", task_id, deadline)
            return task_id
        finally:
            conn.close()

    def list_tasks(self) -> list[Task]:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks ORDER BY created_at ASC, rowid ASC")
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def get_task(self, task_id: str) -> Task | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks WHERE id = ?", (str(task_id),))
            row = cur.fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def update_task(
        self,
        task_id: str,
        *,
        text: str | None = None,
        deadline: str | None = None,
        completed: bool | None = None,
    ) -> bool:
        """Update the given fields; returns False if the task does not exist."""
        fields: list[str] = []
        params: list[Any] = []

        if text is not None:
            fields.append("text = ?")
            params.append(self._require(text, "text"))

        if deadline is not None:
            fields.append("deadline = ?")
            params.append(self._require(deadline, "deadline"))

        if completed is not None:
            fields.append("completed = ?")
            params.append(1 if completed else 0)

        if not fields:
            return self.get_task(task_id) is not None

        fields.append("updated_at = ?")
        params.append(time.time())
        params.append(str(task_id))

        sql = f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?"

        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            return cur.rowcount == 1
        finally:
            conn.close()

    def delete_task(self, task_id: str) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (str(task_id),))
            conn.commit()
            deleted = cur.rowcount == 1
            if deleted:
                logger.debug("Task deleted id=%s", task_id)
            return deleted
        finally:
            conn.close()

    def find_by_prefix(self, prefix: str) -> list[Task]:
        """Tasks whose id starts with prefix (console users type short ids)."""
        prefix = (prefix or "").strip()
        if not prefix:
            return []
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM tasks WHERE id LIKE ? ESCAPE '\\' ORDER BY created_at ASC",
                (escaped + "%",),
            )
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()
