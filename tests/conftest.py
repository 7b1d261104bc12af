# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from tenggat.core.state import AppState
from tenggat.tasks.notified_store import NotifiedStore
from tenggat.tasks.task_store import TaskStore

from .fakes import FakeAlertSink

# Naive local time, midday: no DST transition nearby in any zone.
BASE = datetime(2025, 5, 1, 12, 0, 0)
NOW = BASE.timestamp()


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the scheduler.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        notified_db_path=tmp_path / "notified.sqlite3",
        locale="en",
        refresh_interval_seconds=1.0,
        alert_interval_seconds=10.0,
        alert_window_seconds=300.0,
        alert_backend="console",
        notification_permission="default",
    )


@pytest.fixture()
def sink() -> FakeAlertSink:
    return FakeAlertSink()


@pytest.fixture()
def state(settings: SimpleNamespace, sink: FakeAlertSink) -> AppState:
    """
    AppState wired with a fake alert sink.

    NOTE: We keep real SQLite stores here (TaskStore/NotifiedStore) because
    their correctness is part of what we want to test.
    """
    return AppState(
        settings=settings,
        task_store=TaskStore(settings.tasks_db_path),
        notified=NotifiedStore(settings.notified_db_path),
        alert_sink=sink,
    )
