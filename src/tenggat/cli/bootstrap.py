# src/tenggat/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (task store, notified store, alert sink).
"""

from __future__ import annotations

import logging

from ..alerts.factory import build_alert_sink
from ..config import get_settings
from ..core.state import AppState
from ..tasks.notified_store import NotifiedStore
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.notified_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    state = AppState(
        settings=settings,
        task_store=TaskStore(settings.tasks_db_path),
        notified=NotifiedStore(settings.notified_db_path),
        alert_sink=build_alert_sink(settings),
    )
    logger.debug("AppState created (alert_backend=%s)", getattr(settings, "alert_backend", "console"))
    return state
