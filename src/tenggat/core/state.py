# src/tenggat/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from .ports import AlertSink, NotifiedRepo, TaskRepo


@dataclass
class AppState:
    """
    Everything the commands and the scheduler share.

    time_remaining is the latest countdown snapshot published by the display
    refresh tick ({task id: text}); readers fall back to a "calculating"
    placeholder for ids that are not in it yet.
    """

    settings: Any
    task_store: TaskRepo
    notified: NotifiedRepo
    alert_sink: AlertSink

    time_remaining: dict[str, str] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock)
