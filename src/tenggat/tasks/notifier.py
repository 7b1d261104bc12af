# src/tenggat/tasks/notifier.py

from __future__ import annotations

"""
Notification gate.

Once per alert tick:
- skip everything unless the alert sink has permission "granted",
- for every open task whose deadline is less than `window_seconds` away,
  fire one alert and remember the task id in the notified store,
- never fire twice for the same id while the store keeps the entry.

The gate never raises: sink/store failures are logged and the task is skipped.
"""

import logging
import math
from collections.abc import Iterable
from datetime import datetime
from enum import StrEnum

from ..core.ports import AlertSink, NotifiedRepo
from .deadline import MS_PER_SECOND, US_PER_MS, diff_micros
from .notified_store import notified_key
from .task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 300.0
DEFAULT_ALERT_TITLE = "Deadline approaching!"


class NotificationPermission(StrEnum):
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"

    @classmethod
    def from_raw(cls, raw: str | None) -> NotificationPermission:
        if not raw:
            return cls.DEFAULT
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.DEFAULT


def _sink_permission(sink: AlertSink) -> NotificationPermission:
    try:
        return NotificationPermission.from_raw(sink.permission)
    except Exception:
        logger.exception("Reading alert permission failed")
        return NotificationPermission.DENIED


def request_permission_once(sink: AlertSink) -> NotificationPermission:
    """
    Ask the sink for permission if it has not been decided yet.

    "granted" and "denied" are returned as-is (denied can not be forced).
    """
    current = _sink_permission(sink)
    if current != NotificationPermission.DEFAULT:
        return current

    try:
        result = NotificationPermission.from_raw(sink.request_permission())
    except Exception:
        logger.exception("Requesting alert permission failed")
        return NotificationPermission.DEFAULT

    logger.info("Alert permission: %s", result.value)
    return result


def check_and_notify(
    tasks: Iterable[Task],
    notified: NotifiedRepo,
    now: datetime | float,
    sink: AlertSink,
    *,
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
    title: str = DEFAULT_ALERT_TITLE,
) -> list[str]:
    """
    Fire one alert per task entering the (0, window) near-deadline interval.

    Returns the ids alerted during this call.
    """
    if _sink_permission(sink) != NotificationPermission.GRANTED:
        return []

    if window_seconds <= 0 or not math.isfinite(window_seconds * MS_PER_SECOND * US_PER_MS):
        logger.warning("Alert window %r is not a positive finite number", window_seconds)
        return []

    window_us = round(float(window_seconds) * MS_PER_SECOND * US_PER_MS)
    fired: list[str] = []

    for task in tasks:
        if task.completed:
            continue

        try:
            diff = diff_micros(task.deadline, now)
        except Exception:
            logger.exception("deadline math failed task_id=%s", task.id)
            continue
        if diff is None or not 0 < diff < window_us:
            continue

        key = notified_key(task.id)
        try:
            if notified.has(key):
                continue
        except Exception:
            logger.exception("notified.has failed task_id=%s", task.id)
            continue

        try:
            sink.send_alert(title, task.text)
        except Exception:
            logger.exception("send_alert failed task_id=%s", task.id)
            continue

        try:
            notified.set(key)
        except Exception:
            logger.exception("notified.set failed task_id=%s", task.id)

        logger.info("Deadline alert fired task_id=%s diff_ms=%s", task.id, diff // US_PER_MS)
        fired.append(task.id)

    return fired
