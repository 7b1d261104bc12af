# src/tenggat/alerts/console_sink.py

from __future__ import annotations

import logging
import sys
from datetime import datetime

from ..tasks.notifier import NotificationPermission

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleAlertSink:
    """
    Alerts printed to the terminal.

    Starts in the configured permission state; request_permission() grants
    unless the user pinned it to "denied".
    """

    def __init__(self, permission: str = NotificationPermission.DEFAULT, stream=None) -> None:
        self._permission = NotificationPermission.from_raw(permission)
        self._stream = stream

    @property
    def permission(self) -> NotificationPermission:
        return self._permission

    def request_permission(self) -> NotificationPermission:
        if self._permission == NotificationPermission.DEFAULT:
            self._permission = NotificationPermission.GRANTED
        return self._permission

    def send_alert(self, title: str, body: str) -> None:
        stream = self._stream or sys.stdout
        print(f"\n[{_ts_local()}] [ALERT] {title} {body}", file=stream, flush=True)
        logger.debug("Console alert title=%r body=%r", title, body)
