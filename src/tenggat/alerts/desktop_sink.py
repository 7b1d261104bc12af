"""Desktop toast notifications (notify-send / osascript), best-effort."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys

from ..tasks.notifier import NotificationPermission

logger = logging.getLogger(__name__)


def _notify_command(title: str, body: str) -> list[str] | None:
    if sys.platform == "darwin":
        safe_title = title.replace('"', "'")
        safe_body = body.replace('"', "'")
        return [
            "osascript", "-e",
            f'display notification "{safe_body}" with title "{safe_title}"',
        ]
    if sys.platform.startswith("linux"):
        return ["notify-send", title, body]
    return None


def _tool_available() -> bool:
    cmd = _notify_command("", "")
    return cmd is not None and shutil.which(cmd[0]) is not None


class DesktopAlertSink:
    """Alerts shown as desktop notifications."""

    def __init__(self, permission: str = NotificationPermission.DEFAULT) -> None:
        self._permission = NotificationPermission.from_raw(permission)

    @property
    def permission(self) -> NotificationPermission:
        return self._permission

    def request_permission(self) -> NotificationPermission:
        if self._permission == NotificationPermission.DEFAULT:
            if _tool_available():
                self._permission = NotificationPermission.GRANTED
            else:
                logger.warning("No desktop notification tool found; alerts disabled")
                self._permission = NotificationPermission.DENIED
        return self._permission

    def send_alert(self, title: str, body: str) -> None:
        """Show a toast; raises RuntimeError when it can not be shown so the alert is retried."""
        cmd = _notify_command(title, body)
        if cmd is None:
            raise RuntimeError(f"desktop notifications are not supported on {sys.platform}")
        try:
            subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except (FileNotFoundError, OSError) as e:
            raise RuntimeError(f"desktop notification failed: {cmd[0]}") from e
