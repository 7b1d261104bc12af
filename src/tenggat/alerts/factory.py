# src/tenggat/alerts/factory.py

from __future__ import annotations

import logging

from ..core.ports import AlertSink
from .console_sink import ConsoleAlertSink
from .desktop_sink import DesktopAlertSink

logger = logging.getLogger(__name__)


def build_alert_sink(settings) -> AlertSink:
    backend = str(getattr(settings, "alert_backend", "console") or "console").lower()
    permission = str(getattr(settings, "notification_permission", "default") or "default")

    if backend == "desktop":
        return DesktopAlertSink(permission=permission)

    if backend == "matrix":
        # Lazy: matrix-nio is only imported when the Matrix backend is chosen.
        from .matrix_sink import MatrixAlertSink

        return MatrixAlertSink(settings)

    if backend != "console":
        logger.warning("Unknown alert backend %r, using console", backend)
    return ConsoleAlertSink(permission=permission)
