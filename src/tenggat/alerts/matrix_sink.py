# src/tenggat/alerts/matrix_sink.py

from __future__ import annotations

import asyncio
import logging
from typing import Any

from nio import AsyncClient, RoomSendError

from ..tasks.notifier import NotificationPermission
from .matrix_client import create_matrix_client

logger = logging.getLogger(__name__)


class MatrixAlertSink:
    """
    Alerts posted as m.notice messages into one Matrix room.

    The client is created by connect() inside the scheduler's event loop.
    send_alert() is fire-and-forget: it schedules the send on that loop and
    returns immediately. Permission is "granted" only once a client is
    connected and a room is configured.
    """

    def __init__(self, settings: Any, client: AsyncClient | None = None) -> None:
        self._settings = settings
        self._room_id: str | None = getattr(settings, "matrix_room", None) or None
        self._client = client
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def permission(self) -> NotificationPermission:
        if not self._room_id:
            return NotificationPermission.DENIED
        if self._client is None:
            return NotificationPermission.DEFAULT
        return NotificationPermission.GRANTED

    def request_permission(self) -> NotificationPermission:
        # Matrix access is granted by configuration, nothing to ask.
        return self.permission

    async def connect(self) -> None:
        if self._client is not None or not self._room_id:
            return
        self._client = await create_matrix_client(self._settings)
        if self._client is None:
            return
        resp = await self._client.join(self._room_id)
        logger.info("Matrix alert room %s join: %s", self._room_id, type(resp).__name__)

    async def aclose(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def _send(self, title: str, body: str) -> None:
        client = self._client
        if client is None or not self._room_id:
            return
        resp = await client.room_send(
            room_id=self._room_id,
            message_type="m.room.message",
            content={"msgtype": "m.notice", "body": f"{title} {body}"},
        )
        if isinstance(resp, RoomSendError):
            logger.warning("Matrix alert send failed: %s", resp.message)

    def send_alert(self, title: str, body: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Matrix alert dropped: no running event loop")
            return

        task = loop.create_task(self._send(title, body))
        self._pending.add(task)
        task.add_done_callback(self._on_sent)

    def _on_sent(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Matrix alert send crashed: %r", exc)
