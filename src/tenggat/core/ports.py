# src/tenggat/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The deadline logic depends on Protocols instead of concrete implementations.
This keeps the task store, the notified-id store and the alert backend
swappable, and lets tests inject fakes instead of real timers/notifications.
"""

from typing import Any, Protocol


class TaskRepo(Protocol):
    def add_task(self, *, text: str, deadline: str) -> str: ...
    def list_tasks(self) -> list[Any]: ...
    def get_task(self, task_id: str) -> Any | None: ...
    def update_task(
            self,
            task_id: str,
            *,
            text: str | None = None,
            deadline: str | None = None,
            completed: bool | None = None,
    ) -> bool: ...
    def delete_task(self, task_id: str) -> bool: ...
    def count_tasks(self) -> int: ...
    def find_by_prefix(self, prefix: str) -> list[Any]: ...


class NotifiedRepo(Protocol):
    """Durable string-keyed boolean store ("notified-<task id>" -> fired)."""

    def has(self, key: str) -> bool: ...
    def set(self, key: str) -> None: ...
    def discard(self, key: str) -> None: ...


class AlertSink(Protocol):
    """
    Alert facility: fire-and-forget alert with a title and a body.

    permission is one of "granted" | "denied" | "default".
    request_permission() may move "default" to "granted"/"denied";
    a "denied" sink can not be forced back programmatically.
    """

    @property
    def permission(self) -> str: ...

    def request_permission(self) -> str: ...

    def send_alert(self, title: str, body: str) -> None: ...
