# src/tenggat/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import time
from collections.abc import Callable
from typing import cast

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.deadline import TimeUnits, units_for_locale
from ..tasks.notifier import request_permission_once
from ..tasks.task_models import Task, TaskFilter, TaskState, format_deadline

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _units(state: AppState) -> TimeUnits:
    return units_for_locale(getattr(state.settings, "locale", "en"))


def _split_text_deadline(args: list[str]) -> tuple[str, str] | None:
    """'buy milk | 2025-05-01 14:30' -> ('buy milk', '2025-05-01 14:30')."""
    joined = " ".join(args)
    if "|" not in joined:
        return None
    text, _, deadline = joined.rpartition("|")
    text, deadline = text.strip(), deadline.strip()
    if not text or not deadline:
        return None
    return text, deadline


def _format_task(state: AppState, task: Task, now: float) -> str:
    with state.lock:
        left = state.time_remaining.get(task.id)
    if left is None:
        left = _units(state).calculating

    status = task_api.classify_task(task, now)
    mark = {TaskState.COMPLETED: "[x]", TaskState.EXPIRED: "[!]"}.get(status, "[ ]")
    return (
        f"{task.id[:SHORT_ID_LEN]} {mark} {task.text}\n"
        f"         deadline: {format_deadline(task.deadline)} | left: {left}"
    )


def _resolve(state: AppState, args: list[str]) -> str | None:
    if not args:
        return None
    return task_api.resolve_task_id(state, args[0])


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    return (
        "Status:\n"
        f"  Tasks: {state.task_store.count_tasks()}\n"
        f"  Alert backend: {getattr(settings, 'alert_backend', 'console')}\n"
        f"  Alert permission: {state.alert_sink.permission}\n"
        f"  Alert window: {getattr(settings, 'alert_window_seconds', 300.0):.0f}s"
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <text> | <deadline>
    deadline: YYYY-MM-DD HH:MM (local time) or YYYY-MM-DDTHH:MM
    """
    parsed = _split_text_deadline(args)
    if parsed is None:
        return "Usage: /add <text> | <YYYY-MM-DD HH:MM>"

    text, deadline = parsed
    try:
        task = task_api.create_task(state, text, deadline)
    except ValueError as e:
        return f"Task not added: {e}"
    return f"Added {task.id[:SHORT_ID_LEN]}: {task.text} (deadline {format_deadline(task.deadline)})"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <id> <text> | <deadline>"""
    task_id = _resolve(state, args)
    if task_id is None:
        return "Usage: /edit <id> <text> | <YYYY-MM-DD HH:MM> (id not found or ambiguous)"

    parsed = _split_text_deadline(args[1:])
    if parsed is None:
        return "Usage: /edit <id> <text> | <YYYY-MM-DD HH:MM>"

    text, deadline = parsed
    try:
        task = task_api.edit_task(state, task_id, text=text, deadline=deadline)
    except ValueError as e:
        return f"Task not changed: {e}"
    if task is None:
        return f"No task {args[0]}."
    return f"Saved {task.id[:SHORT_ID_LEN]}: {task.text} (deadline {format_deadline(task.deadline)})"


def cmd_done(state: AppState, args: list[str]) -> str:
    task_id = _resolve(state, args)
    if task_id is None:
        return "Usage: /done <id> (id not found or ambiguous)"
    task = task_api.toggle_task(state, task_id)
    if task is None:
        return f"No task {args[0]}."
    return f"{task.text}: {'done' if task.completed else 'not done'}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    task_id = _resolve(state, args)
    if task_id is None:
        return "Usage: /del <id> (id not found or ambiguous)"
    if not task_api.remove_task(state, task_id):
        return f"No task {args[0]}."
    return f"Deleted {task_id[:SHORT_ID_LEN]}."


def cmd_list(state: AppState, args: list[str]) -> str:
    """/list [all|active|completed|expired]"""
    task_filter = TaskFilter.from_raw(args[0] if args else None)
    now = time.time()
    tasks = task_api.visible_tasks(state, task_filter=task_filter, now=now)
    if not tasks:
        return f"No tasks ({task_filter.value})."
    lines = [f"Tasks ({task_filter.value}):"]
    lines.extend(_format_task(state, t, now) for t in tasks)
    return "\n".join(lines)


def cmd_find(state: AppState, args: list[str]) -> str:
    query = " ".join(args).strip()
    if not query:
        return "Usage: /find <text>"
    now = time.time()
    tasks = task_api.visible_tasks(state, query=query, now=now)
    if not tasks:
        return f"No tasks matching {query!r}."
    lines = [f"Tasks matching {query!r}:"]
    lines.extend(_format_task(state, t, now) for t in tasks)
    return "\n".join(lines)


def cmd_sections(state: AppState, args: list[str]) -> str:
    now = time.time()
    sections = task_api.group_tasks(state.task_store.list_tasks(), now)
    lines: list[str] = []
    for section, tasks in sections.items():
        lines.append(f"== {section.value} ({len(tasks)})")
        lines.extend(_format_task(state, t, now) for t in tasks)
    return "\n".join(lines)


def cmd_notify(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        with contextlib.suppress(Exception):
            emit("[ALERT] Requesting notification permission...")
    permission = request_permission_once(state.alert_sink)
    logger.debug("Permission after /notify: %s", permission)
    return f"Notification permission: {permission.value}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show task count and alert settings.")
registry.register("add", cmd_add, help_text="Add a task: /add <text> | <YYYY-MM-DD HH:MM>.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> <text> | <YYYY-MM-DD HH:MM>.")
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("del", cmd_delete, help_text="Delete a task: /del <id>.", aliases=["delete", "rm"])
registry.register(
    "list", cmd_list, help_text="List tasks: /list [all|active|completed|expired].", aliases=["ls"]
)
registry.register("find", cmd_find, help_text="Search tasks by text: /find <text>.", aliases=["search"])
registry.register("sections", cmd_sections, help_text="Show tasks grouped into active/expired/completed.")
registry.register("notify", cmd_notify, help_text="Ask for permission to show deadline alerts.")
