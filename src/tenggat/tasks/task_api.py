# src/tenggat/tasks/task_api.py

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from datetime import datetime

from ..core.state import AppState
from .deadline import is_expired
from .notified_store import notified_key
from .task_models import Task, TaskFilter, TaskState, parse_deadline

logger = logging.getLogger(__name__)


def _forget_notified(state: AppState, task_id: str) -> None:
    # Lets a rescheduled task alert again; a deleted one leaves nothing behind.
    try:
        state.notified.discard(notified_key(task_id))
    except Exception:
        logger.exception("notified.discard failed task_id=%s", task_id)


def resolve_task_id(state: AppState, raw: str) -> str | None:
    """Accept a full id or a unique id prefix."""
    raw = (raw or "").strip()
    if not raw:
        return None
    if state.task_store.get_task(raw) is not None:
        return raw
    matches = state.task_store.find_by_prefix(raw)
    if len(matches) == 1:
        return matches[0].id
    return None


def create_task(state: AppState, text: str, deadline: str) -> Task:
    """
    Add a task. Raises ValueError for empty text or an unparseable deadline.
    """
    if parse_deadline(deadline) is None:
        raise ValueError(f"invalid deadline: {deadline!r}")

    task_id = state.task_store.add_task(text=text, deadline=deadline)
    task = state.task_store.get_task(task_id)
    if task is None:
        raise RuntimeError(f"task {task_id} vanished right after insert")
    logger.info("Task created id=%s deadline=%s", task.id, task.deadline)
    return task


def edit_task(state: AppState, task_id: str, *, text: str, deadline: str) -> Task | None:
    """Change text and deadline. Returns None when the task does not exist."""
    if parse_deadline(deadline) is None:
        raise ValueError(f"invalid deadline: {deadline!r}")

    before = state.task_store.get_task(task_id)
    if before is None:
        return None

    state.task_store.update_task(task_id, text=text, deadline=deadline)
    if parse_deadline(before.deadline) != parse_deadline(deadline):
        _forget_notified(state, task_id)

    return state.task_store.get_task(task_id)


def toggle_task(state: AppState, task_id: str) -> Task | None:
    task = state.task_store.get_task(task_id)
    if task is None:
        return None
    state.task_store.update_task(task_id, completed=not task.completed)
    logger.info("Task %s -> completed=%s", task_id, not task.completed)
    return state.task_store.get_task(task_id)


def remove_task(state: AppState, task_id: str) -> bool:
    deleted = state.task_store.delete_task(task_id)
    if deleted:
        _forget_notified(state, task_id)
        logger.info("Task deleted id=%s", task_id)
    return deleted


def classify_task(task: Task, now: datetime | float) -> TaskState:
    if is_expired(task.deadline, now):
        return TaskState.EXPIRED
    if task.completed:
        return TaskState.COMPLETED
    return TaskState.ACTIVE


def search_tasks(tasks: Iterable[Task], query: str | None) -> list[Task]:
    """Case-insensitive substring match on the task text."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(tasks)
    return [t for t in tasks if needle in t.text.lower()]


def filter_tasks(
    tasks: Iterable[Task], task_filter: TaskFilter, now: datetime | float
) -> list[Task]:
    if task_filter == TaskFilter.ALL:
        return list(tasks)
    if task_filter == TaskFilter.ACTIVE:
        return [t for t in tasks if not t.completed]
    if task_filter == TaskFilter.COMPLETED:
        return [t for t in tasks if t.completed]
    return [t for t in tasks if is_expired(t.deadline, now)]


def group_tasks(tasks: Iterable[Task], now: datetime | float) -> dict[TaskState, list[Task]]:
    """Split tasks into display sections; every section key is present."""
    sections: dict[TaskState, list[Task]] = {
        TaskState.ACTIVE: [],
        TaskState.EXPIRED: [],
        TaskState.COMPLETED: [],
    }
    for task in tasks:
        sections[classify_task(task, now)].append(task)
    return sections


def visible_tasks(
    state: AppState,
    *,
    query: str | None = None,
    task_filter: TaskFilter = TaskFilter.ALL,
    now: datetime | float | None = None,
) -> list[Task]:
    if now is None:
        now = time.time()
    tasks = state.task_store.list_tasks()
    return search_tasks(filter_tasks(tasks, task_filter, now), query)
