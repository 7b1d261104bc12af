# tasks/task_models.py

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import StrEnum


class TaskFilter(StrEnum):
    """Which tasks the list view shows."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    EXPIRED = "expired"

    @classmethod
    def from_raw(cls, raw: str | None) -> TaskFilter:
        if not raw:
            return cls.ALL
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.ALL


class TaskState(StrEnum):
    """
    Display classification of a task.

    Expired wins over completed: a finished task whose deadline has passed
    is still shown in the expired section.
    """

    ACTIVE = "active"
    COMPLETED = "completed"
    EXPIRED = "expired"


DeadlineValue = str | datetime | float | int

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MICROSECOND = timedelta(microseconds=1)


@dataclass(slots=True)
class Task:
    id: str
    text: str
    completed: bool
    # Stored as entered ("2025-05-01T14:30"); datetimes/epoch seconds also work.
    deadline: DeadlineValue

    created_at: float = 0.0
    updated_at: float = 0.0


def deadline_micros(value: DeadlineValue | None) -> int | None:
    """
    Convert a deadline into whole epoch microseconds.

    Accepted:
    - "2025-05-01T14:30" / "2025-05-01 14:30:00" (naive -> local time)
    - ISO strings with an offset or a trailing "Z"
    - datetime (naive -> local time)
    - int/float epoch seconds (finite only)

    Datetimes are converted exactly, so countdown math never rounds a
    sub-second gap up. Returns None for missing or malformed input; never raises.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            micros = float(value) * 1_000_000
        except OverflowError:
            return None
        if not math.isfinite(micros):
            return None
        return round(micros)

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(raw)
        except ValueError:
            return None

    if not isinstance(value, datetime):
        return None

    try:
        aware = value if value.tzinfo is not None else value.astimezone()
        return (aware - _EPOCH) // _ONE_MICROSECOND
    except (OverflowError, OSError, ValueError):
        return None


def parse_deadline(value: DeadlineValue | None) -> float | None:
    """Deadline as epoch seconds, or None when missing/malformed."""
    micros = deadline_micros(value)
    if micros is None:
        return None
    return micros / 1_000_000


def format_deadline(value: DeadlineValue | None) -> str:
    """Local, human-readable rendering of a deadline ("?" when malformed)."""
    ts = parse_deadline(value)
    if ts is None:
        return "?"
    try:
        return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M")
    except (OverflowError, OSError, ValueError):
        return "?"
