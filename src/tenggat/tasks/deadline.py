# src/tenggat/tasks/deadline.py

from __future__ import annotations

"""
Deadline timer.

Turns (deadline, now) into the countdown string shown next to each task:
"{h}h {m}m {s}s" while time is left, a fixed expired marker afterwards.

Pure functions only: the display loop calls remaining() once per second for
every visible task.
"""

from dataclasses import dataclass
from datetime import datetime

from .task_models import deadline_micros

US_PER_MS = 1000
MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE


@dataclass(frozen=True, slots=True)
class TimeUnits:
    hours: str
    minutes: str
    seconds: str
    expired: str
    calculating: str


EN_UNITS = TimeUnits(
    hours="h",
    minutes="m",
    seconds="s",
    expired="Time's up!",
    calculating="Calculating...",
)

# jam / menit / detik
ID_UNITS = TimeUnits(
    hours="j",
    minutes="m",
    seconds="d",
    expired="Waktu habis!",
    calculating="Menghitung...",
)

DEFAULT_UNITS = EN_UNITS

_UNITS_BY_LOCALE = {"en": EN_UNITS, "id": ID_UNITS}


def units_for_locale(code: str | None) -> TimeUnits:
    return _UNITS_BY_LOCALE.get((code or "").strip().lower(), DEFAULT_UNITS)


def diff_micros(
    deadline: str | datetime | float | int | None,
    now: datetime | float | int,
) -> int | None:
    """
    Exact microseconds from now until deadline (negative once past).

    None when either side can not be parsed.
    """
    deadline_us = deadline_micros(deadline)
    now_us = deadline_micros(now)
    if deadline_us is None or now_us is None:
        return None
    return deadline_us - now_us


def diff_ms(
    deadline: str | datetime | float | int | None,
    now: datetime | float | int,
) -> int | None:
    """Whole milliseconds until deadline, floored (999.6 ms -> 999)."""
    diff = diff_micros(deadline, now)
    if diff is None:
        return None
    return diff // US_PER_MS


def split_remaining(
    deadline: str | datetime | float | int | None,
    now: datetime | float | int,
) -> tuple[int, int, int] | None:
    """(hours, minutes, seconds) left, or None when expired or malformed."""
    exact = diff_micros(deadline, now)
    if exact is None or exact <= 0:
        return None

    diff = exact // US_PER_MS
    hours = diff // MS_PER_HOUR
    minutes = diff // MS_PER_MINUTE % 60
    seconds = diff // MS_PER_SECOND % 60
    return hours, minutes, seconds


def is_expired(
    deadline: str | datetime | float | int | None,
    now: datetime | float | int,
) -> bool:
    return split_remaining(deadline, now) is None


def remaining(
    deadline: str | datetime | float | int | None,
    now: datetime | float | int,
    *,
    units: TimeUnits = DEFAULT_UNITS,
) -> str:
    """
    Countdown text for a task.

    A malformed or missing deadline is reported as expired.
    """
    parts = split_remaining(deadline, now)
    if parts is None:
        return units.expired

    hours, minutes, seconds = parts
    return f"{hours}{units.hours} {minutes}{units.minutes} {seconds}{units.seconds}"
