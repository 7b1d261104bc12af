# tests/test_task_scheduler.py

from __future__ import annotations

import asyncio
import time
from datetime import datetime

import pytest

from tenggat.tasks.deadline import EN_UNITS, ID_UNITS
from tenggat.tasks.notified_store import MemoryNotifiedStore
from tenggat.tasks.notifier import NotificationPermission
from tenggat.tasks.task_models import Task
from tenggat.tasks.task_scheduler import DeadlineScheduler, build_scheduler

from .conftest import NOW
from .fakes import FakeAlertSink, FakeClock


def _task(task_id: str, seconds_left: float, *, completed: bool = False) -> Task:
    return Task(id=task_id, text=f"task {task_id}", completed=completed, deadline=NOW + seconds_left)


def test_refresh_once_renders_every_task() -> None:
    tasks = [_task("a", 125), _task("b", -1)]
    published: list[dict[str, str]] = []
    scheduler = DeadlineScheduler(
        lambda: tasks,
        MemoryNotifiedStore(),
        FakeAlertSink(),
        clock=FakeClock(NOW),
        on_refresh=published.append,
    )

    snapshot = scheduler.refresh_once()
    assert snapshot == {"a": "0h 2m 5s", "b": EN_UNITS.expired}
    assert scheduler.time_remaining == snapshot
    assert published == [snapshot]


def test_refresh_picks_up_tasks_added_between_ticks() -> None:
    tasks = [_task("a", 60)]
    clock = FakeClock(NOW)
    scheduler = DeadlineScheduler(lambda: tasks, MemoryNotifiedStore(), FakeAlertSink(), clock=clock)

    assert set(scheduler.refresh_once()) == {"a"}
    tasks.append(_task("b", 30))
    clock.advance(1)
    assert scheduler.refresh_once() == {"a": "0h 0m 59s", "b": "0h 0m 29s"}


def test_refresh_callback_failure_does_not_break_tick() -> None:
    def boom(_snapshot: dict[str, str]) -> None:
        raise RuntimeError("ui gone")

    scheduler = DeadlineScheduler(
        lambda: [_task("a", 10)], MemoryNotifiedStore(), FakeAlertSink(), clock=FakeClock(NOW), on_refresh=boom
    )
    assert scheduler.refresh_once() == {"a": "0h 0m 10s"}


def test_check_once_across_ticks_alerts_once() -> None:
    sink = FakeAlertSink()
    clock = FakeClock(NOW)
    tasks = [_task("soon", 240), _task("later", 3600), _task("done", 60, completed=True)]
    scheduler = DeadlineScheduler(lambda: tasks, MemoryNotifiedStore(), sink, clock=clock)

    fired: list[str] = []
    for _ in range(3):
        fired += scheduler.check_once()
        clock.advance(10)

    assert fired == ["soon"]
    assert [a.body for a in sink.sent] == ["task soon"]


def test_units_are_injectable() -> None:
    scheduler = DeadlineScheduler(
        lambda: [_task("a", 125)], MemoryNotifiedStore(), FakeAlertSink(), clock=FakeClock(NOW), units=ID_UNITS
    )
    assert scheduler.refresh_once() == {"a": "0j 2m 5d"}


@pytest.mark.asyncio
async def test_scheduler_runs_both_loops_and_stops() -> None:
    deadline = datetime.fromtimestamp(time.time() + 120).isoformat()
    tasks = [Task(id="t1", text="ping", completed=False, deadline=deadline)]
    sink = FakeAlertSink(permission=NotificationPermission.DEFAULT)

    scheduler = DeadlineScheduler(
        lambda: tasks,
        MemoryNotifiedStore(),
        sink,
        refresh_interval_seconds=0.01,
        alert_interval_seconds=0.01,
    )

    async with scheduler:
        assert scheduler.running
        await asyncio.sleep(0.05)

    assert not scheduler.running
    assert sink.permission_requests == 1
    assert len(sink.sent) == 1, "Scheduler should alert exactly once"
    assert "t1" in scheduler.time_remaining


@pytest.mark.asyncio
async def test_failing_task_source_keeps_loop_alive() -> None:
    calls = {"n": 0}

    def flaky() -> list[Task]:
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("store offline")
        return [_task("a", 10)]

    scheduler = DeadlineScheduler(
        flaky,
        MemoryNotifiedStore(),
        FakeAlertSink(),
        clock=FakeClock(NOW),
        refresh_interval_seconds=0.01,
        alert_interval_seconds=10.0,
    )

    await scheduler.start()
    await asyncio.sleep(0.05)
    await scheduler.stop()

    assert scheduler.time_remaining == {"a": "0h 0m 10s"}


def test_build_scheduler_publishes_into_state(state) -> None:
    task_id = state.task_store.add_task(text="Essay", deadline="2099-01-01T00:00")
    scheduler = build_scheduler(state)

    scheduler.refresh_once()
    assert set(state.time_remaining) == {task_id}
    assert state.time_remaining[task_id].endswith("s")
