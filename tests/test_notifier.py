# tests/test_notifier.py

from __future__ import annotations

from datetime import timedelta

import pytest

from tenggat.tasks.notified_store import MemoryNotifiedStore, notified_key
from tenggat.tasks.notifier import (
    NotificationPermission,
    check_and_notify,
    request_permission_once,
)
from tenggat.tasks.task_models import Task

from .conftest import BASE, NOW
from .fakes import FakeAlertSink


def _task(task_id: str = "t1", *, diff_ms: int = 299_999, completed: bool = False, text: str = "Submit report"):
    return Task(id=task_id, text=text, completed=completed, deadline=NOW + diff_ms / 1000)


def test_task_inside_window_alerts_once_and_is_remembered() -> None:
    sink = FakeAlertSink()
    notified = MemoryNotifiedStore()
    tasks = [_task()]

    assert check_and_notify(tasks, notified, NOW, sink) == ["t1"]
    assert [a.body for a in sink.sent] == ["Submit report"]
    assert notified.has(notified_key("t1"))

    assert check_and_notify(tasks, notified, NOW, sink) == []
    assert len(sink.sent) == 1


def test_three_consecutive_ticks_fire_exactly_one_alert() -> None:
    sink = FakeAlertSink()
    notified = MemoryNotifiedStore()
    tasks = [_task(diff_ms=200_000)]

    for tick in range(3):
        check_and_notify(tasks, notified, NOW + tick * 10, sink)

    assert len(sink.sent) == 1


def test_completed_task_never_alerts() -> None:
    sink = FakeAlertSink()
    notified = MemoryNotifiedStore()

    assert check_and_notify([_task(completed=True)], notified, NOW, sink) == []
    assert sink.sent == []
    assert not notified.has(notified_key("t1"))


def test_window_bounds_are_open() -> None:
    sink = FakeAlertSink()
    notified = MemoryNotifiedStore()
    tasks = [
        _task("at-deadline", diff_ms=0),
        _task("past", diff_ms=-1),
        _task("at-window", diff_ms=300_000),
        _task("far", diff_ms=3_600_000),
        _task("just-inside", diff_ms=1),
    ]

    assert check_and_notify(tasks, notified, NOW, sink) == ["just-inside"]


def test_custom_window() -> None:
    sink = FakeAlertSink()
    fired = check_and_notify([_task(diff_ms=500_000)], MemoryNotifiedStore(), NOW, sink, window_seconds=600)
    assert fired == ["t1"]


def test_already_notified_id_is_skipped() -> None:
    sink = FakeAlertSink()
    notified = MemoryNotifiedStore({notified_key("t1")})

    assert check_and_notify([_task()], notified, NOW, sink) == []
    assert sink.sent == []


def test_no_alerts_without_granted_permission() -> None:
    for permission in (NotificationPermission.DEFAULT, NotificationPermission.DENIED):
        sink = FakeAlertSink(permission=permission)
        notified = MemoryNotifiedStore()

        assert check_and_notify([_task()], notified, NOW, sink) == []
        assert sink.sent == []
        assert notified.count() == 0
        assert sink.permission_requests == 0


def test_failing_alert_facility_is_swallowed_and_not_remembered() -> None:
    sink = FakeAlertSink(fail=True)
    notified = MemoryNotifiedStore()

    assert check_and_notify([_task()], notified, NOW, sink) == []
    assert not notified.has(notified_key("t1"))

    sink.fail = False
    assert check_and_notify([_task()], notified, NOW, sink) == ["t1"]


@pytest.mark.parametrize("deadline", ["soon-ish", "", float("nan"), float("inf"), float("-inf"), 10**400])
def test_malformed_deadline_never_alerts(deadline) -> None:
    sink = FakeAlertSink()
    notified = MemoryNotifiedStore()
    tasks = [Task(id="bad", text="?", completed=False, deadline=deadline), _task("ok")]

    assert check_and_notify(tasks, notified, NOW, sink) == ["ok"]
    assert not notified.has(notified_key("bad"))


def test_non_finite_now_or_window_is_a_no_op() -> None:
    sink = FakeAlertSink()
    assert check_and_notify([_task()], MemoryNotifiedStore(), float("inf"), sink) == []
    assert check_and_notify([_task()], MemoryNotifiedStore(), NOW, sink, window_seconds=float("inf")) == []
    assert sink.sent == []


def test_window_uses_exact_datetime_gap() -> None:
    sink = FakeAlertSink()
    inside = Task(id="in", text="in", completed=False, deadline=BASE + timedelta(minutes=5, microseconds=-400))
    edge = Task(id="edge", text="edge", completed=False, deadline=BASE + timedelta(minutes=5))
    barely = Task(id="barely", text="barely", completed=False, deadline=BASE + timedelta(microseconds=400))

    assert check_and_notify([inside, edge, barely], MemoryNotifiedStore(), BASE, sink) == ["in", "barely"]


def test_alert_title_is_configurable() -> None:
    sink = FakeAlertSink()
    check_and_notify([_task()], MemoryNotifiedStore(), NOW, sink, title="Tenggat!")
    assert sink.sent[0].title == "Tenggat!"


def test_request_permission_once_only_asks_while_undecided() -> None:
    undecided = FakeAlertSink(permission=NotificationPermission.DEFAULT)
    assert request_permission_once(undecided) == NotificationPermission.GRANTED
    assert request_permission_once(undecided) == NotificationPermission.GRANTED
    assert undecided.permission_requests == 1

    denied = FakeAlertSink(permission=NotificationPermission.DENIED)
    assert request_permission_once(denied) == NotificationPermission.DENIED
    assert denied.permission_requests == 0


def test_request_permission_once_can_end_denied() -> None:
    sink = FakeAlertSink(
        permission=NotificationPermission.DEFAULT,
        grant_on_request=NotificationPermission.DENIED,
    )
    assert request_permission_once(sink) == NotificationPermission.DENIED
    assert check_and_notify([_task()], MemoryNotifiedStore(), NOW, sink) == []
