# tests/test_commands.py

from __future__ import annotations

from tenggat.cli.commands import CommandRegistry, registry
from tenggat.tasks.notifier import NotificationPermission

from .fakes import FakeAlertSink


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bee"])

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/BEE y", emit=notes.append) == "h3"
    assert called == {"h2": 1, "h3": 1}
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_add_list_done_delete_flow(state) -> None:
    reply = registry.handle(state, "/add Write essay | 2099-01-01 09:30")
    assert reply is not None and reply.startswith("Added")
    task = state.task_store.list_tasks()[0]
    short = task.id[:8]

    listing = registry.handle(state, "/list") or ""
    assert "Write essay" in listing
    assert "2099-01-01 09:30" in listing
    assert "Calculating..." in listing

    state.time_remaining = {task.id: "1h 2m 3s"}
    assert "1h 2m 3s" in (registry.handle(state, "/list active") or "")

    assert "done" in (registry.handle(state, f"/done {short}") or "")
    assert "Write essay" in (registry.handle(state, "/list completed") or "")
    assert "No tasks (active)" in (registry.handle(state, "/list active") or "")

    assert "Deleted" in (registry.handle(state, f"/del {short}") or "")
    assert state.task_store.count_tasks() == 0


def test_add_usage_and_validation(state) -> None:
    assert "Usage" in (registry.handle(state, "/add no deadline here") or "")
    assert "not added" in (registry.handle(state, "/add Essay | someday") or "")
    assert state.task_store.count_tasks() == 0


def test_edit_and_find(state) -> None:
    registry.handle(state, "/add Buy milk | 2099-01-01 09:30")
    task = state.task_store.list_tasks()[0]

    reply = registry.handle(state, f"/edit {task.id[:8]} Buy oat milk | 2099-01-02 10:00") or ""
    assert reply.startswith("Saved")
    assert "Buy oat milk" in (registry.handle(state, "/find OAT") or "")
    assert "No tasks matching" in (registry.handle(state, "/find bread") or "")
    assert "Usage" in (registry.handle(state, "/edit nope x | 2099-01-01 10:00") or "")


def test_sections_and_status(state) -> None:
    registry.handle(state, "/add Future | 2099-01-01 09:30")
    registry.handle(state, "/add Past | 2000-01-01 09:30")

    sections = registry.handle(state, "/sections") or ""
    assert "== active (1)" in sections
    assert "== expired (1)" in sections
    assert "== completed (0)" in sections

    assert "Tasks: 2" in (registry.handle(state, "/status") or "")


def test_notify_requests_permission(state) -> None:
    state.alert_sink = FakeAlertSink(permission=NotificationPermission.DEFAULT)
    assert registry.handle(state, "/notify") == "Notification permission: granted"
