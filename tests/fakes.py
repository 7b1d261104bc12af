# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field

from tenggat.tasks.notifier import NotificationPermission


@dataclass(slots=True)
class SentAlert:
    title: str
    body: str


@dataclass(slots=True)
class FakeAlertSink:
    """
    Fake AlertSink used by gate/scheduler tests.

    - records alerts instead of showing them
    - request_permission() moves "default" to `grant_on_request`
    - fail=True makes send_alert raise
    """

    permission: str = NotificationPermission.GRANTED
    grant_on_request: str = NotificationPermission.GRANTED
    fail: bool = False
    sent: list[SentAlert] = field(default_factory=list)
    permission_requests: int = 0

    def request_permission(self) -> str:
        self.permission_requests += 1
        if self.permission == NotificationPermission.DEFAULT:
            self.permission = self.grant_on_request
        return self.permission

    def send_alert(self, title: str, body: str) -> None:
        if self.fail:
            raise RuntimeError("alert facility unavailable")
        self.sent.append(SentAlert(title=title, body=body))


class FakeClock:
    """Deterministic clock returning epoch seconds."""

    def __init__(self, now: float) -> None:
        self.now = float(now)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
