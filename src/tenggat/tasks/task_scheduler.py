# src/tenggat/tasks/task_scheduler.py

from __future__ import annotations

"""
Deadline scheduler.

Owns the two periodic ticks of the to-do view:
- display refresh (~1s): recompute the countdown text of every task,
- alert check (~10s): run the notification gate over the same snapshot.

Each tick reads a fresh task list from the injected task source and makes one
bounded, synchronous pass over it; tasks added mid-tick show up on the next
tick. start()/stop() (or `async with`) bound the lifetime of both loops.
"""

import asyncio
import contextlib
import logging
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..core.ports import AlertSink, NotifiedRepo
from ..core.state import AppState
from .deadline import DEFAULT_UNITS, TimeUnits, remaining, units_for_locale
from .notifier import (
    DEFAULT_ALERT_TITLE,
    DEFAULT_WINDOW_SECONDS,
    check_and_notify,
    request_permission_once,
)
from .task_models import Task

logger = logging.getLogger(__name__)

TaskSource = Callable[[], Iterable[Task]]
RefreshCallback = Callable[[dict[str, str]], None]

MIN_INTERVAL_SECONDS = 0.01


class DeadlineScheduler:
    def __init__(
            self,
            task_source: TaskSource,
            notified: NotifiedRepo,
            sink: AlertSink,
            *,
            clock: Callable[[], float] = time.time,
            units: TimeUnits = DEFAULT_UNITS,
            refresh_interval_seconds: float = 1.0,
            alert_interval_seconds: float = 10.0,
            alert_window_seconds: float = DEFAULT_WINDOW_SECONDS,
            alert_title: str = DEFAULT_ALERT_TITLE,
            on_refresh: RefreshCallback | None = None,
    ) -> None:
        self._task_source = task_source
        self._notified = notified
        self._sink = sink
        self._clock = clock
        self._units = units
        self._refresh_s = max(MIN_INTERVAL_SECONDS, float(refresh_interval_seconds))
        self._alert_s = max(MIN_INTERVAL_SECONDS, float(alert_interval_seconds))
        self._window_s = float(alert_window_seconds)
        self._alert_title = alert_title
        self._on_refresh = on_refresh

        self._loops: list[asyncio.Task[None]] = []
        self.time_remaining: dict[str, str] = {}

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._loops)

    # ---- single ticks ----

    def _snapshot(self) -> list[Task]:
        return list(self._task_source())

    def refresh_once(self) -> dict[str, str]:
        """Recompute countdown text for every task in the current snapshot."""
        now = self._clock()
        snapshot = {task.id: remaining(task.deadline, now, units=self._units) for task in self._snapshot()}
        self.time_remaining = snapshot

        if self._on_refresh is not None:
            try:
                self._on_refresh(snapshot)
            except Exception:
                logger.exception("on_refresh callback failed")

        return snapshot

    def check_once(self) -> list[str]:
        """Run the notification gate once; returns the ids alerted."""
        return check_and_notify(
            self._snapshot(),
            self._notified,
            self._clock(),
            self._sink,
            window_seconds=self._window_s,
            title=self._alert_title,
        )

    # ---- loops ----

    async def _run_loop(self, name: str, tick: Callable[[], object], interval_s: float) -> None:
        while True:
            try:
                tick()
            except Exception:
                logger.exception("%s tick failed", name)
            await asyncio.sleep(interval_s)

    async def start(self) -> None:
        if self.running:
            return

        request_permission_once(self._sink)

        self._loops = [
            asyncio.create_task(self._run_loop("refresh", self.refresh_once, self._refresh_s)),
            asyncio.create_task(self._run_loop("alert", self.check_once, self._alert_s)),
        ]
        logger.info(
            "DeadlineScheduler started refresh=%.2fs alert=%.2fs window=%.0fs",
            self._refresh_s,
            self._alert_s,
            self._window_s,
        )

    async def stop(self) -> None:
        loops, self._loops = self._loops, []
        for t in loops:
            t.cancel()
        for t in loops:
            with contextlib.suppress(asyncio.CancelledError):
                await t
        if loops:
            logger.info("DeadlineScheduler stopped")

    async def __aenter__(self) -> DeadlineScheduler:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()


def build_scheduler(state: AppState) -> DeadlineScheduler:
    """Wire a scheduler from AppState; refreshes are published to state.time_remaining."""
    settings = state.settings

    def publish(snapshot: dict[str, str]) -> None:
        with state.lock:
            state.time_remaining = snapshot

    return DeadlineScheduler(
        state.task_store.list_tasks,
        state.notified,
        state.alert_sink,
        units=units_for_locale(getattr(settings, "locale", "en")),
        refresh_interval_seconds=getattr(settings, "refresh_interval_seconds", 1.0),
        alert_interval_seconds=getattr(settings, "alert_interval_seconds", 10.0),
        alert_window_seconds=getattr(settings, "alert_window_seconds", DEFAULT_WINDOW_SECONDS),
        on_refresh=publish,
    )


@dataclass(slots=True)
class SchedulerBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal scheduler stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


async def _run_scheduler(state: AppState, stop_event: asyncio.Event) -> None:
    sink = state.alert_sink

    # Sinks backed by a network client (Matrix) connect inside this loop.
    connect = getattr(sink, "connect", None)
    if connect is not None:
        try:
            await connect()
        except Exception:
            logger.exception("Alert sink connect failed; alerts stay disabled")

    try:
        async with build_scheduler(state):
            await stop_event.wait()
    finally:
        aclose = getattr(sink, "aclose", None)
        if aclose is not None:
            with contextlib.suppress(Exception):
                await aclose()


def start_scheduler_in_background(state: AppState) -> SchedulerBackgroundRunner | None:
    """
    Run the deadline scheduler on its own event loop in a daemon thread.

    The console REPL blocks on input(), so the ticks can not share its thread.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(_run_scheduler(state, stop_event))
        except Exception:
            logger.exception("Scheduler thread crashed")
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="tenggat-scheduler", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Scheduler thread did not initialize properly.")
        return None

    logger.info("Scheduler background thread started.")
    return SchedulerBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
