from __future__ import annotations

from dataclasses import asdict
import logging
import queue
import sqlite3
from threading import Lock
from typing import Any, Callable

from ..chime import tone_pattern
from ..config import TimerSettings
from ..db import SessionHistory
from ..display import format_countdown, window_title
from ..notifier import Notifier, phase_notification
from ..ticker import Ticker
from ..timer import Phase, PhaseTimer, TimerSnapshot

logger = logging.getLogger(__name__)

TickerFactory = Callable[[Callable[[], None], float], Ticker]


def _default_ticker(callback: Callable[[], None], interval: float) -> Ticker:
    return Ticker(callback, interval=interval)


class TimerService:
    """
    Thread-safe host for one PhaseTimer behind the HTTP API.

    Every command and every tick runs under one lock. Desktop notifications
    and history writes queued by a tick run after the lock is released. The
    ticker follows the timer's running flag: it is started on a transition to
    running and cancelled on any transition to idle, and ticks from a
    cancelled run are dropped by run id.
    """

    def __init__(
        self,
        settings: TimerSettings | None = None,
        history: SessionHistory | None = None,
        notifier: Notifier | None = None,
        ticker_factory: TickerFactory = _default_ticker,
    ) -> None:
        self._lock = Lock()
        self.settings = settings or TimerSettings()
        self.history = history
        self.notifier = notifier or Notifier()
        self._ticker_factory = ticker_factory
        self._ticker: Ticker | None = None
        self._run_id = 0
        self._subscribers: list[queue.Queue[dict[str, Any]]] = []
        self._last_event: dict[str, Any] = {}
        self._pending: list[Callable[[], None]] = []

        self.timer = PhaseTimer(
            work_duration=self.settings.work_seconds,
            break_duration=self.settings.break_seconds,
        )
        self.timer.on_tick(self._on_tick)
        self.timer.on_running_changed(self._on_running_changed)
        self.timer.on_phase_complete(self._on_phase_complete)
        self.timer.on_phase_changed(self._on_phase_changed)

    # ----- Commands -----
    def state(self) -> dict[str, Any]:
        with self._lock:
            return self._state_dict()

    def start(self) -> dict[str, Any]:
        with self._lock:
            self.timer.start()
            return self._state_dict()

    def pause(self) -> dict[str, Any]:
        with self._lock:
            self.timer.pause()
            return self._state_dict()

    def reset(self) -> dict[str, Any]:
        with self._lock:
            self.timer.reset()
            return self._state_dict()

    def shutdown(self) -> None:
        with self._lock:
            ticker = self._ticker
            self.timer.pause()
        if ticker is not None:
            ticker.stop(wait=True)

    # ----- Event stream -----
    def subscribe(self) -> queue.Queue[dict[str, Any]]:
        q: queue.Queue[dict[str, Any]] = queue.Queue(maxsize=200)
        with self._lock:
            self._subscribers.append(q)
        return q

    def unsubscribe(self, q: queue.Queue[dict[str, Any]]) -> None:
        with self._lock:
            self._subscribers = [item for item in self._subscribers if item is not q]

    def _broadcast(self, event: dict[str, Any]) -> None:
        self._last_event = event
        alive: list[queue.Queue[dict[str, Any]]] = []
        for q in self._subscribers:
            try:
                q.put_nowait(event)
                alive.append(q)
            except queue.Full:
                continue
        self._subscribers = alive

    # ----- Tick source -----
    def _tick_from_source(self, run_id: int) -> None:
        with self._lock:
            if run_id != self._run_id:
                return
            self.timer.tick()
            actions, self._pending = self._pending, []
        for action in actions:
            action()

    def _start_ticker(self) -> None:
        self._run_id += 1
        run_id = self._run_id
        interval = self.settings.tick_seconds or 1.0
        self._ticker = self._ticker_factory(lambda: self._tick_from_source(run_id), interval)
        self._ticker.start()

    def _stop_ticker(self) -> None:
        self._run_id += 1
        if self._ticker is not None:
            # Lock held: the worker may be blocked on it.
            self._ticker.stop(wait=False)
            self._ticker = None

    # ----- Timer listeners (called with the lock held) -----
    def _on_running_changed(self, running: bool) -> None:
        if running:
            self._start_ticker()
        else:
            self._stop_ticker()
        self._broadcast({"event": "running_changed", "running": running})

    def _on_tick(self, phase: Phase, remaining: int, elapsed_fraction: float) -> None:
        self._broadcast(
            {
                "event": "tick",
                "phase": phase.value,
                "remaining": remaining,
                "elapsed_fraction": elapsed_fraction,
                "display": format_countdown(remaining),
            }
        )

    def _on_phase_complete(self, ended: Phase) -> None:
        title, message = phase_notification(ended, self.settings)
        if self.settings.notify:
            self._pending.append(lambda: self.notifier.notify(title, message))
        if ended is Phase.WORK and self.history is not None:
            self._pending.append(self._record_work_session)
        self._broadcast(
            {
                "event": "phase_complete",
                "phase": ended.value,
                "title": title,
                "message": message,
                "sound": self.settings.sound,
                "tones": [asdict(tone) for tone in tone_pattern(ended)],
            }
        )

    def _on_phase_changed(self, phase: Phase, duration: int) -> None:
        self._broadcast(
            {
                "event": "phase_changed",
                "phase": phase.value,
                "duration": duration,
                "completed_work_sessions": self.timer.completed_work_sessions,
            }
        )
        if self.settings.auto_continue:
            self.timer.start()

    def _record_work_session(self) -> None:
        try:
            self.history.record_work_session()
        except (sqlite3.Error, OSError):
            logger.exception("failed to record work session")

    def _state_dict(self) -> dict[str, Any]:
        snap: TimerSnapshot = self.timer.snapshot()
        return {
            "phase": snap.phase.value,
            "remaining": snap.remaining,
            "running": snap.running,
            "completed_work_sessions": snap.completed_work_sessions,
            "duration": snap.duration,
            "elapsed_fraction": snap.elapsed_fraction,
            "minutes": self.timer.minutes,
            "seconds": self.timer.seconds,
            "display": format_countdown(snap.remaining),
            "title": window_title(snap),
            "last_event": dict(self._last_event),
        }
