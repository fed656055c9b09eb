from __future__ import annotations

import logging
import threading
from typing import Callable

from .clock import Clock, RealClock

logger = logging.getLogger(__name__)


class Ticker:
    """
    Background tick source: calls `callback` every `interval` seconds until stopped.

    Deadlines are computed from the start time on `clock` so the cadence does
    not drift with callback duration. A callback already in flight may still run after
    stop(wait=False); with wait=True (outside the callback) the worker has
    exited when stop() returns.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        interval: float = 1.0,
        name: str = "phasetimer-ticker",
        clock: Clock | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be > 0, got {interval}")
        self.callback = callback
        self.interval = float(interval)
        self.name = name
        self.clock = clock or RealClock()
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._active()

    def start(self) -> None:
        with self._lock:
            if self._active():
                return
            # One event per run; a worker only watches its own.
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name=self.name,
                daemon=True,
            )
            self._thread.start()

    def stop(self, wait: bool = True, timeout: float = 2.0) -> None:
        with self._lock:
            self._stop_event.set()
            thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def _active(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stop_event.is_set()
        )

    def _run(self, stop_event: threading.Event) -> None:
        next_at = self.clock.monotonic() + self.interval
        while not stop_event.wait(max(0.0, next_at - self.clock.monotonic())):
            try:
                self.callback()
            except Exception:
                logger.exception("tick callback failed")
            next_at += self.interval
            now = self.clock.monotonic()
            if next_at < now:
                # Missed deadlines are skipped, not replayed.
                next_at = now + self.interval
