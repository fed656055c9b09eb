from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_WORK_SECONDS = 25 * 60
DEFAULT_BREAK_SECONDS = 5 * 60


class Phase(str, Enum):
    WORK = "work"
    BREAK = "break"


@dataclass(frozen=True)
class TimerSnapshot:
    phase: Phase
    remaining: int
    running: bool
    completed_work_sessions: int
    duration: int
    elapsed_fraction: float


TickListener = Callable[[Phase, int, float], None]
PhaseCompleteListener = Callable[[Phase], None]
PhaseChangedListener = Callable[[Phase, int], None]
RunningChangedListener = Callable[[bool], None]


class PhaseTimer:
    """
    Work/break countdown state machine.

    The timer never schedules anything itself: a host calls tick() once per
    second while the timer is running, and renders or alerts from the
    subscribed events. Not thread-safe; hosts serialize all calls.
    """

    def __init__(
        self,
        work_duration: int = DEFAULT_WORK_SECONDS,
        break_duration: int = DEFAULT_BREAK_SECONDS,
    ) -> None:
        if int(work_duration) <= 0:
            raise ValueError(f"work_duration must be > 0, got {work_duration}")
        if int(break_duration) <= 0:
            raise ValueError(f"break_duration must be > 0, got {break_duration}")

        self.work_duration = int(work_duration)
        self.break_duration = int(break_duration)

        self._phase = Phase.WORK
        self._remaining = self.work_duration
        self._running = False
        self._completed_work_sessions = 1

        self._listeners: dict[str, list[Callable[..., None]]] = {
            "tick": [],
            "phase_complete": [],
            "phase_changed": [],
            "running_changed": [],
        }

    # ----- Read accessors -----
    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._running

    @property
    def completed_work_sessions(self) -> int:
        return self._completed_work_sessions

    @property
    def duration(self) -> int:
        return self.duration_of(self._phase)

    @property
    def elapsed_fraction(self) -> float:
        total = self.duration
        return (total - self._remaining) / total

    @property
    def minutes(self) -> int:
        return self._remaining // 60

    @property
    def seconds(self) -> int:
        return self._remaining % 60

    def duration_of(self, phase: Phase) -> int:
        return self.work_duration if phase is Phase.WORK else self.break_duration

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            phase=self._phase,
            remaining=self._remaining,
            running=self._running,
            completed_work_sessions=self._completed_work_sessions,
            duration=self.duration,
            elapsed_fraction=self.elapsed_fraction,
        )

    # ----- Subscriptions -----
    def on_tick(self, fn: TickListener) -> Callable[[], None]:
        return self._subscribe("tick", fn)

    def on_phase_complete(self, fn: PhaseCompleteListener) -> Callable[[], None]:
        return self._subscribe("phase_complete", fn)

    def on_phase_changed(self, fn: PhaseChangedListener) -> Callable[[], None]:
        return self._subscribe("phase_changed", fn)

    def on_running_changed(self, fn: RunningChangedListener) -> Callable[[], None]:
        return self._subscribe("running_changed", fn)

    # ----- Commands -----
    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._emit("running_changed", True)

    def pause(self) -> None:
        if not self._running:
            return
        self._running = False
        self._emit("running_changed", False)

    def reset(self) -> None:
        self.pause()
        self._remaining = self.duration
        self._emit("tick", self._phase, self._remaining, self.elapsed_fraction)

    def tick(self) -> TimerSnapshot:
        """
        Consume one second. Ignored while paused.
        Returns the state after the tick, including any phase switch.
        """
        if not self._running:
            return self.snapshot()

        self._remaining = max(0, self._remaining - 1)
        self._emit("tick", self._phase, self._remaining, self.elapsed_fraction)

        if self._remaining == 0:
            self._complete_phase()

        return self.snapshot()

    def _complete_phase(self) -> None:
        ended = self._phase
        self.pause()
        try:
            self._emit("phase_complete", ended)
        finally:
            # Switch and announce even if a listener was interrupted (Ctrl-C during an alert).
            self._switch_phase(ended)

    def _switch_phase(self, ended: Phase) -> None:
        if ended is Phase.WORK:
            self._phase = Phase.BREAK
        else:
            self._phase = Phase.WORK
            self._completed_work_sessions += 1
        self._remaining = self.duration

        logger.info(
            "phase %s finished, next %s (%ss), session %s",
            ended.value,
            self._phase.value,
            self._remaining,
            self._completed_work_sessions,
        )
        self._emit("phase_changed", self._phase, self._remaining)

    def _subscribe(self, event: str, fn: Callable[..., None]) -> Callable[[], None]:
        listeners = self._listeners[event]
        listeners.append(fn)

        def unsubscribe() -> None:
            if fn in listeners:
                listeners.remove(fn)

        return unsubscribe

    def _emit(self, event: str, *args: Any) -> None:
        for fn in list(self._listeners[event]):
            try:
                fn(*args)
            except Exception:
                logger.exception("%s listener %r failed", event, fn)
