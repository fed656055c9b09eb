from __future__ import annotations

from dataclasses import dataclass
import logging
import sqlite3
import sys
from typing import Callable, TextIO

from .chime import Chime
from .clock import Clock
from .config import TimerSettings
from .db import SessionHistory
from .display import format_countdown, phase_label, status_line, window_title
from .notifier import Notifier, phase_notification
from .timer import Phase, PhaseTimer, TimerSnapshot

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[Phase], bool]


@dataclass(frozen=True)
class RunResult:
    interrupted: bool
    completed_work_sessions: int
    phases_completed: int


def prompt_continue(
    next_phase: Phase,
    stream: TextIO | None = None,
    input_fn: Callable[[str], str] = input,
) -> bool:
    out = stream or sys.stdout
    try:
        answer = input_fn(f"{phase_label(next_phase)}即将开始，继续吗？[Y/n] ")
    except EOFError:
        out.write("\n")
        out.flush()
        return False
    return answer.strip().lower() in {"", "y", "yes"}


class ConsoleRunner:
    """
    Foreground host for a PhaseTimer: sleeps on the clock, ticks the timer and
    redraws a single status line. Alerts are delivered from the timer's
    phase-complete event.
    """

    def __init__(
        self,
        timer: PhaseTimer,
        clock: Clock,
        notifier: Notifier,
        chime: Chime,
        settings: TimerSettings | None = None,
        history: SessionHistory | None = None,
        stream: TextIO | None = None,
        confirm: ConfirmCallback | None = None,
    ) -> None:
        self.timer = timer
        self.clock = clock
        self.notifier = notifier
        self.chime = chime
        self.settings = settings or TimerSettings(
            work_seconds=timer.work_duration,
            break_seconds=timer.break_duration,
        )
        self.history = history
        self.stream = stream or sys.stdout
        self.confirm = confirm or (lambda phase: prompt_continue(phase, self.stream))
        self._phases_completed = 0
        self.timer.on_phase_complete(self._on_phase_complete)

    def run(self, max_phases: int | None = None) -> RunResult:
        self._phases_completed = 0
        self.stream.write(
            f"开始 PhaseTimer：工作 {format_countdown(self.timer.work_duration)}，"
            f"休息 {format_countdown(self.timer.break_duration)}\n"
        )
        self.stream.flush()

        self.timer.start()
        try:
            while self.timer.running:
                self._render(self.timer.snapshot())
                self.clock.sleep(self.settings.tick_seconds)
                snap = self.timer.tick()
                if snap.running:
                    continue

                # The tick finished a phase; the timer is idle until started again.
                self._clear_line()
                if max_phases is not None and self._phases_completed >= max_phases:
                    break
                if self.settings.auto_continue or self.confirm(snap.phase):
                    self.timer.start()
        except KeyboardInterrupt:
            self.timer.pause()
            self._clear_line()
            snap = self.timer.snapshot()
            self.stream.write(
                f"已暂停：{phase_label(snap.phase)} 剩余 {format_countdown(snap.remaining)}\n"
            )
            self.stream.flush()
            return RunResult(True, self.timer.completed_work_sessions, self._phases_completed)

        self.stream.write(
            f"计时结束：已完成 {self._phases_completed} 个阶段，当前第 "
            f"{self.timer.completed_work_sessions} 轮。\n"
        )
        self.stream.flush()
        return RunResult(False, self.timer.completed_work_sessions, self._phases_completed)

    def _on_phase_complete(self, ended: Phase) -> None:
        self._phases_completed += 1
        self._clear_line()
        self.stream.write(f"{phase_label(ended)}结束。\n")
        self.stream.flush()

        if self.settings.sound:
            self.chime.play(ended)
        if self.settings.notify:
            title, message = phase_notification(ended, self.settings)
            self.notifier.notify(title, message)
        if ended is Phase.WORK and self.history is not None:
            try:
                self.history.record_work_session(self.clock.now().astimezone().date())
            except (sqlite3.Error, OSError):
                logger.exception("failed to record work session")

    def _render(self, snapshot: TimerSnapshot) -> None:
        if self._is_tty():
            self.stream.write(f"\x1b]0;{window_title(snapshot)}\x07")
        self.stream.write(f"\r{status_line(snapshot)}")
        self.stream.flush()

    def _clear_line(self) -> None:
        self.stream.write("\r" + (" " * 80) + "\r")
        self.stream.flush()

    def _is_tty(self) -> bool:
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())
