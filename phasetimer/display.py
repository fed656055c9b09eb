from __future__ import annotations

from .timer import Phase, TimerSnapshot

APP_TITLE = "番茄钟"

PHASE_LABELS = {
    Phase.WORK: "工作时间",
    Phase.BREAK: "休息时间",
}


def phase_label(phase: Phase) -> str:
    return PHASE_LABELS[Phase(phase)]


def format_countdown(seconds: int) -> str:
    total = max(0, int(seconds))
    minutes, sec = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{sec:02d}"
    return f"{minutes:02d}:{sec:02d}"


def progress_bar(fraction: float, width: int = 20) -> str:
    clamped = min(1.0, max(0.0, float(fraction)))
    filled = int(round(clamped * width))
    return "#" * filled + "." * (width - filled)


def window_title(snapshot: TimerSnapshot) -> str:
    return f"{format_countdown(snapshot.remaining)} - {phase_label(snapshot.phase)} - {APP_TITLE}"


def status_line(snapshot: TimerSnapshot, width: int = 20) -> str:
    return (
        f"{phase_label(snapshot.phase)} {format_countdown(snapshot.remaining)} "
        f"[{progress_bar(snapshot.elapsed_fraction, width)}] "
        f"第 {snapshot.completed_work_sessions} 轮"
    )
