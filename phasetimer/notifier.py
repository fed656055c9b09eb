from __future__ import annotations

import logging
import platform
import shutil
import subprocess
import sys
from typing import TextIO

from .config import TimerSettings
from .timer import Phase

logger = logging.getLogger(__name__)

NOTIFY_TIMEOUT_MS = 5000
COMMAND_TIMEOUT_SECONDS = 10.0


class Notifier:
    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout

    def notify(self, title: str, message: str) -> None:
        sent = False
        system_name = platform.system().lower()

        try:
            if system_name == "darwin" and shutil.which("osascript"):
                script = (
                    "display notification "
                    f"\"{self._escape(message)}\" with title \"{self._escape(title)}\""
                )
                result = subprocess.run(
                    ["osascript", "-e", script],
                    check=False,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    timeout=COMMAND_TIMEOUT_SECONDS,
                )
                sent = result.returncode == 0
            elif system_name == "linux" and shutil.which("notify-send"):
                result = subprocess.run(
                    ["notify-send", "-t", str(NOTIFY_TIMEOUT_MS), title, message],
                    check=False,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    timeout=COMMAND_TIMEOUT_SECONDS,
                )
                sent = result.returncode == 0
        except subprocess.TimeoutExpired:
            logger.warning("desktop notification timed out after %ss", COMMAND_TIMEOUT_SECONDS)
            sent = False
        except Exception:
            logger.warning("desktop notification failed", exc_info=True)
            sent = False

        if not sent:
            self.stream.write(f"[通知] {title}: {message}\n")
            self.stream.flush()

    @staticmethod
    def _escape(text: str) -> str:
        return text.replace("\\", "\\\\").replace('"', '\\"')


def phase_notification(ended: Phase, settings: TimerSettings | None = None) -> tuple[str, str]:
    """Title and body announcing the phase that follows `ended`."""
    current = settings or TimerSettings()
    if Phase(ended) is Phase.WORK:
        minutes = _whole_minutes(current.break_seconds)
        return "🍅 休息时间到！", f"休息 {minutes} 分钟吧。"
    minutes = _whole_minutes(current.work_seconds)
    return "💪 工作时间到！", f"专注工作 {minutes} 分钟！"


def _whole_minutes(seconds: int) -> int:
    return max(1, int(round(seconds / 60)))
