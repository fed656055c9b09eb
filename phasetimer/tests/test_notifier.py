from __future__ import annotations

import io
import subprocess
from types import SimpleNamespace
import unittest
from unittest import mock

from phasetimer.config import TimerSettings
from phasetimer.notifier import Notifier, phase_notification
from phasetimer.timer import Phase


class TestNotifier(unittest.TestCase):
    def test_fallback_when_command_fails(self) -> None:
        stream = io.StringIO()
        notifier = Notifier(stream=stream)

        with mock.patch("phasetimer.notifier.platform.system", return_value="Linux"), mock.patch(
            "phasetimer.notifier.shutil.which", return_value="/usr/bin/notify-send"
        ), mock.patch(
            "phasetimer.notifier.subprocess.run", return_value=SimpleNamespace(returncode=1)
        ):
            notifier.notify("PhaseTimer", "测试通知")

        self.assertIn("[通知] PhaseTimer: 测试通知", stream.getvalue())

    def test_linux_notification_closes_after_five_seconds(self) -> None:
        stream = io.StringIO()
        notifier = Notifier(stream=stream)

        with mock.patch("phasetimer.notifier.platform.system", return_value="Linux"), mock.patch(
            "phasetimer.notifier.shutil.which", return_value="/usr/bin/notify-send"
        ), mock.patch(
            "phasetimer.notifier.subprocess.run", return_value=SimpleNamespace(returncode=0)
        ) as run:
            notifier.notify("PhaseTimer", "测试通知")

        self.assertEqual(stream.getvalue(), "")
        self.assertEqual(run.call_args.args[0], ["notify-send", "-t", "5000", "PhaseTimer", "测试通知"])

    def test_command_error_is_contained(self) -> None:
        stream = io.StringIO()
        notifier = Notifier(stream=stream)

        with mock.patch("phasetimer.notifier.platform.system", return_value="Darwin"), mock.patch(
            "phasetimer.notifier.shutil.which", return_value="/usr/bin/osascript"
        ), mock.patch(
            "phasetimer.notifier.subprocess.run", side_effect=OSError("permission denied")
        ):
            notifier.notify("PhaseTimer", "权限被拒绝")

        self.assertIn("[通知] PhaseTimer: 权限被拒绝", stream.getvalue())

    def test_hung_command_times_out_to_fallback(self) -> None:
        stream = io.StringIO()
        notifier = Notifier(stream=stream)

        with mock.patch("phasetimer.notifier.platform.system", return_value="Darwin"), mock.patch(
            "phasetimer.notifier.shutil.which", return_value="/usr/bin/osascript"
        ), mock.patch(
            "phasetimer.notifier.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="osascript", timeout=10.0),
        ) as run, self.assertLogs("phasetimer.notifier", level="WARNING"):
            notifier.notify("PhaseTimer", "卡住了")

        self.assertEqual(run.call_args.kwargs["timeout"], 10.0)
        self.assertIn("[通知] PhaseTimer: 卡住了", stream.getvalue())

    def test_phase_notification_copy(self) -> None:
        self.assertEqual(phase_notification(Phase.WORK), ("🍅 休息时间到！", "休息 5 分钟吧。"))
        self.assertEqual(phase_notification(Phase.BREAK), ("💪 工作时间到！", "专注工作 25 分钟！"))

        custom = TimerSettings(work_seconds=50 * 60, break_seconds=10 * 60)
        self.assertEqual(phase_notification(Phase.WORK, custom)[1], "休息 10 分钟吧。")


if __name__ == "__main__":
    unittest.main()
