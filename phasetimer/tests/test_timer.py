from __future__ import annotations

import unittest

from phasetimer.tests.test_helpers import EventRecorder, run_ticks
from phasetimer.timer import Phase, PhaseTimer


class TestPhaseTimerScenarios(unittest.TestCase):
    def test_defaults(self) -> None:
        timer = PhaseTimer()

        self.assertEqual(timer.phase, Phase.WORK)
        self.assertEqual(timer.remaining, 1500)
        self.assertEqual(timer.completed_work_sessions, 1)
        self.assertFalse(timer.running)
        self.assertEqual(timer.elapsed_fraction, 0.0)

    def test_full_work_phase_switches_to_break_and_stops(self) -> None:
        timer = PhaseTimer()
        timer.start()

        snap = run_ticks(timer, 1500)

        self.assertEqual(snap.phase, Phase.BREAK)
        self.assertEqual(snap.remaining, 300)
        self.assertFalse(snap.running)
        self.assertEqual(snap.completed_work_sessions, 1)

    def test_full_break_phase_returns_to_work_and_counts_session(self) -> None:
        timer = PhaseTimer()
        timer.start()
        run_ticks(timer, 1500)

        timer.start()
        snap = run_ticks(timer, 300)

        self.assertEqual(snap.phase, Phase.WORK)
        self.assertEqual(snap.remaining, 1500)
        self.assertFalse(snap.running)
        self.assertEqual(snap.completed_work_sessions, 2)

    def test_pause_then_reset_restores_full_work_phase(self) -> None:
        timer = PhaseTimer()
        timer.start()
        run_ticks(timer, 10)
        timer.pause()
        self.assertEqual(timer.remaining, 1490)

        timer.reset()

        self.assertEqual(timer.remaining, 1500)
        self.assertEqual(timer.phase, Phase.WORK)
        self.assertFalse(timer.running)

    def test_elapsed_fraction_quarter_way(self) -> None:
        timer = PhaseTimer()
        timer.start()

        snap = run_ticks(timer, 375)

        self.assertEqual(timer.elapsed_fraction, 0.25)
        self.assertEqual(snap.elapsed_fraction, 0.25)
        self.assertEqual(timer.minutes, 18)
        self.assertEqual(timer.seconds, 45)


class TestPhaseTimerProperties(unittest.TestCase):
    def test_each_tick_decrements_by_one(self) -> None:
        timer = PhaseTimer(work_duration=5, break_duration=3)
        timer.start()

        seen = []
        for _ in range(4):
            before = timer.remaining
            snap = timer.tick()
            seen.append(before - snap.remaining)

        self.assertEqual(seen, [1, 1, 1, 1])
        self.assertEqual(timer.remaining, 1)

    def test_remaining_equals_duration_after_every_transition(self) -> None:
        timer = PhaseTimer(work_duration=4, break_duration=2)
        recorder = EventRecorder(timer)

        for _ in range(6):
            timer.start()
            while timer.running:
                timer.tick()
            self.assertEqual(timer.remaining, timer.duration_of(timer.phase))

        self.assertEqual(
            recorder.of("phase_changed"),
            [
                (Phase.BREAK, 2),
                (Phase.WORK, 4),
                (Phase.BREAK, 2),
                (Phase.WORK, 4),
                (Phase.BREAK, 2),
                (Phase.WORK, 4),
            ],
        )

    def test_session_counter_only_moves_on_break_to_work(self) -> None:
        timer = PhaseTimer(work_duration=2, break_duration=1)
        counts = [timer.completed_work_sessions]

        for _ in range(6):
            timer.start()
            while timer.running:
                timer.tick()
            counts.append(timer.completed_work_sessions)

        # WORK->BREAK keeps the count, BREAK->WORK adds one.
        self.assertEqual(counts, [1, 1, 2, 2, 3, 3, 4])

    def test_start_and_pause_are_idempotent(self) -> None:
        timer = PhaseTimer(work_duration=10, break_duration=5)
        recorder = EventRecorder(timer)

        timer.start()
        timer.start()
        self.assertTrue(timer.running)
        self.assertEqual(recorder.of("running_changed"), [(True,)])

        timer.tick()
        timer.pause()
        once = timer.snapshot()
        timer.pause()

        self.assertEqual(timer.snapshot(), once)
        self.assertEqual(recorder.of("running_changed"), [(True,), (False,)])

    def test_tick_while_idle_is_ignored(self) -> None:
        timer = PhaseTimer(work_duration=3, break_duration=2)
        recorder = EventRecorder(timer)
        before = timer.snapshot()

        snap = timer.tick()

        self.assertEqual(snap, before)
        self.assertEqual(recorder.events, [])

    def test_stray_tick_after_phase_completion_is_ignored(self) -> None:
        timer = PhaseTimer(work_duration=1, break_duration=2)
        timer.start()
        timer.tick()

        snap = timer.tick()

        self.assertEqual(snap.phase, Phase.BREAK)
        self.assertEqual(snap.remaining, 2)

    def test_reset_keeps_phase_and_counter(self) -> None:
        timer = PhaseTimer(work_duration=2, break_duration=4)
        for _ in range(3):
            timer.start()
            while timer.running:
                timer.tick()
        self.assertEqual(timer.phase, Phase.BREAK)
        self.assertEqual(timer.completed_work_sessions, 2)

        timer.start()
        timer.tick()
        timer.reset()

        self.assertEqual(timer.phase, Phase.BREAK)
        self.assertEqual(timer.remaining, 4)
        self.assertEqual(timer.completed_work_sessions, 2)

    def test_rejects_non_positive_durations(self) -> None:
        with self.assertRaises(ValueError):
            PhaseTimer(work_duration=0)
        with self.assertRaises(ValueError):
            PhaseTimer(break_duration=-5)


class TestPhaseTimerEvents(unittest.TestCase):
    def test_completion_event_order(self) -> None:
        timer = PhaseTimer(work_duration=2, break_duration=1)
        recorder = EventRecorder(timer)
        seen_phase_at_complete = []
        timer.on_phase_complete(lambda ended: seen_phase_at_complete.append(timer.phase))

        timer.start()
        run_ticks(timer, 2)

        self.assertEqual(
            recorder.names(),
            ["running_changed", "running_changed", "phase_complete", "phase_changed"],
        )
        self.assertEqual(recorder.of("phase_complete"), [(Phase.WORK,)])
        # Completion is reported before the switch.
        self.assertEqual(seen_phase_at_complete, [Phase.WORK])
        self.assertEqual(recorder.of("tick"), [(Phase.WORK, 1, 0.5), (Phase.WORK, 0, 1.0)])

    def test_reset_emits_tick_for_redraw(self) -> None:
        timer = PhaseTimer(work_duration=10, break_duration=5)
        recorder = EventRecorder(timer)

        timer.reset()

        self.assertEqual(recorder.of("tick"), [(Phase.WORK, 10, 0.0)])
        self.assertEqual(recorder.of("running_changed"), [])

    def test_failing_listener_does_not_break_transition(self) -> None:
        timer = PhaseTimer(work_duration=1, break_duration=1)

        def boom(_: Phase) -> None:
            raise RuntimeError("speaker unplugged")

        timer.on_phase_complete(boom)
        timer.start()

        with self.assertLogs("phasetimer.timer", level="ERROR"):
            snap = timer.tick()

        self.assertEqual(snap.phase, Phase.BREAK)
        self.assertEqual(snap.remaining, 1)
        self.assertFalse(snap.running)

    def test_interrupted_listener_still_switches_phase(self) -> None:
        timer = PhaseTimer(work_duration=1, break_duration=3)
        recorder = EventRecorder(timer)

        def interrupt(_: Phase) -> None:
            raise KeyboardInterrupt

        timer.on_phase_complete(interrupt)
        timer.start()

        with self.assertLogs("phasetimer.timer", level="INFO") as logs:
            with self.assertRaises(KeyboardInterrupt):
                timer.tick()

        self.assertEqual(timer.phase, Phase.BREAK)
        self.assertEqual(timer.remaining, 3)
        self.assertFalse(timer.running)
        # Subscribers still learn about the new phase.
        self.assertEqual(recorder.of("phase_changed"), [(Phase.BREAK, 3)])
        self.assertIn("phase work finished", logs.output[0])

    def test_unsubscribe(self) -> None:
        timer = PhaseTimer(work_duration=5, break_duration=5)
        ticks = []
        unsubscribe = timer.on_tick(lambda *args: ticks.append(args))
        timer.start()
        timer.tick()

        unsubscribe()
        unsubscribe()
        timer.tick()

        self.assertEqual(len(ticks), 1)


if __name__ == "__main__":
    unittest.main()
