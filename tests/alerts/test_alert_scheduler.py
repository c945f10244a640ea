import unittest

from alerts import AlertScheduler
from pomodoro import SessionEvent


class _FakeNotifications:
    def __init__(self, *, fail: bool = False):
        self.scheduled: list[tuple[str, float]] = []
        self.cancel_calls = 0
        self.cancelled: list[str] = []
        self._fail = fail

    def schedule_alert(self, alert_id, delay_seconds, title, body) -> None:
        if self._fail:
            raise RuntimeError("permission denied")
        self.scheduled.append((alert_id, delay_seconds))

    def cancel_alert(self, alert_id) -> None:
        self.cancelled.append(alert_id)

    def cancel_all_pending(self) -> None:
        self.cancel_calls += 1


class _FakeAudio:
    def __init__(self, *, fail: bool = False):
        self.pulses = 0
        self._fail = fail

    def play_alert_pulse(self) -> None:
        if self._fail:
            raise OSError("device busy")
        self.pulses += 1


class AlertSchedulerTests(unittest.TestCase):
    def test_work_started_schedules_single_end_alert(self) -> None:
        notifications = _FakeNotifications()
        scheduler = AlertScheduler(notifications=notifications)

        scheduler.handle(SessionEvent("work_started", 1500))

        self.assertEqual([("workSessionEnd", 1500)], notifications.scheduled)
        self.assertEqual(1, notifications.cancel_calls)
        self.assertEqual(frozenset({"workSessionEnd"}), scheduler.pending_alert_ids)

    def test_repeated_work_starts_replace_pending_alert(self) -> None:
        notifications = _FakeNotifications()
        scheduler = AlertScheduler(notifications=notifications)

        scheduler.on_work_started(1500)
        scheduler.on_work_started(1500)

        self.assertEqual(2, notifications.cancel_calls)
        self.assertEqual(frozenset({"workSessionEnd"}), scheduler.pending_alert_ids)

    def test_foreground_alarm_arms_without_scheduling(self) -> None:
        notifications = _FakeNotifications()
        scheduler = AlertScheduler(notifications=notifications)

        scheduler.handle(SessionEvent("break_alarm_started", 300), backgrounded=False)

        self.assertTrue(scheduler.break_alert_armed)
        self.assertEqual([], notifications.scheduled)

    def test_backgrounding_armed_alarm_schedules_exactly_once(self) -> None:
        notifications = _FakeNotifications()
        scheduler = AlertScheduler(notifications=notifications)
        scheduler.on_break_alarm_started(backgrounded=False)

        scheduler.on_backgrounded()
        scheduler.on_backgrounded()

        self.assertEqual([("breakSessionStart", 1)], notifications.scheduled)
        self.assertFalse(scheduler.break_alert_armed)

    def test_background_alarm_restarts_do_not_duplicate_alert(self) -> None:
        notifications = _FakeNotifications()
        scheduler = AlertScheduler(notifications=notifications)

        scheduler.handle(SessionEvent("break_alarm_started", 300), backgrounded=True)
        scheduler.handle(SessionEvent("break_alarm_restarted", 300), backgrounded=True)

        self.assertEqual([("breakSessionStart", 1)], notifications.scheduled)

    def test_break_countdown_disarms_and_allows_next_alert(self) -> None:
        notifications = _FakeNotifications()
        scheduler = AlertScheduler(notifications=notifications)
        scheduler.on_break_alarm_started(backgrounded=True)

        scheduler.handle(SessionEvent("break_countdown_started", 300))
        self.assertNotIn("breakSessionStart", scheduler.pending_alert_ids)
        self.assertEqual(["breakSessionStart"], notifications.cancelled)

        scheduler.handle(SessionEvent("break_alarm_restarted", 300), backgrounded=True)
        self.assertEqual(2, len(notifications.scheduled))

    def test_break_countdown_without_pending_alert_cancels_nothing(self) -> None:
        notifications = _FakeNotifications()
        scheduler = AlertScheduler(notifications=notifications)
        scheduler.on_work_started(60)
        scheduler.on_break_alarm_started(backgrounded=False)

        scheduler.on_break_countdown_started()

        self.assertEqual([], notifications.cancelled)
        self.assertEqual(frozenset({"workSessionEnd"}), scheduler.pending_alert_ids)

    def test_backgrounding_without_armed_alarm_does_nothing(self) -> None:
        notifications = _FakeNotifications()
        scheduler = AlertScheduler(notifications=notifications)

        scheduler.on_backgrounded()
        self.assertEqual([], notifications.scheduled)

    def test_reset_cancels_everything(self) -> None:
        notifications = _FakeNotifications()
        scheduler = AlertScheduler(notifications=notifications)
        scheduler.on_work_started(60)
        scheduler.on_break_alarm_started(backgrounded=False)

        scheduler.handle(SessionEvent("reset"))

        self.assertEqual(frozenset(), scheduler.pending_alert_ids)
        self.assertFalse(scheduler.break_alert_armed)

    def test_scheduling_failure_is_logged_and_not_retried(self) -> None:
        notifications = _FakeNotifications(fail=True)
        scheduler = AlertScheduler(notifications=notifications)

        with self.assertLogs("alerts", level="ERROR"):
            scheduler.on_break_alarm_started(backgrounded=True)
        scheduler.on_break_alarm_started(backgrounded=True)

        self.assertIn("breakSessionStart", scheduler.pending_alert_ids)

    def test_pulse_plays_only_when_gate_not_engaged(self) -> None:
        audio = _FakeAudio()
        scheduler = AlertScheduler(audio=audio)

        self.assertTrue(scheduler.pulse(gate_engaged=False))
        self.assertFalse(scheduler.pulse(gate_engaged=True))
        self.assertEqual(1, audio.pulses)

    def test_pulse_failure_is_swallowed(self) -> None:
        scheduler = AlertScheduler(audio=_FakeAudio(fail=True))

        with self.assertLogs("alerts", level="ERROR"):
            self.assertFalse(scheduler.pulse(gate_engaged=False))

    def test_pulse_without_audio_is_noop(self) -> None:
        scheduler = AlertScheduler()
        self.assertFalse(scheduler.pulse(gate_engaged=False))


if __name__ == "__main__":
    unittest.main()
