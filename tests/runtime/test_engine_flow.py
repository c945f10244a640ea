import logging
import unittest

from alerts import AlertScheduler
from app_config_schema import (
    AlertSettings,
    AppConfig,
    RuntimeSettings,
    SessionSettings,
    UIServerSettings,
)
from pomodoro import SessionClock, SessionConfig
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from runtime.intents import (
    LifecycleIntent,
    ResetIntent,
    RestPromptIntent,
    ShutdownIntent,
    StartIntent,
    TouchIntent,
)


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []
        self.stopped = False

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))

    def stop(self, timeout_seconds: float = 5.0) -> None:
        self.stopped = True

    def of_type(self, event_type: str) -> list[dict[str, object]]:
        return [payload for kind, payload in self.events if kind == event_type]


class _NotificationsStub:
    def __init__(self):
        self.scheduled: list[str] = []

    def schedule_alert(self, alert_id, delay_seconds, title, body) -> None:
        self.scheduled.append(alert_id)

    def cancel_alert(self, alert_id) -> None:
        pass

    def cancel_all_pending(self) -> None:
        pass


class _AudioStub:
    def __init__(self):
        self.pulses = 0

    def play_alert_pulse(self) -> None:
        self.pulses += 1


class RuntimeEngineFlowTests(unittest.TestCase):
    def _build(
        self,
        *,
        sessions_before_rest_prompt: int = 8,
        strict: bool = True,
    ) -> RuntimeEngine:
        self.ui = _UIServerStub()
        self.notifications = _NotificationsStub()
        self.audio = _AudioStub()
        self.signal_hooks: list[RuntimeEngine] = []
        app_config = AppConfig(
            session=SessionSettings(),
            alerts=AlertSettings(),
            runtime=RuntimeSettings(tick_interval_seconds=1.0, pulse_interval_seconds=1.5),
            ui_server=UIServerSettings(),
            source_file="test.toml",
        )
        clock = SessionClock(
            SessionConfig(
                work_duration_seconds=10,
                break_duration_seconds=3,
                long_break_duration_seconds=6,
                long_break_every=4,
                sessions_before_rest_prompt=sessions_before_rest_prompt,
            ),
            strict=strict,
        )
        self.clock = clock
        return RuntimeEngine(
            RuntimeBootstrap(
                logger=logging.getLogger("test"),
                app_config=app_config,
                session_clock=clock,
                alert_scheduler=AlertScheduler(
                    notifications=self.notifications,
                    audio=self.audio,
                ),
                ui_server=self.ui,
                hooks=RuntimeHooks(setup_signal_handlers=self.signal_hooks.append),
                now_fn=lambda: 0.0,
            )
        )

    def _alarming_engine(self) -> RuntimeEngine:
        engine = self._build()
        engine.startup(0.0)
        engine.handle_intent(StartIntent(), 0.0)
        engine.advance(1.0)
        engine.advance(10.0)
        self.assertEqual("alarming", self.clock.phase)
        return engine

    def test_startup_publishes_idle_session(self) -> None:
        engine = self._build()
        engine.startup(0.0)

        session = self.ui.of_type("session")[-1]
        self.assertEqual("idle", session["phase"])
        self.assertEqual("startup", session["reason"])
        self.assertEqual("00:10", session["display"])
        self.assertFalse(engine.tick_source.is_active)
        self.assertFalse(engine.pulse_source.is_active)

    def test_start_arms_tick_and_schedules_work_end_alert(self) -> None:
        engine = self._build()
        engine.startup(0.0)

        engine.handle_intent(StartIntent(), 0.0)

        self.assertTrue(engine.tick_source.is_active)
        self.assertFalse(engine.pulse_source.is_active)
        self.assertEqual(["workSessionEnd"], self.notifications.scheduled)

        engine.advance(1.0)
        session = self.ui.of_type("session")[-1]
        self.assertEqual("working", session["phase"])
        self.assertEqual("00:09", session["display"])
        self.assertEqual("Work Time", session["title"])

    def test_work_end_switches_from_tick_to_pulse(self) -> None:
        engine = self._alarming_engine()

        self.assertFalse(engine.tick_source.is_active)
        self.assertTrue(engine.pulse_source.is_active)
        self.assertEqual(11.5, engine.pulse_source.next_due)

        engine.advance(11.5)
        engine.advance(13.0)
        self.assertEqual(2, engine.pulses_played)
        self.assertEqual(2, self.audio.pulses)
        self.assertEqual("Break Time", self.ui.of_type("session")[-1]["title"])

    def test_engaging_gate_stops_pulse_and_counts_break(self) -> None:
        engine = self._alarming_engine()

        engine.handle_intent(TouchIntent("left", True), 10.5)
        engine.handle_intent(TouchIntent("right", True), 10.5)

        self.assertEqual("resting", self.clock.phase)
        self.assertFalse(engine.pulse_source.is_active)
        self.assertTrue(engine.tick_source.is_active)

        engine.advance(13.5)
        self.assertEqual("working", self.clock.phase)
        self.assertEqual(0, self.audio.pulses)

    def test_backgrounding_during_alarm_suspends_sources_and_notifies_once(self) -> None:
        engine = self._alarming_engine()

        engine.handle_intent(LifecycleIntent("background"), 11.0)
        engine.handle_intent(LifecycleIntent("background"), 12.0)

        self.assertTrue(engine.is_backgrounded)
        self.assertTrue(self.clock.is_suspended)
        self.assertFalse(engine.pulse_source.is_active)
        self.assertFalse(engine.tick_source.is_active)
        self.assertEqual(
            ["workSessionEnd", "breakSessionStart"],
            self.notifications.scheduled,
        )

        engine.handle_intent(LifecycleIntent("foreground"), 40.0)
        self.assertFalse(self.clock.is_suspended)
        self.assertEqual("alarming", self.clock.phase)
        self.assertTrue(engine.pulse_source.is_active)

    def test_backgrounded_work_expiry_is_reconciled_on_foreground(self) -> None:
        engine = self._build()
        engine.startup(0.0)
        engine.handle_intent(StartIntent(), 0.0)

        engine.handle_intent(LifecycleIntent("background"), 2.0)
        self.assertIsNone(engine.advance(30.0))
        self.assertEqual("working", self.clock.phase)

        engine.handle_intent(LifecycleIntent("foreground"), 30.0)
        self.assertEqual("alarming", self.clock.phase)
        self.assertEqual(1, self.clock.sessions_completed)

    def test_reset_while_backgrounded_stays_suspended(self) -> None:
        engine = self._build()
        engine.startup(0.0)
        engine.handle_intent(StartIntent(), 0.0)
        engine.handle_intent(LifecycleIntent("background"), 2.0)

        engine.handle_intent(ResetIntent(restart=True), 3.0)

        self.assertTrue(engine.is_backgrounded)
        self.assertTrue(self.clock.is_suspended)
        self.assertEqual("working", self.clock.phase)
        self.assertFalse(engine.tick_source.is_active)
        self.assertFalse(engine.pulse_source.is_active)

        engine.handle_intent(LifecycleIntent("foreground"), 5.0)

        self.assertFalse(self.clock.is_suspended)
        self.assertTrue(engine.tick_source.is_active)
        self.assertEqual(8, self.clock.snapshot().remaining_work_seconds)
        self.assertEqual([], self.ui.of_type("error"))

    def test_rejected_intent_publishes_error_event(self) -> None:
        engine = self._build(strict=False)
        engine.startup(0.0)

        with self.assertLogs("pomodoro", level="WARNING"):
            engine.handle_intent(RestPromptIntent("reset"), 0.0)

        errors = self.ui.of_type("error")
        self.assertEqual(1, len(errors))
        self.assertIn("resolve rest prompt", errors[0]["message"])

    def test_invalid_message_is_reported_without_enqueueing(self) -> None:
        engine = self._build()

        with self.assertLogs("test", level="WARNING"):
            engine.submit_message('{"type": "launch"}')

        self.assertEqual(1, len(self.ui.of_type("error")))
        self.assertIsNone(engine._poll_intent())

    def test_exit_from_rest_prompt_returns_zero(self) -> None:
        engine = self._build(sessions_before_rest_prompt=1)
        engine.startup(0.0)
        engine.handle_intent(StartIntent(), 0.0)
        engine.advance(10.0)
        self.assertEqual("awaiting_rest_prompt", self.clock.phase)

        self.assertEqual(0, engine.handle_intent(RestPromptIntent("exit"), 11.0))

    def test_run_stops_on_shutdown_intent_and_stops_server(self) -> None:
        engine = self._build()
        engine.submit(ShutdownIntent(reason="SIGTERM"))

        self.assertEqual(0, engine.run())
        self.assertEqual([engine], self.signal_hooks)
        self.assertTrue(self.ui.stopped)


if __name__ == "__main__":
    unittest.main()
