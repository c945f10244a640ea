"""Runtime orchestration loop for session ticks, alarm pulses, and UI intents."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Callable, Optional

from alerts import AlertScheduler
from app_config import AppConfig
from contracts.ui_protocol import EVENT_ERROR, LIFECYCLE_BACKGROUND
from pomodoro import SessionActionResult, SessionClock
from pomodoro.constants import (
    ACTION_SYNC,
    COUNTDOWN_PHASES,
    EVENT_BREAK_ALARM_RESTARTED,
    EVENT_BREAK_ALARM_STARTED,
    EVENT_BREAK_COUNTDOWN_STARTED,
    EVENT_TERMINATION_REQUESTED,
    EVENT_WORK_STARTED,
    PHASE_ALARMING,
    REASON_STARTUP,
)
from server import UIServer

from .intents import (
    Intent,
    IntentParseError,
    LifecycleIntent,
    ResetIntent,
    RestConfirmationIntent,
    RestPromptIntent,
    ShutdownIntent,
    StartConfirmationIntent,
    StartIntent,
    TouchIntent,
    parse_intent,
)
from .sources import RecurringSource
from .ui import RuntimeUIPublisher

_REARM_EVENTS: frozenset[str] = frozenset(
    {
        EVENT_WORK_STARTED,
        EVENT_BREAK_ALARM_STARTED,
        EVENT_BREAK_ALARM_RESTARTED,
        EVENT_BREAK_COUNTDOWN_STARTED,
    }
)
_MAX_POLL_TIMEOUT_SECONDS = 0.25


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup."""
    setup_signal_handlers: Callable[["RuntimeEngine"], None]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    session_clock: SessionClock
    alert_scheduler: AlertScheduler
    ui_server: Optional[UIServer]
    hooks: RuntimeHooks
    now_fn: Callable[[], float] = time.time


@dataclass
class RuntimeResources:
    """Mutable runtime resources owned by the event loop."""
    intent_queue: Queue[Intent]
    tick_source: RecurringSource
    pulse_source: RecurringSource
    backgrounded: bool = False
    exit_code: Optional[int] = None
    pulses_played: int = 0


class RuntimeEngine:
    """Single scheduling context that owns every session state mutation.

    The UI server thread only enqueues intents; ticks, pulses, and intents
    are all applied from `run`.
    """
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._now = bootstrap.now_fn
        self._clock = bootstrap.session_clock
        self._alerts = bootstrap.alert_scheduler
        self._ui = RuntimeUIPublisher(bootstrap.ui_server)

        runtime_settings = bootstrap.app_config.runtime
        sources_logger = logging.getLogger("runtime.sources")
        self._resources = RuntimeResources(
            intent_queue=Queue(),
            tick_source=RecurringSource(
                "foreground_tick",
                runtime_settings.tick_interval_seconds,
                logger=sources_logger,
            ),
            pulse_source=RecurringSource(
                "alarm_pulse",
                runtime_settings.pulse_interval_seconds,
                logger=sources_logger,
            ),
        )

    @property
    def tick_source(self) -> RecurringSource:
        return self._resources.tick_source

    @property
    def pulse_source(self) -> RecurringSource:
        return self._resources.pulse_source

    @property
    def is_backgrounded(self) -> bool:
        return self._resources.backgrounded

    @property
    def pulses_played(self) -> int:
        return self._resources.pulses_played

    def submit(self, intent: Intent) -> None:
        """Enqueue an intent; safe to call from any thread."""
        self._resources.intent_queue.put(intent)

    def submit_message(self, message: str) -> None:
        """Parse a raw websocket message and enqueue the resulting intent."""
        try:
            intent = parse_intent(message)
        except IntentParseError as error:
            self._logger.warning("Dropping invalid UI intent: %s", error)
            self._ui.publish(EVENT_ERROR, message=f"Invalid intent: {error}")
            return
        self.submit(intent)

    def run(self) -> int:
        self.startup(self._now())
        self._bootstrap.hooks.setup_signal_handlers(self)
        self._logger.info("Ready! Press Start in the UI to begin a work session.")

        try:
            while True:
                exit_code = self.advance(self._now())
                if exit_code is not None:
                    return exit_code

                intent = self._poll_intent()
                if intent is None:
                    continue

                exit_code = self.handle_intent(intent, self._now())
                if exit_code is not None:
                    return exit_code

        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def startup(self, now: float) -> None:
        result = self._clock.reset_all(now)
        self._dispatch_events(result)
        self._sync_sources(now, rearm=False)
        self._ui.publish_session_update(
            result.snapshot,
            action=ACTION_SYNC,
            accepted=True,
            reason=REASON_STARTUP,
        )

    def advance(self, now: float) -> Optional[int]:
        """Fire due recurring sources; returns an exit code once termination is requested."""
        resources = self._resources
        if resources.tick_source.poll(now):
            # One reconciliation covers any number of missed intervals.
            self._apply(self._clock.tick(now), now)

        if resources.pulse_source.poll(now) and self._clock.phase == PHASE_ALARMING:
            if self._alerts.pulse(gate_engaged=self._clock.gate.both_held):
                resources.pulses_played += 1

        return resources.exit_code

    def handle_intent(self, intent: Intent, now: float) -> Optional[int]:
        clock = self._clock
        if isinstance(intent, StartIntent):
            self._apply(clock.start_work(now), now)
        elif isinstance(intent, TouchIntent):
            self._apply(clock.touch(intent.side, intent.held, now), now)
        elif isinstance(intent, RestPromptIntent):
            self._apply(clock.resolve_rest_prompt(intent.choice), now)
        elif isinstance(intent, RestConfirmationIntent):
            self._apply(clock.resolve_rest_confirmation(intent.confirmed), now)
        elif isinstance(intent, StartConfirmationIntent):
            self._apply(clock.resolve_start_confirmation(intent.confirmed, now), now)
        elif isinstance(intent, ResetIntent):
            self._apply(clock.reset_all(now, restart=intent.restart), now)
        elif isinstance(intent, LifecycleIntent):
            self._handle_lifecycle(intent, now)
        elif isinstance(intent, ShutdownIntent):
            self._logger.info("Shutdown requested: %s", intent.reason)
            self._resources.exit_code = 0
        else:
            self._logger.warning("Ignoring unknown intent type: %s", type(intent).__name__)
        return self._resources.exit_code

    def _handle_lifecycle(self, intent: LifecycleIntent, now: float) -> None:
        resources = self._resources
        if intent.state == LIFECYCLE_BACKGROUND:
            if resources.backgrounded:
                return
            resources.backgrounded = True
            if not self._clock.is_suspended:
                self._apply(self._clock.suspend(now), now)
            if self._clock.phase == PHASE_ALARMING:
                self._alerts.on_backgrounded()
            return

        if not resources.backgrounded:
            return
        resources.backgrounded = False
        if self._clock.is_suspended:
            self._apply(self._clock.resume(now), now)

    def _apply(self, result: SessionActionResult, now: float) -> None:
        self._dispatch_events(result)
        rearm = any(event.kind in _REARM_EVENTS for event in result.events)
        self._sync_sources(now, rearm=rearm)
        self._ui.publish_result(result)
        if self._resources.backgrounded and not self._clock.is_suspended:
            # A reset clears suspension while the client is still hidden.
            self._apply(self._clock.suspend(now), now)

    def _dispatch_events(self, result: SessionActionResult) -> None:
        for event in result.events:
            self._alerts.handle(event, backgrounded=self._resources.backgrounded)
            if event.kind == EVENT_TERMINATION_REQUESTED:
                self._logger.info("Termination requested from rest prompt.")
                self._resources.exit_code = 0

    def _sync_sources(self, now: float, *, rearm: bool) -> None:
        phase = self._clock.phase
        suspended = self._clock.is_suspended
        self._sync_source(
            self._resources.tick_source,
            wanted=not suspended and phase in COUNTDOWN_PHASES,
            now=now,
            rearm=rearm,
        )
        self._sync_source(
            self._resources.pulse_source,
            wanted=not suspended and phase == PHASE_ALARMING,
            now=now,
            rearm=rearm,
        )

    @staticmethod
    def _sync_source(
        source: RecurringSource,
        *,
        wanted: bool,
        now: float,
        rearm: bool,
    ) -> None:
        if not wanted:
            source.cancel()
        elif rearm or not source.is_active:
            source.arm(now)

    def _poll_intent(self) -> Optional[Intent]:
        timeout = _MAX_POLL_TIMEOUT_SECONDS
        now = self._now()
        for source in (self._resources.tick_source, self._resources.pulse_source):
            if source.next_due is not None:
                timeout = min(timeout, max(0.0, source.next_due - now))
        try:
            return self._resources.intent_queue.get(timeout=timeout)
        except Empty:
            return None

    def _shutdown(self) -> None:
        self._resources.tick_source.cancel()
        self._resources.pulse_source.cancel()
        self._alerts.on_reset()

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
