"""Adapter turning session events into notification and alarm pulse requests."""

from __future__ import annotations

import logging
from typing import Optional

from pomodoro import SessionEvent
from pomodoro.constants import (
    EVENT_BREAK_ALARM_RESTARTED,
    EVENT_BREAK_ALARM_STARTED,
    EVENT_BREAK_COUNTDOWN_STARTED,
    EVENT_RESET,
    EVENT_WORK_STARTED,
)

from .contracts import (
    ALERT_BODY,
    ALERT_ID_BREAK_SESSION_START,
    ALERT_ID_WORK_SESSION_END,
    ALERT_TITLE,
    MIN_ALERT_DELAY_SECONDS,
    AudioDeviceLike,
    NotificationServiceLike,
)


class AlertScheduler:
    """Keeps at most one pending alert per purpose across any event sequence.

    Collaborator failures are logged and swallowed here; the session clock
    never observes them.
    """

    def __init__(
        self,
        *,
        notifications: Optional[NotificationServiceLike] = None,
        audio: Optional[AudioDeviceLike] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._notifications = notifications
        self._audio = audio
        self._logger = logger or logging.getLogger("alerts")
        self._pending_ids: set[str] = set()
        self._break_alert_armed = False

    @property
    def pending_alert_ids(self) -> frozenset[str]:
        return frozenset(self._pending_ids)

    @property
    def break_alert_armed(self) -> bool:
        return self._break_alert_armed

    def handle(self, event: SessionEvent, *, backgrounded: bool = False) -> None:
        if event.kind == EVENT_WORK_STARTED:
            self.on_work_started(event.duration_seconds or 0)
        elif event.kind in (EVENT_BREAK_ALARM_STARTED, EVENT_BREAK_ALARM_RESTARTED):
            self.on_break_alarm_started(backgrounded=backgrounded)
        elif event.kind == EVENT_BREAK_COUNTDOWN_STARTED:
            self.on_break_countdown_started()
        elif event.kind == EVENT_RESET:
            self.on_reset()

    def on_work_started(self, duration_seconds: int) -> None:
        self._cancel_all()
        self._break_alert_armed = False
        self._schedule(ALERT_ID_WORK_SESSION_END, max(0, int(duration_seconds)))

    def on_break_alarm_started(self, *, backgrounded: bool) -> None:
        if backgrounded:
            self._schedule_break_alert()
            return
        # The in-app pulse covers the foreground; a later backgrounding
        # during this alarm still gets exactly one alert.
        self._break_alert_armed = True

    def on_backgrounded(self) -> None:
        if self._break_alert_armed:
            self._schedule_break_alert()

    def on_break_countdown_started(self) -> None:
        self._break_alert_armed = False
        if ALERT_ID_BREAK_SESSION_START in self._pending_ids:
            self._cancel(ALERT_ID_BREAK_SESSION_START)

    def on_reset(self) -> None:
        self._cancel_all()
        self._break_alert_armed = False

    def pulse(self, *, gate_engaged: bool) -> bool:
        """Play one alarm pulse unless both touch points are held."""
        if gate_engaged or self._audio is None:
            return False
        try:
            self._audio.play_alert_pulse()
        except Exception as error:
            self._logger.error("Alert pulse playback failed: %s", error)
            return False
        return True

    def _schedule_break_alert(self) -> None:
        if ALERT_ID_BREAK_SESSION_START in self._pending_ids:
            return
        self._break_alert_armed = False
        self._schedule(ALERT_ID_BREAK_SESSION_START, MIN_ALERT_DELAY_SECONDS)

    def _schedule(self, alert_id: str, delay_seconds: int) -> None:
        # Ids are marked pending even if delivery fails so a rejected request
        # is not retried in a loop.
        self._pending_ids.add(alert_id)
        if self._notifications is None:
            return
        try:
            self._notifications.schedule_alert(
                alert_id,
                delay_seconds,
                ALERT_TITLE,
                ALERT_BODY,
            )
        except Exception as error:
            self._logger.error("Scheduling alert %s failed: %s", alert_id, error)
            return
        self._logger.info("Alert scheduled: id=%s delay=%ss", alert_id, delay_seconds)

    def _cancel(self, alert_id: str) -> None:
        self._pending_ids.discard(alert_id)
        if self._notifications is None:
            return
        try:
            self._notifications.cancel_alert(alert_id)
        except Exception as error:
            self._logger.error("Cancelling alert %s failed: %s", alert_id, error)

    def _cancel_all(self) -> None:
        self._pending_ids.clear()
        if self._notifications is None:
            return
        try:
            self._notifications.cancel_all_pending()
        except Exception as error:
            self._logger.error("Cancelling pending alerts failed: %s", error)
