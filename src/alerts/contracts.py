"""Collaborator protocols for audible pulses and deferred notifications."""

from __future__ import annotations

from typing import Protocol

ALERT_ID_WORK_SESSION_END = "workSessionEnd"
ALERT_ID_BREAK_SESSION_START = "breakSessionStart"

ALERT_TITLE = "Break time!"
ALERT_BODY = (
    "The alarm is sounding. Return to the app and hold both circles to start your break."
)

MIN_ALERT_DELAY_SECONDS = 1


class AudioDeviceLike(Protocol):
    """Fire-and-forget audio output for a single alarm pulse."""
    def play_alert_pulse(self) -> None:
        ...


class NotificationServiceLike(Protocol):
    """Deferred notification delivery keyed by alert id."""
    def schedule_alert(
        self,
        alert_id: str,
        delay_seconds: float,
        title: str,
        body: str,
    ) -> None:
        ...

    def cancel_alert(self, alert_id: str) -> None:
        ...

    def cancel_all_pending(self) -> None:
        ...
