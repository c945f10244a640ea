from __future__ import annotations

from typing import Any, Optional, Protocol

from alerts import DeliveredAlert
from contracts.ui_protocol import EVENT_ERROR, EVENT_NOTIFICATION, EVENT_SESSION
from pomodoro import SessionActionResult, SessionSnapshot

from .messages import format_duration, phase_title, rejection_message, session_status_message


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_session_update(
        self,
        snapshot: SessionSnapshot,
        *,
        action: str,
        accepted: Optional[bool] = None,
        reason: str = "",
        events: tuple[str, ...] = (),
    ) -> None:
        payload: dict[str, Any] = {
            "action": action,
            "phase": snapshot.phase,
            "title": phase_title(snapshot),
            "display_seconds": snapshot.display_seconds,
            "display": format_duration(snapshot.display_seconds),
            "remaining_work_seconds": snapshot.remaining_work_seconds,
            "remaining_break_seconds": snapshot.remaining_break_seconds,
            "sessions_completed": snapshot.sessions_completed,
            "is_alarm_active": snapshot.is_alarm_active,
            "left_held": snapshot.left_held,
            "right_held": snapshot.right_held,
            "is_suspended": snapshot.is_suspended,
            "message": session_status_message(snapshot),
        }
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        if events:
            payload["events"] = list(events)
        self.publish(EVENT_SESSION, **payload)

    def publish_result(self, result: SessionActionResult) -> None:
        self.publish_session_update(
            result.snapshot,
            action=result.action,
            accepted=result.accepted,
            reason=result.reason,
            events=tuple(event.kind for event in result.events),
        )
        if not result.accepted:
            self.publish(
                EVENT_ERROR,
                message=rejection_message(result.action, result.reason),
            )

    def publish_notification(self, alert: DeliveredAlert) -> None:
        self.publish(
            EVENT_NOTIFICATION,
            alert_id=alert.alert_id,
            title=alert.title,
            body=alert.body,
            delivered_at=alert.delivered_at.isoformat(),
        )
