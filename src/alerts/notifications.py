"""In-process notification service delivering alerts after a delay."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol


@dataclass(frozen=True)
class DeliveredAlert:
    """Alert payload handed to the delivery callback when its delay elapses."""
    alert_id: str
    title: str
    body: str
    delivered_at: datetime


class TimerLike(Protocol):
    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], None]], TimerLike]


def _default_timer_factory(delay_seconds: float, callback: Callable[[], None]) -> TimerLike:
    timer = threading.Timer(delay_seconds, callback)
    timer.daemon = True
    return timer


class DeferredNotificationService:
    """Thread-backed notification scheduler where a repeated id supersedes the old one."""

    def __init__(
        self,
        deliver: Callable[[DeliveredAlert], None],
        *,
        timer_factory: Optional[TimerFactory] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._deliver = deliver
        self._timer_factory = timer_factory or _default_timer_factory
        self._now = now_fn or (lambda: datetime.now(timezone.utc))
        self._logger = logger or logging.getLogger("alerts.notifications")
        self._lock = threading.Lock()
        self._timers: dict[str, TimerLike] = {}

    @property
    def pending_ids(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._timers)

    def schedule_alert(
        self,
        alert_id: str,
        delay_seconds: float,
        title: str,
        body: str,
    ) -> None:
        timer: Optional[TimerLike] = None

        def fire() -> None:
            with self._lock:
                if self._timers.get(alert_id) is not timer:
                    return
                del self._timers[alert_id]
            self._fire(alert_id, title, body)

        timer = self._timer_factory(max(0.0, float(delay_seconds)), fire)
        with self._lock:
            previous = self._timers.pop(alert_id, None)
            self._timers[alert_id] = timer
        if previous is not None:
            previous.cancel()
        timer.start()

    def cancel_alert(self, alert_id: str) -> None:
        with self._lock:
            timer = self._timers.pop(alert_id, None)
        if timer is not None:
            timer.cancel()
            self._logger.debug("Cancelled pending alert %s", alert_id)

    def cancel_all_pending(self) -> None:
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        if timers:
            self._logger.debug("Cancelled %d pending alerts", len(timers))

    def _fire(self, alert_id: str, title: str, body: str) -> None:
        alert = DeliveredAlert(
            alert_id=alert_id,
            title=title,
            body=body,
            delivered_at=self._now(),
        )
        self._logger.info("Delivering alert %s: %s", alert_id, title)
        try:
            self._deliver(alert)
        except Exception as error:
            self._logger.error("Alert delivery failed for %s: %s", alert_id, error)
