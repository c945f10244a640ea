"""Cancellable recurring sources polled by the runtime loop."""

from __future__ import annotations

import logging
from typing import Optional


class RecurringSource:
    """Deadline-based repeating schedule owned by a single caller.

    Arming always cancels the previous schedule first, so one instance never
    has more than one active schedule. A cancelled source simply stops
    reporting firings.
    """

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        self._name = name
        self._interval_seconds = float(interval_seconds)
        self._logger = logger or logging.getLogger("runtime.sources")
        self._next_due: Optional[float] = None
        self._generation = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    @property
    def is_active(self) -> bool:
        return self._next_due is not None

    @property
    def generation(self) -> int:
        """Number of times this source has been armed."""
        return self._generation

    @property
    def next_due(self) -> Optional[float]:
        return self._next_due

    def arm(self, now: float) -> None:
        if self._next_due is not None:
            self.cancel()
        self._generation += 1
        self._next_due = now + self._interval_seconds
        self._logger.debug(
            "Armed %s source (generation=%d, interval=%.2fs)",
            self._name,
            self._generation,
            self._interval_seconds,
        )

    def cancel(self) -> None:
        if self._next_due is None:
            return
        self._next_due = None
        self._logger.debug("Cancelled %s source", self._name)

    def poll(self, now: float) -> int:
        """Return how many intervals elapsed since the last poll and reschedule."""
        if self._next_due is None or now < self._next_due:
            return 0
        fired = int((now - self._next_due) // self._interval_seconds) + 1
        self._next_due += fired * self._interval_seconds
        return fired
