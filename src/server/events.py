"""Outgoing websocket event serialization and the replay journal for late clients."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from contracts.ui_protocol import EVENT_ERROR, EVENT_SESSION, REPLAYED_EVENT_ORDER

NowFn = Callable[[], datetime]


def make_event(
    event_type: str,
    *,
    now_fn: Optional[NowFn] = None,
    **payload: Any,
) -> str:
    """Serialize an event payload with type and UTC timestamp."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )


class EventJournal:
    """Serializes published events and keeps the latest replayable one per type.

    An accepted session update supersedes any remembered error, so a client
    that reconnects never sees an error that was already resolved.
    """

    def __init__(self, *, now_fn: Optional[NowFn] = None):
        self._now_fn = now_fn
        self._lock = threading.Lock()
        self._latest: dict[str, tuple[dict[str, Any], str]] = {}

    def record(self, event_type: str, payload: Mapping[str, Any]) -> str:
        message = make_event(event_type, now_fn=self._now_fn, **payload)
        if event_type not in REPLAYED_EVENT_ORDER:
            return message

        with self._lock:
            self._latest[event_type] = (dict(payload), message)
            if event_type == EVENT_SESSION and payload.get("accepted", True):
                self._latest.pop(EVENT_ERROR, None)
        return message

    def replay(self) -> list[str]:
        with self._lock:
            return [
                self._latest[event_type][1]
                for event_type in REPLAYED_EVENT_ORDER
                if event_type in self._latest
            ]

    def latest_payload(self, event_type: str) -> Optional[dict[str, Any]]:
        with self._lock:
            entry = self._latest.get(event_type)
        return dict(entry[0]) if entry is not None else None
