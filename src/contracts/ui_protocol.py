"""Web UI websocket event, intent, and lifecycle constants."""

from __future__ import annotations

# Websocket event types (server -> client)
EVENT_HELLO = "hello"
EVENT_SESSION = "session"
EVENT_NOTIFICATION = "notification"
EVENT_ERROR = "error"

# Intent types (client -> server)
INTENT_START = "start"
INTENT_TOUCH = "touch"
INTENT_REST_PROMPT = "rest_prompt"
INTENT_REST_CONFIRMATION = "rest_confirmation"
INTENT_START_CONFIRMATION = "start_confirmation"
INTENT_RESET = "reset"
INTENT_LIFECYCLE = "lifecycle"

# Lifecycle states reported by the client
LIFECYCLE_FOREGROUND = "foreground"
LIFECYCLE_BACKGROUND = "background"

# Replayed to clients that connect after the event was published, in this order.
# Notifications are one-shot and never replayed.
REPLAYED_EVENT_ORDER: tuple[str, ...] = (
    EVENT_ERROR,
    EVENT_SESSION,
)
