"""User intent dataclasses and the websocket message parser that produces them."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping

from contracts.ui_protocol import (
    INTENT_LIFECYCLE,
    INTENT_REST_CONFIRMATION,
    INTENT_REST_PROMPT,
    INTENT_RESET,
    INTENT_START,
    INTENT_START_CONFIRMATION,
    INTENT_TOUCH,
    LIFECYCLE_BACKGROUND,
    LIFECYCLE_FOREGROUND,
)
from pomodoro.constants import CHOICE_EXIT, CHOICE_RESET, SIDE_LEFT, SIDE_RIGHT


class IntentParseError(ValueError):
    """Raised when a client message is not a valid intent."""


@dataclass(frozen=True)
class StartIntent:
    """Start the first work session from idle."""


@dataclass(frozen=True)
class TouchIntent:
    """Press or release of one touch circle."""
    side: str
    held: bool


@dataclass(frozen=True)
class RestPromptIntent:
    """Answer to the rest prompt shown after the configured session count."""
    choice: str


@dataclass(frozen=True)
class RestConfirmationIntent:
    confirmed: bool


@dataclass(frozen=True)
class StartConfirmationIntent:
    confirmed: bool


@dataclass(frozen=True)
class ResetIntent:
    """Full reset back to idle, optionally starting work immediately."""
    restart: bool = False


@dataclass(frozen=True)
class LifecycleIntent:
    """Client moved to the background or returned to the foreground."""
    state: str


@dataclass(frozen=True)
class ShutdownIntent:
    """Stop the runtime loop (posted by signal handlers)."""
    reason: str = "signal"


Intent = (
    StartIntent
    | TouchIntent
    | RestPromptIntent
    | RestConfirmationIntent
    | StartConfirmationIntent
    | ResetIntent
    | LifecycleIntent
    | ShutdownIntent
)


def parse_intent(message: str) -> Intent:
    """Parse a JSON websocket message into a typed intent."""
    try:
        raw = json.loads(message)
    except (TypeError, ValueError) as error:
        raise IntentParseError(f"Intent is not valid JSON: {error}") from error
    if not isinstance(raw, Mapping):
        raise IntentParseError("Intent must be a JSON object.")

    intent_type = raw.get("type")
    if intent_type == INTENT_START:
        return StartIntent()
    if intent_type == INTENT_TOUCH:
        side = _required_str(raw, "side")
        if side not in (SIDE_LEFT, SIDE_RIGHT):
            raise IntentParseError(f"touch.side must be left or right, got: {side}")
        return TouchIntent(side=side, held=_required_bool(raw, "held"))
    if intent_type == INTENT_REST_PROMPT:
        choice = _required_str(raw, "choice")
        if choice not in (CHOICE_RESET, CHOICE_EXIT):
            raise IntentParseError(f"rest_prompt.choice must be reset or exit, got: {choice}")
        return RestPromptIntent(choice=choice)
    if intent_type == INTENT_REST_CONFIRMATION:
        return RestConfirmationIntent(confirmed=_required_bool(raw, "confirmed"))
    if intent_type == INTENT_START_CONFIRMATION:
        return StartConfirmationIntent(confirmed=_required_bool(raw, "confirmed"))
    if intent_type == INTENT_RESET:
        restart = raw.get("restart", False)
        if not isinstance(restart, bool):
            raise IntentParseError("reset.restart must be a boolean.")
        return ResetIntent(restart=restart)
    if intent_type == INTENT_LIFECYCLE:
        state = _required_str(raw, "state")
        if state not in (LIFECYCLE_FOREGROUND, LIFECYCLE_BACKGROUND):
            raise IntentParseError(
                f"lifecycle.state must be foreground or background, got: {state}"
            )
        return LifecycleIntent(state=state)
    raise IntentParseError(f"Unknown intent type: {intent_type!r}")


def _required_str(raw: Mapping[str, Any], field: str) -> str:
    value = raw.get(field)
    if not isinstance(value, str) or not value.strip():
        raise IntentParseError(f"{raw.get('type')}.{field} must be a non-empty string.")
    return value.strip().lower()


def _required_bool(raw: Mapping[str, Any], field: str) -> bool:
    value = raw.get(field)
    if not isinstance(value, bool):
        raise IntentParseError(f"{raw.get('type')}.{field} must be a boolean.")
    return value
