"""Status text builders for session snapshots and rejected actions."""

from __future__ import annotations

from pomodoro import SessionSnapshot
from pomodoro.constants import (
    PHASE_ALARMING,
    PHASE_AWAITING_REST_CONFIRMATION,
    PHASE_AWAITING_REST_PROMPT,
    PHASE_AWAITING_START_CONFIRMATION,
    PHASE_RESTING,
    PHASE_WORKING,
)


def format_duration(seconds: int) -> str:
    """Format a duration in seconds as `MM:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"


def phase_title(snapshot: SessionSnapshot) -> str:
    return "Break Time" if snapshot.is_break else "Work Time"


def session_status_message(snapshot: SessionSnapshot) -> str:
    """Build the one-line status shown under the countdown."""
    if snapshot.phase == PHASE_WORKING:
        return f"Working ({format_duration(snapshot.remaining_work_seconds)} remaining)"
    if snapshot.phase == PHASE_ALARMING:
        return "BREAK TIME: press both circles to start break"
    if snapshot.phase == PHASE_RESTING:
        return f"Resting ({format_duration(snapshot.remaining_break_seconds)} remaining)"
    if snapshot.phase == PHASE_AWAITING_REST_PROMPT:
        return (
            f"You've completed {snapshot.sessions_completed} consecutive work sessions. "
            "Would you like to take a walk or rest?"
        )
    if snapshot.phase == PHASE_AWAITING_REST_CONFIRMATION:
        return "Are you sure you've taken a walk or rested?"
    if snapshot.phase == PHASE_AWAITING_START_CONFIRMATION:
        return "Are you ready to dive back in and start the next session?"
    return "Ready"


def rejection_message(action: str, reason: str) -> str:
    readable_reason = reason.replace("_", " ")
    readable_action = action.replace("_", " ")
    return f"Cannot {readable_action}: {readable_reason}"
