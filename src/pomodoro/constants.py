"""Phase, action, event, and reason constants used by the session state machine."""

from __future__ import annotations

DEFAULT_WORK_SECONDS = 25 * 60
DEFAULT_BREAK_SECONDS = 5 * 60
DEFAULT_LONG_BREAK_SECONDS = 15 * 60
DEFAULT_LONG_BREAK_EVERY = 4
DEFAULT_SESSIONS_BEFORE_REST_PROMPT = 8

PHASE_IDLE = "idle"
PHASE_WORKING = "working"
PHASE_ALARMING = "alarming"
PHASE_RESTING = "resting"
PHASE_AWAITING_REST_PROMPT = "awaiting_rest_prompt"
PHASE_AWAITING_REST_CONFIRMATION = "awaiting_rest_confirmation"
PHASE_AWAITING_START_CONFIRMATION = "awaiting_start_confirmation"

BREAK_PHASES: frozenset[str] = frozenset({PHASE_ALARMING, PHASE_RESTING})
COUNTDOWN_PHASES: frozenset[str] = frozenset({PHASE_WORKING, PHASE_RESTING})

SIDE_LEFT = "left"
SIDE_RIGHT = "right"

GATE_BOTH_HELD_ENTERED = "both_held_entered"
GATE_RELEASED_FROM_BOTH = "released_from_both"

CHOICE_RESET = "reset"
CHOICE_EXIT = "exit"

ACTION_START_WORK = "start_work"
ACTION_TICK = "tick"
ACTION_GATE_BOTH_HELD = "gate_both_held"
ACTION_GATE_RELEASED = "gate_released"
ACTION_TOUCH = "touch"
ACTION_RESOLVE_REST_PROMPT = "resolve_rest_prompt"
ACTION_RESOLVE_REST_CONFIRMATION = "resolve_rest_confirmation"
ACTION_RESOLVE_START_CONFIRMATION = "resolve_start_confirmation"
ACTION_RESET_ALL = "reset_all"
ACTION_SUSPEND = "suspend"
ACTION_RESUME = "resume"
ACTION_SYNC = "sync"

EVENT_WORK_STARTED = "work_started"
EVENT_WORK_COMPLETED = "work_completed"
EVENT_BREAK_ALARM_STARTED = "break_alarm_started"
EVENT_BREAK_COUNTDOWN_STARTED = "break_countdown_started"
EVENT_BREAK_ALARM_RESTARTED = "break_alarm_restarted"
EVENT_REST_PROMPT_REQUESTED = "rest_prompt_requested"
EVENT_TERMINATION_REQUESTED = "termination_requested"
EVENT_RESET = "reset"

REASON_OK = "ok"
REASON_STARTED = "started"
REASON_TICK = "tick"
REASON_NO_ELAPSED = "no_elapsed"
REASON_NO_COUNTDOWN = "no_countdown"
REASON_GATE_UPDATED = "gate_updated"
REASON_RESET = "reset"
REASON_SUSPENDED = "suspended"
REASON_RESUMED = "resumed"
REASON_STARTUP = "startup"
REASON_NOT_IDLE = "not_idle"
REASON_NOT_ALARMING = "not_alarming"
REASON_NOT_RESTING = "not_resting"
REASON_NOT_AWAITING_REST_PROMPT = "not_awaiting_rest_prompt"
REASON_NOT_AWAITING_REST_CONFIRMATION = "not_awaiting_rest_confirmation"
REASON_NOT_AWAITING_START_CONFIRMATION = "not_awaiting_start_confirmation"
REASON_ALREADY_SUSPENDED = "already_suspended"
REASON_NOT_SUSPENDED = "not_suspended"
REASON_INVALID_CHOICE = "invalid_choice"
REASON_INVALID_SIDE = "invalid_side"
