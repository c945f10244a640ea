"""Single-threaded work/break session state machine with wall-clock reconciliation."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from .constants import (
    ACTION_GATE_BOTH_HELD,
    ACTION_GATE_RELEASED,
    ACTION_RESET_ALL,
    ACTION_RESOLVE_REST_CONFIRMATION,
    ACTION_RESOLVE_REST_PROMPT,
    ACTION_RESOLVE_START_CONFIRMATION,
    ACTION_RESUME,
    ACTION_START_WORK,
    ACTION_SUSPEND,
    ACTION_TICK,
    ACTION_TOUCH,
    BREAK_PHASES,
    CHOICE_EXIT,
    CHOICE_RESET,
    COUNTDOWN_PHASES,
    DEFAULT_BREAK_SECONDS,
    DEFAULT_LONG_BREAK_EVERY,
    DEFAULT_LONG_BREAK_SECONDS,
    DEFAULT_SESSIONS_BEFORE_REST_PROMPT,
    DEFAULT_WORK_SECONDS,
    EVENT_BREAK_ALARM_RESTARTED,
    EVENT_BREAK_ALARM_STARTED,
    EVENT_BREAK_COUNTDOWN_STARTED,
    EVENT_REST_PROMPT_REQUESTED,
    EVENT_RESET,
    EVENT_TERMINATION_REQUESTED,
    EVENT_WORK_COMPLETED,
    EVENT_WORK_STARTED,
    GATE_BOTH_HELD_ENTERED,
    GATE_RELEASED_FROM_BOTH,
    PHASE_ALARMING,
    PHASE_AWAITING_REST_CONFIRMATION,
    PHASE_AWAITING_REST_PROMPT,
    PHASE_AWAITING_START_CONFIRMATION,
    PHASE_IDLE,
    PHASE_RESTING,
    PHASE_WORKING,
    REASON_ALREADY_SUSPENDED,
    REASON_GATE_UPDATED,
    REASON_INVALID_CHOICE,
    REASON_INVALID_SIDE,
    REASON_NO_COUNTDOWN,
    REASON_NO_ELAPSED,
    REASON_NOT_ALARMING,
    REASON_NOT_AWAITING_REST_CONFIRMATION,
    REASON_NOT_AWAITING_REST_PROMPT,
    REASON_NOT_AWAITING_START_CONFIRMATION,
    REASON_NOT_IDLE,
    REASON_NOT_RESTING,
    REASON_NOT_SUSPENDED,
    REASON_OK,
    REASON_RESET,
    REASON_RESUMED,
    REASON_STARTED,
    REASON_SUSPENDED,
    REASON_TICK,
    SIDE_LEFT,
    SIDE_RIGHT,
)
from .gate import EngagementGate

SessionPhase = Literal[
    "idle",
    "working",
    "alarming",
    "resting",
    "awaiting_rest_prompt",
    "awaiting_rest_confirmation",
    "awaiting_start_confirmation",
]
RestPromptChoice = Literal["reset", "exit"]


class InvalidTransitionError(RuntimeError):
    """Raised in strict mode when an operation is not valid in the current phase."""

    def __init__(self, action: str, phase: str, reason: str):
        super().__init__(f"{action} rejected in phase {phase}: {reason}")
        self.action = action
        self.phase = phase
        self.reason = reason


@dataclass(frozen=True)
class SessionConfig:
    """Immutable durations and cadence for the work/break cycle."""
    work_duration_seconds: int = DEFAULT_WORK_SECONDS
    break_duration_seconds: int = DEFAULT_BREAK_SECONDS
    long_break_duration_seconds: int = DEFAULT_LONG_BREAK_SECONDS
    long_break_every: int = DEFAULT_LONG_BREAK_EVERY
    sessions_before_rest_prompt: int = DEFAULT_SESSIONS_BEFORE_REST_PROMPT

    def __post_init__(self) -> None:
        for name in (
            "work_duration_seconds",
            "break_duration_seconds",
            "long_break_duration_seconds",
            "long_break_every",
            "sessions_before_rest_prompt",
        ):
            if int(getattr(self, name)) <= 0:
                raise ValueError(f"{name} must be greater than zero")

    def break_duration_for(self, sessions_completed: int) -> int:
        """Return the long break every `long_break_every` sessions, else the short one."""
        if sessions_completed % self.long_break_every == 0:
            return self.long_break_duration_seconds
        return self.break_duration_seconds


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable session view consumed by the UI and runtime publishers."""
    phase: SessionPhase
    display_seconds: int
    remaining_work_seconds: int
    remaining_break_seconds: int
    sessions_completed: int
    is_alarm_active: bool
    left_held: bool = False
    right_held: bool = False
    is_suspended: bool = False

    @property
    def is_break(self) -> bool:
        return self.phase in BREAK_PHASES


@dataclass(frozen=True)
class SessionEvent:
    """Phase-transition notification consumed by the alert scheduler."""
    kind: str
    duration_seconds: Optional[int] = None


@dataclass(frozen=True)
class SessionActionResult:
    """Result envelope returned by every session clock operation."""
    action: str
    accepted: bool
    reason: str
    snapshot: SessionSnapshot
    events: tuple[SessionEvent, ...] = ()

    def has_event(self, kind: str) -> bool:
        return any(event.kind == kind for event in self.events)


class SessionClock:
    """Work/alarm/rest/prompt state machine driven by explicit timestamps.

    Elapsed time is always derived from wall-clock deltas against the last
    tick baseline, so a foreground tick and a resume after suspension go
    through the same reconciliation path. The clock is not thread-safe; all
    calls are expected from one scheduling context.
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        *,
        gate: Optional[EngagementGate] = None,
        strict: bool = False,
        now_fn: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config or SessionConfig()
        self._gate = gate or EngagementGate()
        self._strict = strict
        self._now_fn = now_fn
        self._logger = logger or logging.getLogger("pomodoro")

        self._phase: SessionPhase = PHASE_IDLE
        self._remaining_work_seconds = self._config.work_duration_seconds
        self._remaining_break_seconds = self._config.break_duration_seconds
        self._sessions_completed = 0
        self._last_tick_timestamp: Optional[float] = None
        self._suspended_at: Optional[float] = None
        self._pending_events: list[SessionEvent] = []

    @property
    def config(self) -> SessionConfig:
        return self._config

    @property
    def gate(self) -> EngagementGate:
        return self._gate

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def sessions_completed(self) -> int:
        return self._sessions_completed

    @property
    def is_suspended(self) -> bool:
        return self._suspended_at is not None

    def snapshot(self) -> SessionSnapshot:
        is_break = self._phase in BREAK_PHASES
        gate_state = self._gate.state
        return SessionSnapshot(
            phase=self._phase,
            display_seconds=(
                self._remaining_break_seconds if is_break else self._remaining_work_seconds
            ),
            remaining_work_seconds=self._remaining_work_seconds,
            remaining_break_seconds=self._remaining_break_seconds,
            sessions_completed=self._sessions_completed,
            is_alarm_active=self._phase == PHASE_ALARMING,
            left_held=gate_state.left_held,
            right_held=gate_state.right_held,
            is_suspended=self.is_suspended,
        )

    def start_work(self, now: Optional[float] = None) -> SessionActionResult:
        now = self._resolve_now(now)
        if self._phase != PHASE_IDLE:
            return self._reject(ACTION_START_WORK, REASON_NOT_IDLE)

        self._start_work(now)
        return self._result(ACTION_START_WORK, True, REASON_STARTED)

    def tick(self, now: Optional[float] = None) -> SessionActionResult:
        now = self._resolve_now(now)
        if self._suspended_at is not None:
            return self._reject(ACTION_TICK, REASON_SUSPENDED)
        if self._phase not in COUNTDOWN_PHASES:
            return self._result(ACTION_TICK, True, REASON_NO_COUNTDOWN)

        if self._phase == PHASE_RESTING and not self._gate.both_held:
            # Unengaged time never counts as rest.
            self._abort_break(now)
            return self._result(ACTION_TICK, True, REASON_TICK)

        elapsed = self._consume_elapsed(now)
        if elapsed <= 0:
            return self._result(ACTION_TICK, True, REASON_NO_ELAPSED)

        if self._phase == PHASE_WORKING:
            self._advance_work(elapsed, now)
        else:
            self._advance_break(elapsed, now)
        return self._result(ACTION_TICK, True, REASON_TICK)

    def touch(
        self,
        side: str,
        held: bool,
        now: Optional[float] = None,
    ) -> SessionActionResult:
        """Route a touch intent through the gate and act on the derived edge."""
        now = self._resolve_now(now)
        if side not in (SIDE_LEFT, SIDE_RIGHT):
            return self._reject(ACTION_TOUCH, REASON_INVALID_SIDE)

        transition = self._gate.set(side, held)
        if self._suspended_at is None:
            if transition == GATE_BOTH_HELD_ENTERED and self._phase == PHASE_ALARMING:
                self._begin_break(now)
            elif transition == GATE_RELEASED_FROM_BOTH and self._phase == PHASE_RESTING:
                self._abort_break(now)
        return self._result(ACTION_TOUCH, True, REASON_GATE_UPDATED)

    def on_gate_both_held(self, now: Optional[float] = None) -> SessionActionResult:
        now = self._resolve_now(now)
        if self._phase != PHASE_ALARMING:
            return self._reject(ACTION_GATE_BOTH_HELD, REASON_NOT_ALARMING)

        if not self._gate.both_held:
            self._gate.hold_both()
        self._begin_break(now)
        return self._result(ACTION_GATE_BOTH_HELD, True, REASON_OK)

    def on_gate_released(self, now: Optional[float] = None) -> SessionActionResult:
        now = self._resolve_now(now)
        if self._phase != PHASE_RESTING:
            return self._reject(ACTION_GATE_RELEASED, REASON_NOT_RESTING)

        if self._gate.both_held:
            self._gate.reset()
        self._abort_break(now)
        return self._result(ACTION_GATE_RELEASED, True, REASON_OK)

    def resolve_rest_prompt(self, choice: str) -> SessionActionResult:
        if self._phase != PHASE_AWAITING_REST_PROMPT:
            return self._reject(ACTION_RESOLVE_REST_PROMPT, REASON_NOT_AWAITING_REST_PROMPT)

        normalized = (choice or "").strip().lower()
        if normalized == CHOICE_RESET:
            self._set_phase(PHASE_AWAITING_REST_CONFIRMATION)
            return self._result(ACTION_RESOLVE_REST_PROMPT, True, REASON_OK)
        if normalized == CHOICE_EXIT:
            self._logger.info(
                "Exit requested after %d sessions", self._sessions_completed
            )
            self._emit(EVENT_TERMINATION_REQUESTED)
            return self._result(ACTION_RESOLVE_REST_PROMPT, True, REASON_OK)
        return self._reject(ACTION_RESOLVE_REST_PROMPT, REASON_INVALID_CHOICE)

    def resolve_rest_confirmation(self, confirmed: bool) -> SessionActionResult:
        if self._phase != PHASE_AWAITING_REST_CONFIRMATION:
            return self._reject(
                ACTION_RESOLVE_REST_CONFIRMATION,
                REASON_NOT_AWAITING_REST_CONFIRMATION,
            )

        if confirmed:
            self._set_phase(PHASE_AWAITING_START_CONFIRMATION)
        else:
            self._set_phase(PHASE_AWAITING_REST_PROMPT)
        return self._result(ACTION_RESOLVE_REST_CONFIRMATION, True, REASON_OK)

    def resolve_start_confirmation(
        self,
        confirmed: bool,
        now: Optional[float] = None,
    ) -> SessionActionResult:
        now = self._resolve_now(now)
        if self._phase != PHASE_AWAITING_START_CONFIRMATION:
            return self._reject(
                ACTION_RESOLVE_START_CONFIRMATION,
                REASON_NOT_AWAITING_START_CONFIRMATION,
            )

        if confirmed:
            self._reset_all()
            self._start_work(now)
            return self._result(ACTION_RESOLVE_START_CONFIRMATION, True, REASON_STARTED)

        self._set_phase(PHASE_AWAITING_REST_CONFIRMATION)
        return self._result(ACTION_RESOLVE_START_CONFIRMATION, True, REASON_OK)

    def reset_all(
        self,
        now: Optional[float] = None,
        *,
        restart: bool = False,
    ) -> SessionActionResult:
        now = self._resolve_now(now)
        self._reset_all()
        if restart:
            self._start_work(now)
            return self._result(ACTION_RESET_ALL, True, REASON_STARTED)
        return self._result(ACTION_RESET_ALL, True, REASON_RESET)

    def suspend(self, now: Optional[float] = None) -> SessionActionResult:
        now = self._resolve_now(now)
        if self._suspended_at is not None:
            return self._reject(ACTION_SUSPEND, REASON_ALREADY_SUSPENDED)

        self._suspended_at = now
        self._logger.info("Session suspended: phase=%s", self._phase)
        return self._result(ACTION_SUSPEND, True, REASON_SUSPENDED)

    def resume(self, now: Optional[float] = None) -> SessionActionResult:
        now = self._resolve_now(now)
        suspended_at = self._suspended_at
        if suspended_at is None:
            return self._reject(ACTION_RESUME, REASON_NOT_SUSPENDED)

        self._suspended_at = None
        self._logger.info(
            "Session resumed: phase=%s suspended_for=%.1fs",
            self._phase,
            max(0.0, now - suspended_at),
        )

        if self._phase == PHASE_WORKING:
            elapsed = self._consume_elapsed(now)
            if elapsed > 0:
                self._advance_work(elapsed, now)
        elif self._phase in BREAK_PHASES:
            # Engagement cannot be asserted while suspended.
            self._gate.reset()
            self._enter_alarm(now)
        return self._result(ACTION_RESUME, True, REASON_RESUMED)

    def _start_work(self, now: float) -> None:
        self._set_phase(PHASE_WORKING)
        self._remaining_work_seconds = self._config.work_duration_seconds
        self._remaining_break_seconds = self._config.break_duration_for(
            self._sessions_completed + 1
        )
        self._gate.reset()
        self._last_tick_timestamp = now
        self._emit(EVENT_WORK_STARTED, self._remaining_work_seconds)
        self._logger.info(
            "Work started: session=%d duration=%ss",
            self._sessions_completed + 1,
            self._remaining_work_seconds,
        )

    def _advance_work(self, elapsed: int, now: float) -> None:
        self._remaining_work_seconds = max(0, self._remaining_work_seconds - elapsed)
        if self._remaining_work_seconds > 0:
            return

        self._sessions_completed += 1
        self._emit(EVENT_WORK_COMPLETED)
        self._logger.info("Work completed: sessions=%d", self._sessions_completed)
        if self._sessions_completed == self._config.sessions_before_rest_prompt:
            self._set_phase(PHASE_AWAITING_REST_PROMPT)
            self._emit(EVENT_REST_PROMPT_REQUESTED)
            return
        self._enter_alarm(now)

    def _enter_alarm(self, now: float) -> None:
        self._set_phase(PHASE_ALARMING)
        self._remaining_break_seconds = self._config.break_duration_for(
            self._sessions_completed
        )
        self._last_tick_timestamp = now
        self._emit(EVENT_BREAK_ALARM_STARTED, self._remaining_break_seconds)

    def _begin_break(self, now: float) -> None:
        self._set_phase(PHASE_RESTING)
        self._last_tick_timestamp = now
        self._emit(EVENT_BREAK_COUNTDOWN_STARTED, self._remaining_break_seconds)

    def _abort_break(self, now: float) -> None:
        forfeited = self._remaining_break_seconds
        self._remaining_break_seconds = self._config.break_duration_for(
            self._sessions_completed
        )
        self._set_phase(PHASE_ALARMING)
        self._last_tick_timestamp = now
        self._emit(EVENT_BREAK_ALARM_RESTARTED, self._remaining_break_seconds)
        self._logger.info(
            "Break aborted: remaining=%ss restarted_at=%ss",
            forfeited,
            self._remaining_break_seconds,
        )

    def _advance_break(self, elapsed: int, now: float) -> None:
        self._remaining_break_seconds = max(0, self._remaining_break_seconds - elapsed)
        if self._remaining_break_seconds > 0:
            return
        self._logger.info("Break completed: sessions=%d", self._sessions_completed)
        self._start_work(now)

    def _reset_all(self) -> None:
        self._set_phase(PHASE_IDLE)
        self._remaining_work_seconds = self._config.work_duration_seconds
        self._remaining_break_seconds = self._config.break_duration_seconds
        self._sessions_completed = 0
        self._gate.reset()
        self._last_tick_timestamp = None
        self._suspended_at = None
        self._emit(EVENT_RESET)

    def _consume_elapsed(self, now: float) -> int:
        last = self._last_tick_timestamp
        if last is None or now < last:
            self._last_tick_timestamp = now
            return 0

        elapsed = int(math.floor(now - last))
        if elapsed <= 0:
            return 0
        # Keep the sub-second remainder for the next tick.
        self._last_tick_timestamp = last + elapsed
        return elapsed

    def _set_phase(self, phase: SessionPhase) -> None:
        if phase != self._phase:
            self._logger.debug("Phase %s -> %s", self._phase, phase)
        self._phase = phase

    def _emit(self, kind: str, duration_seconds: Optional[int] = None) -> None:
        self._pending_events.append(SessionEvent(kind, duration_seconds))

    def _resolve_now(self, now: Optional[float]) -> float:
        return float(self._now_fn() if now is None else now)

    def _reject(self, action: str, reason: str) -> SessionActionResult:
        if self._strict:
            self._pending_events.clear()
            raise InvalidTransitionError(action, self._phase, reason)
        self._logger.warning(
            "Rejected %s in phase %s: %s", action, self._phase, reason
        )
        return self._result(action, False, reason)

    def _result(self, action: str, accepted: bool, reason: str) -> SessionActionResult:
        events = tuple(self._pending_events)
        self._pending_events.clear()
        return SessionActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self.snapshot(),
            events=events,
        )
