"""Dual-touch engagement gate deriving both-held and released edges."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from .constants import (
    GATE_BOTH_HELD_ENTERED,
    GATE_RELEASED_FROM_BOTH,
    SIDE_LEFT,
    SIDE_RIGHT,
)

GateTransition = Literal["both_held_entered", "released_from_both"]


@dataclass(frozen=True)
class TouchGateState:
    """Immutable view of both touch points."""
    left_held: bool = False
    right_held: bool = False

    @property
    def both_held(self) -> bool:
        return self.left_held and self.right_held


class EngagementGate:
    """Tracks two touch contacts and reports edges of the combined signal.

    Transitions fire at most once per actual edge, so repeated identical
    touch events are harmless, and the final state does not depend on the
    order in which the two sides are updated.
    """

    def __init__(self) -> None:
        self._state = TouchGateState()

    @property
    def state(self) -> TouchGateState:
        return self._state

    @property
    def both_held(self) -> bool:
        return self._state.both_held

    def set_left(self, held: bool) -> Optional[GateTransition]:
        return self._apply(TouchGateState(bool(held), self._state.right_held))

    def set_right(self, held: bool) -> Optional[GateTransition]:
        return self._apply(TouchGateState(self._state.left_held, bool(held)))

    def set(self, side: str, held: bool) -> Optional[GateTransition]:
        if side == SIDE_LEFT:
            return self.set_left(held)
        if side == SIDE_RIGHT:
            return self.set_right(held)
        raise ValueError(f"Unknown touch side: {side!r}")

    def reset(self) -> None:
        """Release both contacts without reporting a transition."""
        self._state = TouchGateState()

    def hold_both(self) -> None:
        """Mark both contacts held without reporting a transition."""
        self._state = TouchGateState(True, True)

    def _apply(self, new_state: TouchGateState) -> Optional[GateTransition]:
        was_both = self._state.both_held
        self._state = new_state
        if new_state.both_held and not was_both:
            return GATE_BOTH_HELD_ENTERED
        if was_both and not new_state.both_held:
            return GATE_RELEASED_FROM_BOTH
        return None
