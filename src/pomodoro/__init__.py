from .gate import EngagementGate, GateTransition, TouchGateState
from .service import (
    InvalidTransitionError,
    RestPromptChoice,
    SessionActionResult,
    SessionClock,
    SessionConfig,
    SessionEvent,
    SessionPhase,
    SessionSnapshot,
)

__all__ = [
    "EngagementGate",
    "GateTransition",
    "InvalidTransitionError",
    "RestPromptChoice",
    "SessionActionResult",
    "SessionClock",
    "SessionConfig",
    "SessionEvent",
    "SessionPhase",
    "SessionSnapshot",
    "TouchGateState",
]
