"""
Engine state transition validation.

Lifecycle: IDLE → RUNNING → (CANCELLING →) COMPLETED | CANCELLED | FAILED → IDLE

Terminal states are reachable only from RUNNING or CANCELLING.  Leaving a
terminal state is only allowed back to IDLE (acknowledge, or an implicit
re-arm by the next start).
"""
from __future__ import annotations

from typing import FrozenSet, Set, Tuple

from .errors import InvalidStateError
from .models import JobState

TERMINAL_STATES: FrozenSet[JobState] = frozenset({
    JobState.completed,
    JobState.cancelled,
    JobState.failed,
})

BUSY_STATES: FrozenSet[JobState] = frozenset({
    JobState.running,
    JobState.cancelling,
})

_TRANSITIONS: Set[Tuple[JobState, JobState]] = {
    (JobState.idle, JobState.running),
    (JobState.running, JobState.cancelling),

    # Natural completion or engine error
    (JobState.running, JobState.completed),
    (JobState.running, JobState.failed),

    # Cancellation observed at an increment boundary
    (JobState.running, JobState.cancelled),
    (JobState.cancelling, JobState.cancelled),

    # Cancel requested after the last boundary check: the run still finishes
    (JobState.cancelling, JobState.completed),
    (JobState.cancelling, JobState.failed),

    # Re-arm
    (JobState.completed, JobState.idle),
    (JobState.cancelled, JobState.idle),
    (JobState.failed, JobState.idle),
}


def is_terminal(state: JobState) -> bool:
    return state in TERMINAL_STATES


def is_busy(state: JobState) -> bool:
    return state in BUSY_STATES


def can_transition(from_state: JobState, to_state: JobState) -> bool:
    """Check if a state transition is legal."""
    return (from_state, to_state) in _TRANSITIONS


def validate_transition(from_state: JobState, to_state: JobState) -> None:
    """
    Validate a state transition, raising if illegal.

    Raises:
        InvalidStateError: If the transition is not allowed
    """
    if not can_transition(from_state, to_state):
        raise InvalidStateError(from_state.value, f"move to {to_state.value}")
