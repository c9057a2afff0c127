"""Bench job error types.

All errors inherit from ``BenchError`` so callers can catch the family.
A randomly failed test is *not* an error: it is a normal ``failed``
outcome (see ``workload.py``).
"""
from __future__ import annotations


class BenchError(Exception):
    """Base exception for all bench-engine failures."""


class InvalidStateError(BenchError):
    """Raised when an operation is not allowed in the engine's current state."""

    def __init__(self, current_state: str, operation: str):
        self.current_state = current_state
        self.operation = operation
        super().__init__(f"Cannot {operation} while engine is {current_state}")


class ConfigurationError(BenchError):
    """Raised when a test variant has no catalog entry.

    A correctly populated catalog never produces this; treat it as a
    programming defect.
    """


class JobCancelled(BenchError):
    """Raised by the workload when cooperative cancellation is detected."""


class RunNotFoundError(BenchError):
    """Requested run ID does not exist in the history store."""

    def __init__(self, run_id: str):
        self.run_id = run_id
        super().__init__(f"Run '{run_id}' not found")
