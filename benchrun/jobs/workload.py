"""Simulated bench workload, executed on a worker thread."""
from __future__ import annotations

import random
import threading
import time
from typing import Callable, Optional

from ..config import INCREMENT_SECONDS, SIMULATED_FAILURE_MESSAGE, SUCCESS_PROBABILITY
from .catalog import JobSpec
from .clock import Clock
from .errors import JobCancelled
from .models import JobOutcome


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    """Raise ``JobCancelled`` if the cancellation event is set."""
    if cancel_event is not None and cancel_event.is_set():
        raise JobCancelled("Test cancelled by operator")


def coin_flip(rng: Optional[random.Random] = None, probability: float = SUCCESS_PROBABILITY) -> bool:
    return (rng or random.Random()).random() < probability


def percent_after(increment: int, duration_seconds: int) -> int:
    """Worker-reported percent after zero-based *increment* (integer division)."""
    return (increment + 1) * 100 // duration_seconds


def execute_timed_job(
    spec: JobSpec,
    progress_callback: Optional[Callable[[int], None]] = None,
    cancel_event: Optional[threading.Event] = None,
    *,
    increment_seconds: float = INCREMENT_SECONDS,
    success_predicate: Optional[Callable[[], bool]] = None,
    wait: Optional[Callable[[float], object]] = None,
    rng: Optional[random.Random] = None,
    clock: Optional[Clock] = None,
) -> JobOutcome:
    """Run ``spec.duration_seconds`` increments and return the outcome.

    Each increment waits, checks for cancellation, then reports progress.
    The success predicate is evaluated exactly once, after the last
    increment.  Raises ``JobCancelled`` when the flag is observed; the
    increment in flight is abandoned without a report.

    *wait* defaults to ``cancel_event.wait`` so a cancellation request
    ends the current increment early.  *clock* stamps time-bearing payloads.
    """
    rng = rng or random.Random()
    if wait is None:
        wait = cancel_event.wait if cancel_event is not None else time.sleep

    duration = spec.duration_seconds
    for i in range(duration):
        wait(increment_seconds)
        _check_cancelled(cancel_event)
        if progress_callback:
            progress_callback(percent_after(i, duration))

    predicate = success_predicate or (lambda: coin_flip(rng))
    if not predicate():
        return JobOutcome.failure(SIMULATED_FAILURE_MESSAGE)
    return JobOutcome.success(spec.make_payload(rng, clock))
