"""Bench job data models."""
from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class JobVariant(str, enum.Enum):
    """The selectable bench tests."""

    test_1 = "test_1"
    test_2 = "test_2"
    test_3 = "test_3"

    @classmethod
    def from_index(cls, index: int) -> "JobVariant":
        """Map the operator's zero-based list position to a variant.

        Raises ``ValueError`` for positions outside the list.
        """
        members = list(cls)
        if not 0 <= index < len(members):
            raise ValueError(f"No test at position {index}")
        return members[index]

    @property
    def label(self) -> str:
        return f"Test {list(type(self)).index(self) + 1}"


class JobState(str, enum.Enum):
    idle = "idle"
    running = "running"
    cancelling = "cancelling"
    completed = "completed"
    cancelled = "cancelled"
    failed = "failed"


# ── Payloads ─────────────────────────────────────────────────────────
# One fixed field set per variant; the ``variant`` tag selects the model.


class _PayloadBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def _fields(self) -> List[Any]:
        return []

    def __str__(self) -> str:
        parts = [f"Data{i} = {value}" for i, value in enumerate(self._fields(), start=1)]
        return "{ " + ", ".join(parts) + " }"


class CounterPayload(_PayloadBase):
    """Result body of ``test_1``: a small counter and the generation time."""

    variant: Literal["test_1"] = "test_1"
    data1: int = Field(ge=0, lt=100)
    data2: datetime

    def _fields(self) -> List[Any]:
        return [self.data1, self.data2.isoformat(timespec="seconds")]


class RatioPayload(_PayloadBase):
    """Result body of ``test_2``: a unit-interval ratio and a unique tag."""

    variant: Literal["test_2"] = "test_2"
    data1: float = Field(ge=0.0, lt=1.0)
    data2: UUID

    def _fields(self) -> List[Any]:
        return [self.data1, self.data2]


class LabelPayload(_PayloadBase):
    """Result body of ``test_3``: a digit, a fixed label and a reading."""

    variant: Literal["test_3"] = "test_3"
    data1: int = Field(ge=1, lt=10)
    data2: str = Field(min_length=1)
    data3: int = Field(ge=0, lt=1000)

    def _fields(self) -> List[Any]:
        return [self.data1, self.data2, self.data3]


Payload = Annotated[
    Union[CounterPayload, RatioPayload, LabelPayload],
    Field(discriminator="variant"),
]


class JobOutcome(BaseModel):
    """Immutable result of one naturally completed run.

    ``payload`` is present iff ``succeeded``; ``error_message`` is non-empty
    iff not ``succeeded``.  Cancelled runs have no outcome at all.
    """

    model_config = ConfigDict(frozen=True)

    succeeded: bool
    error_message: str = ""
    payload: Optional[Payload] = None

    @model_validator(mode="after")
    def _check_exclusive(self) -> "JobOutcome":
        if self.succeeded:
            if self.payload is None:
                raise ValueError("a successful outcome requires a payload")
            if self.error_message:
                raise ValueError("a successful outcome must not carry an error message")
        else:
            if self.payload is not None:
                raise ValueError("a failed outcome must not carry a payload")
            if not self.error_message:
                raise ValueError("a failed outcome requires an error message")
        return self

    @classmethod
    def success(cls, payload: Any) -> "JobOutcome":
        return cls(succeeded=True, payload=payload)

    @classmethod
    def failure(cls, error_message: str) -> "JobOutcome":
        return cls(succeeded=False, error_message=error_message)


class ProgressSnapshot(BaseModel):
    """Point-in-time view of both progress signals and the display value."""

    model_config = ConfigDict(frozen=True)

    reported_percent: int = Field(default=0, ge=0, le=100)
    estimated_percent: int = Field(default=0, ge=0, le=100)
    display_percent: int = Field(default=0, ge=0, le=100)
    elapsed_seconds: float = 0.0
    elapsed_text: str = "00:00:00"


# ── Events ───────────────────────────────────────────────────────────


class StatusEvent(BaseModel):
    """Current engine state, sent first on every event stream."""

    event: Literal["status"] = "status"
    run_id: Optional[str] = None
    state: JobState
    snapshot: ProgressSnapshot


class ProgressEvent(BaseModel):
    """One per completed increment, carrying the worker-reported percent."""

    event: Literal["progress"] = "progress"
    run_id: str
    percent: int = Field(ge=0, le=100)


class TickEvent(BaseModel):
    """One per timer tick, carrying the clock-derived estimate."""

    event: Literal["tick"] = "tick"
    run_id: str
    elapsed_seconds: float
    elapsed_text: str
    estimated_percent: int
    display_percent: int


class TerminalEvent(BaseModel):
    """Exactly one per run; no progress follows it."""

    event: Literal["terminal"] = "terminal"
    run_id: str
    state: JobState
    outcome: Optional[JobOutcome] = None
    engine_error: Optional[str] = None
    result_path: Optional[str] = None
    persist_error: Optional[str] = None

    def status_text(self) -> str:
        """Operator-facing status line for this terminal event."""
        if self.state == JobState.cancelled:
            return "Test cancelled."
        if self.engine_error is not None:
            return f"Test failed: {self.engine_error}"
        if self.outcome is not None and not self.outcome.succeeded:
            return f"Test failed: {self.outcome.error_message}"
        return "Test passed."


BenchEvent = Union[StatusEvent, ProgressEvent, TickEvent, TerminalEvent]


# ── History ──────────────────────────────────────────────────────────


class RunRecord(BaseModel):
    """Persistent representation of one bench run."""

    run_id: str
    variant: JobVariant
    product_id: str
    state: JobState = JobState.running
    duration_seconds: int
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    completed_at: Optional[str] = None
    outcome: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    result_path: Optional[str] = None
