"""Test catalog: nominal duration and payload rule per variant.

Pure lookups, no mutable state.  ``duration_for`` tolerates malformed
selectors and falls back to ``DEFAULT_DURATION_SECONDS`` so the operator
surface never breaks on bad input; ``get_spec`` is strict and is what the
engine uses before starting a run.
"""
from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..config import DEFAULT_DURATION_SECONDS, PAYLOAD_LABEL, TEST_DURATIONS
from .clock import Clock, SystemClock
from .errors import ConfigurationError
from .models import CounterPayload, JobVariant, LabelPayload, RatioPayload

PayloadFactory = Callable[[random.Random, Clock], Any]


def _counter_payload(rng: random.Random, clock: Clock) -> CounterPayload:
    return CounterPayload(data1=rng.randrange(100), data2=clock.utcnow())


def _ratio_payload(rng: random.Random, clock: Clock) -> RatioPayload:
    return RatioPayload(data1=rng.random(), data2=uuid.UUID(int=rng.getrandbits(128), version=4))


def _label_payload(rng: random.Random, clock: Clock) -> LabelPayload:
    return LabelPayload(data1=rng.randrange(1, 10), data2=PAYLOAD_LABEL, data3=rng.randrange(1000))


@dataclass(frozen=True)
class JobSpec:
    variant: JobVariant
    duration_seconds: int
    payload_factory: PayloadFactory

    def __post_init__(self) -> None:
        if self.duration_seconds <= 0:
            raise ConfigurationError(
                f"{self.variant.value}: duration must be positive, got {self.duration_seconds}"
            )

    def make_payload(self, rng: Optional[random.Random] = None, clock: Optional[Clock] = None) -> Any:
        return self.payload_factory(rng or random.Random(), clock or SystemClock())


_PAYLOAD_FACTORIES: Dict[JobVariant, PayloadFactory] = {
    JobVariant.test_1: _counter_payload,
    JobVariant.test_2: _ratio_payload,
    JobVariant.test_3: _label_payload,
}

CATALOG: Dict[JobVariant, JobSpec] = {
    variant: JobSpec(variant, TEST_DURATIONS[variant.value], factory)
    for variant, factory in _PAYLOAD_FACTORIES.items()
}


def _coerce(variant: Any) -> Optional[JobVariant]:
    if isinstance(variant, JobVariant):
        return variant
    try:
        return JobVariant(variant)
    except ValueError:
        return None


def get_spec(variant: Any) -> JobSpec:
    """Return the catalog entry for *variant*.

    Raises
    ------
    ConfigurationError
        If *variant* is not a known test.
    """
    key = _coerce(variant)
    spec = CATALOG.get(key) if key is not None else None
    if spec is None:
        raise ConfigurationError(f"No catalog entry for test variant {variant!r}")
    return spec


def duration_for(variant: Any) -> int:
    """Nominal duration in seconds; unknown selectors get the default."""
    key = _coerce(variant)
    if key is None or key not in CATALOG:
        return DEFAULT_DURATION_SECONDS
    return CATALOG[key].duration_seconds


def payload_for(variant: Any, rng: Optional[random.Random] = None, clock: Optional[Clock] = None) -> Any:
    """Generate a fresh payload for *variant*."""
    return get_spec(variant).make_payload(rng, clock)


def list_specs() -> List[Dict[str, Any]]:
    """Catalog rows for the operator's test list, in display order."""
    return [
        {"variant": spec.variant.value, "label": spec.variant.label, "duration_seconds": spec.duration_seconds}
        for spec in CATALOG.values()
    ]
