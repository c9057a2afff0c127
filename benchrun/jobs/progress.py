"""Progress coordination: one display value, two independent writers.

The worker reports a percent after every increment; a periodic timer on
the event loop derives its own estimate from elapsed wall time.  Both
write the same ``DisplayValue`` and the last write wins.  All writes
happen on the event-loop thread, so no lock is needed.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from ..config import TIMER_INTERVAL_SECONDS
from .clock import Clock, SystemClock
from .models import ProgressSnapshot

logger = logging.getLogger(__name__)

SOURCE_WORKER = "worker"
SOURCE_TIMER = "timer"
SOURCE_ENGINE = "engine"


def format_elapsed(seconds: float) -> str:
    """Render elapsed seconds as ``hh:mm:ss`` (whole seconds, truncated)."""
    total = max(0, int(seconds))
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def estimate_percent(elapsed_seconds: float, nominal_duration: int) -> int:
    """Clock-derived progress, capped at 100."""
    if nominal_duration <= 0:
        return 100
    return min(100, int(elapsed_seconds / nominal_duration * 100))


class DisplayValue:
    """The single externally observable progress percent."""

    def __init__(self) -> None:
        self._value = 0
        self._source: Optional[str] = None
        self._listeners: List[Callable[[int, str], None]] = []

    @property
    def value(self) -> int:
        return self._value

    @property
    def source(self) -> Optional[str]:
        """Which writer set the current value."""
        return self._source

    def add_listener(self, listener: Callable[[int, str], None]) -> None:
        self._listeners.append(listener)

    def write(self, percent: int, source: str) -> None:
        self._value = max(0, min(100, int(percent)))
        self._source = source
        for listener in self._listeners:
            listener(self._value, source)


class ProgressCoordinator:
    """Owns the display value and the elapsed-time ticker for one engine."""

    def __init__(
        self,
        clock: Optional[Clock] = None,
        interval_seconds: float = TIMER_INTERVAL_SECONDS,
        display: Optional[DisplayValue] = None,
    ) -> None:
        self._clock = clock or SystemClock()
        self._interval = interval_seconds
        self.display = display or DisplayValue()
        self._nominal_duration = 0
        self._started_at: Optional[float] = None
        self._elapsed = 0.0
        self._reported = 0
        self._estimated = 0
        self._ticking = False
        self._task: Optional[asyncio.Task] = None
        self._on_tick: Optional[Callable[[ProgressSnapshot], None]] = None

    # ── Lifecycle ────────────────────────────────────────────────────

    def begin(
        self,
        nominal_duration: int,
        on_tick: Optional[Callable[[ProgressSnapshot], None]] = None,
    ) -> None:
        """Reset both signals and start the ticker.  Must run on the event loop."""
        self.stop()
        self.reset()
        self._nominal_duration = nominal_duration
        self._started_at = self._clock.monotonic()
        self._on_tick = on_tick
        self._ticking = True
        self._task = asyncio.get_running_loop().create_task(self._tick_loop())

    def stop(self) -> None:
        """Stop the ticker and freeze elapsed time."""
        if self._ticking and self._started_at is not None:
            self._elapsed = self._clock.monotonic() - self._started_at
        self._ticking = False
        self._on_tick = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def reset(self) -> None:
        self._elapsed = 0.0
        self._reported = 0
        self._estimated = 0
        self._started_at = None
        self.display.write(0, SOURCE_ENGINE)

    @property
    def ticking(self) -> bool:
        return self._ticking

    # ── Writers ──────────────────────────────────────────────────────

    def record_report(self, percent: int) -> None:
        """Apply a worker-reported percent."""
        self._reported = max(self._reported, percent)
        self.display.write(percent, SOURCE_WORKER)

    def force(self, percent: int) -> None:
        """Engine override of the display value (terminal sequence)."""
        self.display.write(percent, SOURCE_ENGINE)

    def tick(self) -> Optional[ProgressSnapshot]:
        """Recompute elapsed time and the clock estimate.  Never blocks.

        Returns ``None`` once the ticker has been stopped.
        """
        if not self._ticking or self._started_at is None:
            return None
        self._elapsed = self._clock.monotonic() - self._started_at
        self._estimated = estimate_percent(self._elapsed, self._nominal_duration)
        self.display.write(self._estimated, SOURCE_TIMER)
        snapshot = self.snapshot
        if self._on_tick is not None:
            self._on_tick(snapshot)
        return snapshot

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.tick()
            except Exception:  # noqa: BLE001
                logger.exception("Progress tick failed")

    # ── Readers ──────────────────────────────────────────────────────

    @property
    def snapshot(self) -> ProgressSnapshot:
        elapsed = self._elapsed
        if self._ticking and self._started_at is not None:
            elapsed = self._clock.monotonic() - self._started_at
        return ProgressSnapshot(
            reported_percent=self._reported,
            estimated_percent=self._estimated,
            display_percent=self.display.value,
            elapsed_seconds=round(elapsed, 3),
            elapsed_text=format_elapsed(elapsed),
        )
