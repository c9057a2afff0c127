"""Wall-clock time source."""
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def monotonic(self) -> float:
        """Seconds on a clock that never goes backwards."""
        ...

    def utcnow(self) -> datetime:
        ...


class SystemClock:
    """Clock backed by the process's real time sources."""

    def monotonic(self) -> float:
        return time.monotonic()

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)


def utc_now_iso(clock: Clock | None = None) -> str:
    return (clock or SystemClock()).utcnow().isoformat()
