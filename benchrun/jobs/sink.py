"""Result sinks: where a successful run's outcome is recorded.

The on-disk record is plain text, one ``Key: value`` pair per line::

    Success: True
    Data: { Data1 = 42, Data2 = 2026-10-19T12:00:00+00:00 }

with an ``Error: <message>`` line between the two when the outcome did
not succeed.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from ..config import RESULT_ENCODING, RESULT_FILE_SUFFIX
from .models import JobOutcome

logger = logging.getLogger(__name__)


class ResultSink(Protocol):
    def persist(self, identifier: str, outcome: JobOutcome) -> str:
        """Record *outcome* under *identifier*; return where it went."""
        ...


def format_outcome(outcome: JobOutcome) -> str:
    lines = [f"Success: {outcome.succeeded}"]
    if not outcome.succeeded:
        lines.append(f"Error: {outcome.error_message}")
    lines.append(f"Data: {outcome.payload if outcome.payload is not None else ''}")
    return "\n".join(lines) + "\n"


class TextFileResultSink:
    """Writes ``<directory>/<identifier>.txt``, overwriting any earlier record."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def path_for(self, identifier: str) -> Path:
        name = Path(identifier).name
        if not name or name != identifier or not name.strip("."):
            raise ValueError(f"Identifier must be a plain file name: {identifier!r}")
        return self.directory / f"{name}{RESULT_FILE_SUFFIX}"

    def persist(self, identifier: str, outcome: JobOutcome) -> str:
        path = self.path_for(identifier)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(format_outcome(outcome), encoding=RESULT_ENCODING)
        logger.info("Saved result for %s to %s", identifier, path)
        return str(path)
