"""Single-job bench engine: catalog, workload, progress coordination and result sinks."""
from .catalog import JobSpec, duration_for, get_spec, payload_for
from .engine import JobEngine
from .errors import BenchError, ConfigurationError, InvalidStateError, JobCancelled, RunNotFoundError
from .models import JobOutcome, JobState, JobVariant, ProgressSnapshot, RunRecord, TerminalEvent
from .progress import DisplayValue, ProgressCoordinator
from .sink import TextFileResultSink
from .store import RunStore

__all__ = [
    "BenchError",
    "ConfigurationError",
    "DisplayValue",
    "InvalidStateError",
    "JobCancelled",
    "JobEngine",
    "JobOutcome",
    "JobSpec",
    "JobState",
    "JobVariant",
    "ProgressCoordinator",
    "ProgressSnapshot",
    "RunNotFoundError",
    "RunRecord",
    "RunStore",
    "TerminalEvent",
    "TextFileResultSink",
    "duration_for",
    "get_spec",
    "payload_for",
]
