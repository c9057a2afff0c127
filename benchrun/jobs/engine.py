"""Single-job bench engine with cooperative cancellation and event streaming."""
from __future__ import annotations

import asyncio
import logging
import threading
import traceback
import uuid
from typing import Any, AsyncGenerator, Callable, List, Optional

from ..config import INCREMENT_SECONDS
from .catalog import JobSpec, get_spec
from .clock import Clock, SystemClock, utc_now_iso
from .errors import ConfigurationError, InvalidStateError, JobCancelled
from .models import (
    BenchEvent,
    JobOutcome,
    JobState,
    JobVariant,
    ProgressEvent,
    ProgressSnapshot,
    RunRecord,
    StatusEvent,
    TerminalEvent,
    TickEvent,
)
from .progress import ProgressCoordinator
from .sink import ResultSink
from .state import is_busy, is_terminal, validate_transition
from .store import RunStore
from .workload import execute_timed_job

logger = logging.getLogger(__name__)


class JobEngine:
    """Runs one bench test at a time on a worker thread.

    The engine lives on an asyncio event loop (the observer context).  The
    workload runs in a thread via ``asyncio.to_thread``; its progress
    reports are marshaled back with ``loop.call_soon_threadsafe`` so the
    engine state, the display value and subscriber queues are only touched
    on the loop thread.  Public methods must be called from that thread.
    """

    def __init__(
        self,
        sink: Optional[ResultSink] = None,
        *,
        coordinator: Optional[ProgressCoordinator] = None,
        store: Optional[RunStore] = None,
        clock: Optional[Clock] = None,
        increment_seconds: float = INCREMENT_SECONDS,
        success_predicate: Optional[Callable[[], bool]] = None,
        wait: Optional[Callable[[float], object]] = None,
    ) -> None:
        self._sink = sink
        self._clock = clock or SystemClock()
        self.coordinator = coordinator or ProgressCoordinator(clock=self._clock)
        self._store = store
        self._increment_seconds = increment_seconds
        self._success_predicate = success_predicate
        self._wait = wait

        self._state = JobState.idle
        self._run_id: Optional[str] = None
        self._product_id: Optional[str] = None
        self._spec: Optional[JobSpec] = None
        self._run_sink: Optional[ResultSink] = None
        self._cancel_event: Optional[threading.Event] = None
        self._task: Optional[asyncio.Task] = None
        self._status_text = "Ready"
        self._subscribers: List[asyncio.Queue] = []

    # ── Read access ──────────────────────────────────────────────────

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def run_id(self) -> Optional[str]:
        return self._run_id

    @property
    def product_id(self) -> Optional[str]:
        return self._product_id

    @property
    def variant(self) -> Optional[JobVariant]:
        return self._spec.variant if self._spec is not None else None

    @property
    def snapshot(self) -> ProgressSnapshot:
        return self.coordinator.snapshot

    @property
    def status_text(self) -> str:
        return self._status_text

    # ── Start / Cancel / Acknowledge ─────────────────────────────────

    async def start(
        self,
        variant: Any,
        product_id: str,
        sink: Optional[ResultSink] = None,
    ) -> str:
        """Start a run of *variant* for *product_id* and return its run ID.

        A finished engine is re-armed implicitly.  *sink* overrides the
        engine's default result sink for this run only.

        Raises
        ------
        InvalidStateError
            If a run is already active.  State is left untouched.
        ConfigurationError
            If *variant* has no catalog entry.  State is left untouched.
        """
        if is_busy(self._state):
            raise InvalidStateError(self._state.value, "start a test")
        try:
            spec = get_spec(variant)
        except ConfigurationError:
            logger.error("Refusing to start unknown test variant %r", variant)
            raise
        if not product_id:
            raise ValueError("product_id must not be empty")

        if is_terminal(self._state):
            self._transition(JobState.idle)

        run_id = uuid.uuid4().hex[:12]
        self._run_id = run_id
        self._product_id = product_id
        self._spec = spec
        self._run_sink = sink if sink is not None else self._sink
        self._cancel_event = threading.Event()
        self._transition(JobState.running)
        self._status_text = "Testing..."

        logger.info(
            "Starting %s (%ds) for product %s as run %s",
            spec.variant.value, spec.duration_seconds, product_id, run_id,
        )
        self.coordinator.begin(spec.duration_seconds, on_tick=self._on_tick)
        self._task = asyncio.get_running_loop().create_task(
            self._run(run_id, spec, self._cancel_event)
        )
        return run_id

    def request_cancel(self) -> bool:
        """Ask the running workload to stop at its next increment boundary.

        Only sets a flag; returns ``False`` when nothing is running.
        """
        if self._state != JobState.running or self._cancel_event is None:
            return False
        self._cancel_event.set()
        self._transition(JobState.cancelling)
        self._status_text = "Test cancelled."
        return True

    def acknowledge(self) -> None:
        """Return a finished engine to idle."""
        if self._state == JobState.idle:
            return
        if is_busy(self._state):
            raise InvalidStateError(self._state.value, "acknowledge")
        self._transition(JobState.idle)
        self.coordinator.reset()
        self._run_id = None
        self._product_id = None
        self._spec = None
        self._status_text = "Ready"

    async def join(self) -> None:
        """Wait until the current run (if any) has emitted its terminal event."""
        task = self._task
        if task is not None and not task.done():
            await asyncio.shield(task)

    async def shutdown(self) -> None:
        """Cancel any active run and wait for it to wind down."""
        self.request_cancel()
        await self.join()

    # ── Event streaming ──────────────────────────────────────────────

    def subscribe(self) -> asyncio.Queue:
        """Register a queue that receives every subsequent event."""
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    async def stream_events(self) -> AsyncGenerator[BenchEvent, None]:
        """Yield the current status, then events until the run terminates."""
        queue = self.subscribe()
        try:
            yield StatusEvent(run_id=self._run_id, state=self._state, snapshot=self.snapshot)
            if not is_busy(self._state):
                return
            while True:
                event = await queue.get()
                yield event
                if isinstance(event, TerminalEvent):
                    break
        finally:
            self.unsubscribe(queue)

    def _emit(self, event: BenchEvent) -> None:
        for queue in list(self._subscribers):
            queue.put_nowait(event)

    # ── Internals ────────────────────────────────────────────────────

    def _transition(self, to_state: JobState) -> None:
        validate_transition(self._state, to_state)
        logger.info("Run %s: %s -> %s", self._run_id, self._state.value, to_state.value)
        self._state = to_state

    async def _run(self, run_id: str, spec: JobSpec, cancel_event: threading.Event) -> None:
        loop = asyncio.get_running_loop()
        await self._record_start(run_id, spec)

        def progress_callback(percent: int) -> None:
            loop.call_soon_threadsafe(self._on_progress, run_id, percent)

        outcome: Optional[JobOutcome] = None
        engine_error: Optional[str] = None
        try:
            outcome = await asyncio.to_thread(
                execute_timed_job,
                spec,
                progress_callback,
                cancel_event,
                increment_seconds=self._increment_seconds,
                success_predicate=self._success_predicate,
                wait=self._wait,
                clock=self._clock,
            )
        except JobCancelled:
            final = JobState.cancelled
        except Exception as exc:
            logger.error("Run %s failed: %s\n%s", run_id, exc, traceback.format_exc())
            final = JobState.failed
            engine_error = str(exc) or type(exc).__name__
        else:
            final = JobState.completed if outcome.succeeded else JobState.failed

        await self._finish(run_id, final, outcome, engine_error)

    def _on_progress(self, run_id: str, percent: int) -> None:
        if run_id != self._run_id or not is_busy(self._state):
            return
        self.coordinator.record_report(percent)
        self._emit(ProgressEvent(run_id=run_id, percent=percent))

    def _on_tick(self, snapshot: ProgressSnapshot) -> None:
        if self._run_id is None:
            return
        self._emit(TickEvent(
            run_id=self._run_id,
            elapsed_seconds=snapshot.elapsed_seconds,
            elapsed_text=snapshot.elapsed_text,
            estimated_percent=snapshot.estimated_percent,
            display_percent=snapshot.display_percent,
        ))

    async def _finish(
        self,
        run_id: str,
        final: JobState,
        outcome: Optional[JobOutcome],
        engine_error: Optional[str],
    ) -> None:
        self.coordinator.stop()
        self.coordinator.force(100)
        self._transition(final)

        result_path: Optional[str] = None
        persist_error: Optional[str] = None
        if final == JobState.completed and self._run_sink is not None:
            try:
                result_path = self._run_sink.persist(self._product_id, outcome)
            except (OSError, ValueError) as exc:
                persist_error = str(exc)
                logger.error("Could not save result for %s: %s", self._product_id, exc)
            except Exception as exc:  # noqa: BLE001
                persist_error = str(exc) or type(exc).__name__
                logger.exception("Result sink failed for %s", self._product_id)

        self.coordinator.force(0)

        event = TerminalEvent(
            run_id=run_id,
            state=final,
            outcome=outcome if final != JobState.cancelled else None,
            engine_error=engine_error,
            result_path=result_path,
            persist_error=persist_error,
        )
        self._status_text = event.status_text()
        self._cancel_event = None
        self._run_sink = None
        logger.info(
            "Run %s finished: %s", run_id, self._status_text,
            extra={"metrics": {
                "state": final.value,
                "variant": self._spec.variant.value if self._spec is not None else None,
                "reported_percent": self.coordinator.snapshot.reported_percent,
                "elapsed_seconds": self.coordinator.snapshot.elapsed_seconds,
            }},
        )
        self._emit(event)

        await self._record_terminal(event)

    async def _record_start(self, run_id: str, spec: JobSpec) -> None:
        if self._store is None:
            return
        rec = RunRecord(
            run_id=run_id,
            variant=spec.variant,
            product_id=self._product_id,
            duration_seconds=spec.duration_seconds,
            created_at=utc_now_iso(self._clock),
        )
        try:
            await self._store.create_run(rec)
        except Exception:  # noqa: BLE001
            logger.warning("Could not record start of run %s", run_id, exc_info=True)

    async def _record_terminal(self, event: TerminalEvent) -> None:
        if self._store is None:
            return
        try:
            await self._store.mark_terminal(
                event.run_id,
                event.state,
                completed_at=utc_now_iso(self._clock),
                outcome=event.outcome.model_dump(mode="json") if event.outcome is not None else None,
                error=event.engine_error or event.persist_error,
                result_path=event.result_path,
            )
        except Exception:  # noqa: BLE001
            logger.warning("Could not record end of run %s", event.run_id, exc_info=True)
