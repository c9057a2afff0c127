"""Shared test fixtures for the benchrun test suite."""
from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest


def pytest_sessionfinish(session, exitstatus):
    """Spawn a watchdog that force-exits if the process hangs at shutdown.

    Worker threads started through ``asyncio.to_thread`` live in the default
    executor, whose atexit join can block if a test left a run in flight.
    """
    import os
    import threading
    import time

    def _watchdog():
        time.sleep(5)
        os._exit(exitstatus)

    t = threading.Thread(target=_watchdog, daemon=True)
    t.start()


# ── Engine fixtures ──────────────────────────────────────────────────


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def monotonic(self) -> float:
        return self.now

    def utcnow(self) -> datetime:
        return datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSink:
    """Result sink that keeps every persist call in memory."""

    def __init__(self) -> None:
        self.calls = []

    def persist(self, identifier, outcome):
        self.calls.append((identifier, outcome))
        return f"memory://{identifier}"


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def make_engine():
    """Factory for engines with instant increments and a silent timer."""
    from benchrun.jobs.engine import JobEngine
    from benchrun.jobs.progress import ProgressCoordinator

    def _make(sink=None, **kwargs):
        kwargs.setdefault("increment_seconds", 0.0)
        kwargs.setdefault("coordinator", ProgressCoordinator(interval_seconds=3600))
        return JobEngine(sink, **kwargs)

    return _make


@pytest.fixture
def drain():
    """Collect events from a subscriber queue up to and including the terminal one."""
    from benchrun.jobs.models import TerminalEvent

    async def _drain(queue, timeout: float = 5.0):
        events = []
        while True:
            event = await asyncio.wait_for(queue.get(), timeout)
            events.append(event)
            if isinstance(event, TerminalEvent):
                return events

    return _drain


# ── API fixtures ─────────────────────────────────────────────────────


class _InMemoryRunStore:
    """Lightweight in-memory run store for tests (avoids aiosqlite threads)."""

    def __init__(self):
        self._runs = {}

    async def initialize(self):
        pass

    async def close(self):
        self._runs.clear()

    async def create_run(self, rec):
        self._runs[rec.run_id] = rec
        return rec

    async def get_run(self, run_id):
        return self._runs.get(run_id)

    async def list_runs(self, limit=50):
        return list(reversed(list(self._runs.values())))[:limit]

    async def mark_terminal(self, run_id, state, *, completed_at, outcome=None, error=None, result_path=None):
        rec = self._runs.get(run_id)
        if rec:
            self._runs[run_id] = rec.model_copy(update={
                "state": state,
                "completed_at": completed_at,
                "outcome": outcome,
                "error": error,
                "result_path": result_path,
            })


@pytest.fixture
async def app(tmp_path):
    """Create a test FastAPI app with a fresh per-test engine and store."""
    import benchrun.api.deps.auth as _auth
    import benchrun.api.deps.providers as _prov
    from benchrun.api.config import ApiSettings
    from benchrun.api.main import create_app
    from benchrun.jobs.engine import JobEngine
    from benchrun.jobs.progress import ProgressCoordinator
    from benchrun.jobs.sink import TextFileResultSink

    # Disable auth for tests so mutation endpoints are accessible
    _orig_auth_enabled = _auth.API_AUTH_ENABLED
    _auth.API_AUTH_ENABLED = False

    settings = ApiSettings(
        history_db_path=str(tmp_path / "test_runs.db"),
        results_dir=str(tmp_path / "results"),
        increment_seconds=0.0,
    )
    application = create_app(settings)

    # Inject after create_app, which resets the provider singletons
    store = _InMemoryRunStore()
    engine = JobEngine(
        TextFileResultSink(settings.results_dir),
        coordinator=ProgressCoordinator(interval_seconds=3600),
        store=store,
        increment_seconds=0.0,
        success_predicate=lambda: True,
    )
    _prov._run_store = store
    _prov._engine = engine

    yield application

    # Cleanup
    await _prov.get_engine().shutdown()
    _auth.API_AUTH_ENABLED = _orig_auth_enabled
    _prov._settings_override = None
    _prov._run_store = None
    _prov._engine = None
    _prov._env_settings.cache_clear()


@pytest.fixture
def slow_engine(app):
    """Replace the app's engine with one whose increments take seconds."""
    import benchrun.api.deps.providers as _prov
    from benchrun.jobs.engine import JobEngine
    from benchrun.jobs.progress import ProgressCoordinator

    engine = JobEngine(
        coordinator=ProgressCoordinator(interval_seconds=3600),
        store=_prov._run_store,
        increment_seconds=5.0,
        success_predicate=lambda: True,
    )
    _prov._engine = engine
    return engine


@pytest.fixture
async def client(app):
    """Async HTTP client bound to the test app."""
    from httpx import ASGITransport, AsyncClient

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac
