"""Singleton dependency providers for FastAPI ``Depends()``."""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from ..config import ApiSettings

_settings_override: Optional[ApiSettings] = None


@lru_cache
def _env_settings() -> ApiSettings:
    return ApiSettings()


def get_settings() -> ApiSettings:
    if _settings_override is not None:
        return _settings_override
    return _env_settings()


def use_settings(settings: ApiSettings) -> None:
    """Pin explicit settings and drop engine/store built from earlier ones."""
    global _settings_override, _run_store, _engine
    _settings_override = settings
    _run_store = None
    _engine = None


# Lazy singletons, initialised at first call rather than import time
# so the event loop is already running when async resources are needed.

_run_store = None
_engine = None


def get_run_store():
    """Return the shared ``RunStore``."""
    global _run_store
    if _run_store is None:
        from ...jobs.store import RunStore

        _run_store = RunStore(get_settings().history_db_path)
    return _run_store


def get_engine():
    """Return the shared ``JobEngine`` the HTTP controller drives."""
    global _engine
    if _engine is None:
        from ...jobs.engine import JobEngine
        from ...jobs.progress import ProgressCoordinator
        from ...jobs.sink import TextFileResultSink

        settings = get_settings()
        _engine = JobEngine(
            TextFileResultSink(settings.results_dir),
            coordinator=ProgressCoordinator(interval_seconds=settings.timer_interval_seconds),
            store=get_run_store(),
            increment_seconds=settings.increment_seconds,
        )
    return _engine
