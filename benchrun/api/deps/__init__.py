"""Dependency injection providers."""
from .auth import require_auth
from .providers import get_engine, get_run_store, get_settings

__all__ = [
    "get_engine",
    "get_run_store",
    "get_settings",
    "require_auth",
]
