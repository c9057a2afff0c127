"""Route modules, imported lazily by the app factory."""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter

logger = logging.getLogger(__name__)

# Module paths that provide a ``router`` attribute.
_ROUTER_MODULES = [
    "benchrun.api.routers.health",
    "benchrun.api.routers.runs",
]


def all_routers() -> List[APIRouter]:
    """Import and return every available router, skipping broken ones."""
    import importlib

    routers: List[APIRouter] = []
    for mod_path in _ROUTER_MODULES:
        try:
            mod = importlib.import_module(mod_path)
            routers.append(mod.router)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Skipping router %s: %s", mod_path, exc)
    return routers
