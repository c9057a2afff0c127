"""Liveness and catalog endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from ... import __version__
from ...jobs.catalog import list_specs
from ...jobs.engine import JobEngine
from ..deps.providers import get_engine
from ..schemas.envelope import ApiResponse

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health(engine: JobEngine = Depends(get_engine)) -> ApiResponse:
    return ApiResponse.success(
        {"status": "ok", "version": __version__},
        engine_state=engine.state.value,
    )


@router.get("/api/tests")
async def list_tests() -> ApiResponse:
    return ApiResponse.success(list_specs())
