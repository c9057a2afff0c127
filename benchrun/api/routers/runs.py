"""Run control endpoints: start, cancel, acknowledge, observe."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sse_starlette.sse import EventSourceResponse

from ...config import HISTORY_LIST_LIMIT
from ...jobs.engine import JobEngine
from ...jobs.errors import RunNotFoundError
from ...jobs.store import RunStore
from ..deps.auth import require_auth
from ..deps.providers import get_engine, get_run_store
from ..schemas.envelope import ApiResponse
from ..schemas.runs import StartRunRequest

router = APIRouter(prefix="/api/runs", tags=["runs"])


def _current(engine: JobEngine) -> dict:
    variant = engine.variant
    return {
        "run_id": engine.run_id,
        "state": engine.state.value,
        "variant": variant.value if variant is not None else None,
        "product_id": engine.product_id,
        "status_text": engine.status_text,
        "snapshot": engine.snapshot.model_dump(),
    }


@router.get("/current")
async def current_run(engine: JobEngine = Depends(get_engine)) -> ApiResponse:
    return ApiResponse.success(_current(engine), engine_state=engine.state.value)


@router.post("", dependencies=[Depends(require_auth)])
async def start_run(
    req: StartRunRequest,
    engine: JobEngine = Depends(get_engine),
) -> ApiResponse:
    await engine.start(req.variant, req.product_id)
    return ApiResponse.success(_current(engine), engine_state=engine.state.value)


@router.post("/cancel", dependencies=[Depends(require_auth)])
async def cancel_run(engine: JobEngine = Depends(get_engine)) -> ApiResponse:
    cancelled = engine.request_cancel()
    return ApiResponse.success({"cancelled": cancelled}, engine_state=engine.state.value)


@router.post("/acknowledge", dependencies=[Depends(require_auth)])
async def acknowledge_run(engine: JobEngine = Depends(get_engine)) -> ApiResponse:
    engine.acknowledge()
    return ApiResponse.success(_current(engine), engine_state=engine.state.value)


@router.get("/events")
async def run_events(engine: JobEngine = Depends(get_engine)):
    async def _generate():
        async for event in engine.stream_events():
            yield {"event": event.event, "data": event.model_dump_json()}

    return EventSourceResponse(_generate())


@router.get("/history")
async def list_runs(
    limit: int = HISTORY_LIST_LIMIT,
    store: RunStore = Depends(get_run_store),
) -> ApiResponse:
    runs = await store.list_runs(limit=limit)
    return ApiResponse.success([r.model_dump(mode="json") for r in runs])


@router.get("/history/{run_id}")
async def get_run(
    run_id: str,
    store: RunStore = Depends(get_run_store),
) -> ApiResponse:
    rec = await store.get_run(run_id)
    if rec is None:
        raise RunNotFoundError(run_id)
    return ApiResponse.success(rec.model_dump(mode="json"))
