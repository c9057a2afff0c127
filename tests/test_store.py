"""Tests for the SQLite run history."""
import pytest

from benchrun.jobs.models import JobState, JobVariant, RunRecord
from benchrun.jobs.store import RunStore


@pytest.fixture
async def store():
    s = RunStore(":memory:")
    await s.initialize()
    yield s
    await s.close()


def _record(run_id, created_at="2026-10-19T12:00:00+00:00", variant=JobVariant.test_1):
    return RunRecord(
        run_id=run_id,
        variant=variant,
        product_id=f"P-{run_id}",
        duration_seconds=10,
        created_at=created_at,
    )


@pytest.mark.asyncio
async def test_create_and_get(store):
    await store.create_run(_record("a"))
    rec = await store.get_run("a")
    assert rec.product_id == "P-a"
    assert rec.state == JobState.running
    assert rec.outcome is None


@pytest.mark.asyncio
async def test_get_missing_returns_none(store):
    assert await store.get_run("nope") is None


@pytest.mark.asyncio
async def test_list_newest_first_with_limit(store):
    await store.create_run(_record("old", "2026-10-19T10:00:00+00:00"))
    await store.create_run(_record("new", "2026-10-19T11:00:00+00:00"))
    await store.create_run(_record("mid", "2026-10-19T10:30:00+00:00"))

    runs = await store.list_runs()
    assert [r.run_id for r in runs] == ["new", "mid", "old"]
    assert len(await store.list_runs(limit=2)) == 2


@pytest.mark.asyncio
async def test_mark_terminal_stores_outcome(store):
    await store.create_run(_record("a", variant=JobVariant.test_3))
    outcome = {"succeeded": True, "error_message": "", "payload": {"variant": "test_3", "data1": 1}}
    await store.mark_terminal(
        "a", JobState.completed,
        completed_at="2026-10-19T12:00:30+00:00",
        outcome=outcome,
        result_path="/tmp/P-a.txt",
    )
    rec = await store.get_run("a")
    assert rec.state == JobState.completed
    assert rec.outcome == outcome
    assert rec.result_path == "/tmp/P-a.txt"
    assert rec.completed_at == "2026-10-19T12:00:30+00:00"


@pytest.mark.asyncio
async def test_mark_terminal_cancelled_without_outcome(store):
    await store.create_run(_record("a"))
    await store.mark_terminal("a", JobState.cancelled, completed_at="2026-10-19T12:00:04+00:00")
    rec = await store.get_run("a")
    assert rec.state == JobState.cancelled
    assert rec.outcome is None
    assert rec.error is None
