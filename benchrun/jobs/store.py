"""SQLite-backed history of bench runs."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import aiosqlite

from ..config import HISTORY_LIST_LIMIT
from .models import JobState, RunRecord


class RunStore:
    """Async SQLite store for run lifecycle tracking."""

    def __init__(self, db_path: str = "bench_runs.db") -> None:
        self.db_path = db_path
        self._db: Optional[aiosqlite.Connection] = None

    async def initialize(self) -> None:
        """Create the runs table if it doesn't exist."""
        self._db = await aiosqlite.connect(self.db_path)
        await self._db.execute("""
            CREATE TABLE IF NOT EXISTS runs (
                run_id TEXT PRIMARY KEY,
                variant TEXT NOT NULL,
                product_id TEXT NOT NULL,
                state TEXT NOT NULL DEFAULT 'running',
                duration_seconds INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                completed_at TEXT,
                outcome TEXT,
                error TEXT,
                result_path TEXT
            )
        """)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    # ── CRUD ─────────────────────────────────────────────────────────

    async def create_run(self, rec: RunRecord) -> RunRecord:
        """Insert a freshly started run."""
        if self._db is None:
            await self.initialize()
        await self._db.execute(
            "INSERT INTO runs (run_id, variant, product_id, state, duration_seconds, created_at) "
            "VALUES (?,?,?,?,?,?)",
            (
                rec.run_id,
                rec.variant.value,
                rec.product_id,
                rec.state.value,
                rec.duration_seconds,
                rec.created_at,
            ),
        )
        await self._db.commit()
        return rec

    async def get_run(self, run_id: str) -> Optional[RunRecord]:
        """Fetch a single run by ID."""
        if self._db is None:
            await self.initialize()
        async with self._db.execute("SELECT * FROM runs WHERE run_id = ?", (run_id,)) as cur:
            row = await cur.fetchone()
            desc = cur.description
        if row is None:
            return None
        return self._row_to_record(row, desc)

    async def list_runs(self, limit: int = HISTORY_LIST_LIMIT) -> List[RunRecord]:
        """List runs ordered by start time (newest first)."""
        if self._db is None:
            await self.initialize()
        async with self._db.execute(
            "SELECT * FROM runs ORDER BY created_at DESC LIMIT ?", (limit,)
        ) as cur:
            rows = await cur.fetchall()
            desc = cur.description
        return [self._row_to_record(r, desc) for r in rows]

    async def mark_terminal(
        self,
        run_id: str,
        state: JobState,
        *,
        completed_at: str,
        outcome: Dict[str, Any] | None = None,
        error: str | None = None,
        result_path: str | None = None,
    ) -> None:
        """Record a run's terminal state and result fields."""
        sets = ["state = ?", "completed_at = ?"]
        vals: list = [state.value, completed_at]
        if outcome is not None:
            sets.append("outcome = ?")
            vals.append(json.dumps(outcome, default=str))
        if error is not None:
            sets.append("error = ?")
            vals.append(error)
        if result_path is not None:
            sets.append("result_path = ?")
            vals.append(result_path)
        vals.append(run_id)
        if self._db is None:
            await self.initialize()
        await self._db.execute(f"UPDATE runs SET {', '.join(sets)} WHERE run_id = ?", vals)
        await self._db.commit()

    # ── Helpers ───────────────────────────────────────────────────────

    @staticmethod
    def _row_to_record(row, description) -> RunRecord:
        cols = [d[0] for d in description]
        d = dict(zip(cols, row))
        d["outcome"] = json.loads(d["outcome"]) if d.get("outcome") else None
        return RunRecord(**d)
