from __future__ import annotations

from fastapi import APIRouter, Query

from data.database import get_session
from data.repositories import RunLogRepository

router = APIRouter(prefix="/api/sources", tags=["sources"])


@router.get("/stats")
async def source_stats():
    async with get_session() as session:
        repo = RunLogRepository(session)
        return await repo.source_stats()


@router.get("/runs")
async def recent_runs(limit: int = Query(20, ge=1, le=100)):
    async with get_session() as session:
        repo = RunLogRepository(session)
        runs = await repo.recent_runs(limit=limit)
        return [
            {
                "id": r.id,
                "run_id": r.run_id,
                "kind": r.kind,
                "label": r.unit_label,
                "source": r.source,
                "sort": r.sort,
                "status": "success" if r.ok else "failed",
                "items_scraped": r.items_scraped,
                "error_message": r.error_message,
                "duration_seconds": r.duration_seconds,
                "started_at": r.started_at.isoformat() if r.started_at else None,
            }
            for r in runs
        ]
