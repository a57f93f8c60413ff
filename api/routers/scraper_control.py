from __future__ import annotations

from fastapi import APIRouter, HTTPException

router = APIRouter(prefix="/api/pipeline", tags=["pipeline"])

# The scheduler reference is injected by main.py at startup
_scheduler = None


def set_scheduler(scheduler) -> None:
    global _scheduler
    _scheduler = scheduler


@router.post("/run")
async def trigger_run():
    if _scheduler is None:
        raise HTTPException(503, "Scheduler not initialized")

    summary = await _scheduler.run_now()
    top = summary.top_story
    return {
        "run_id": summary.run_id,
        "stories_found": summary.stories_found,
        "stories": [s.to_dict() for s in summary.ranked],
        "failed_units": summary.failed_units,
        "sink_ok": summary.sink_ok,
        "top_story": top.to_dict() if top else None,
        "duration_seconds": round(summary.duration_seconds, 2),
    }


@router.get("/status")
async def scheduler_status():
    if _scheduler is None:
        return {"running": False, "jobs": [], "last_run": None}
    return _scheduler.get_status()
