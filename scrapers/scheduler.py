from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config.run_config import RunConfig, load_run_config
from config.settings import settings
from core.models import RunSummary
from core.pipeline import DailyScopePipeline

log = logging.getLogger(__name__)


class PipelineScheduler:
    """Runs the pipeline periodically and on demand, one run at a time."""

    def __init__(
        self,
        pipeline: DailyScopePipeline,
        config_loader: Callable[[], RunConfig] = load_run_config,
        interval_minutes: int | None = None,
    ) -> None:
        self._pipeline = pipeline
        self._load_config = config_loader
        self._interval = interval_minutes or settings.RUN_INTERVAL_MINUTES
        self._scheduler = AsyncIOScheduler()
        self._lock = asyncio.Lock()
        self.last_summary: RunSummary | None = None

    def start(self) -> None:
        self._scheduler.add_job(
            self.run_now,
            "interval",
            minutes=self._interval,
            id="daily_scope_run",
            replace_existing=True,
        )
        # Also run once at startup
        self._scheduler.add_job(
            self.run_now,
            "date",
            run_date=datetime.now(timezone.utc),
            id="daily_scope_run_init",
        )
        self._scheduler.start()
        log.info("Pipeline scheduler started, interval %d min", self._interval)

    def stop(self) -> None:
        self._scheduler.shutdown(wait=False)

    async def run_now(self) -> RunSummary:
        async with self._lock:
            self.last_summary = await self._pipeline.run(self._load_config())
            return self.last_summary

    def get_status(self) -> dict:
        jobs = []
        for job in self._scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "next_run": job.next_run_time.isoformat()
                    if job.next_run_time
                    else None,
                }
            )
        last = self.last_summary
        return {
            "running": self._scheduler.running,
            "jobs": jobs,
            "last_run": {
                "run_id": last.run_id,
                "started_at": last.started_at.isoformat(),
                "stories_found": last.stories_found,
                "stories_ranked": len(last.ranked),
                "failed_units": last.failed_units,
                "sink_ok": last.sink_ok,
            }
            if last
            else None,
        }
