"""Run orchestration: plan units of work, collect them in isolation, then score, rank and sink."""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Protocol

from core.aggregator import aggregate
from core.models import CollectResult, RunSummary, ScoredStory, StoryType, UnitOfWork
from core.ranker import rank
from core.scoring import ViralityScorer

if TYPE_CHECKING:
    from config.run_config import RunConfig
    from scrapers.base import BaseCollector

log = logging.getLogger(__name__)


class StorySink(Protocol):
    async def write(self, stories: Sequence[ScoredStory], summary: RunSummary | None = None) -> bool: ...


def plan_units(config: RunConfig) -> list[UnitOfWork]:
    units = [UnitOfWork(kind=StoryType.NEWS, source=name) for name in config.news_sources]
    for sub in config.reddit_subs:
        for sort in config.reddit_sorts:
            units.append(UnitOfWork(kind=StoryType.REDDIT, source=sub, sort=sort))
    return units


class DailyScopePipeline:
    def __init__(
        self,
        collectors: Mapping[StoryType, BaseCollector],
        sink: StorySink,
        scorer: ViralityScorer | None = None,
        collector_timeout: float = 30.0,
        max_concurrency: int = 4,
    ) -> None:
        self._collectors = dict(collectors)
        self._sink = sink
        self._scorer = scorer or ViralityScorer()
        self._timeout = collector_timeout
        self._max_concurrency = max(1, max_concurrency)

    async def collect_all(self, units: Sequence[UnitOfWork]) -> list[CollectResult]:
        """Collect every unit; results come back in ``units`` order, failures included."""
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _guarded(unit: UnitOfWork) -> CollectResult:
            async with semaphore:
                return await self._collect_one(unit)

        return list(await asyncio.gather(*(_guarded(u) for u in units)))

    async def _collect_one(self, unit: UnitOfWork) -> CollectResult:
        collector = self._collectors.get(unit.kind)
        if collector is None:
            return CollectResult.failure(unit, f"no collector for {unit.kind.value}")

        # Rate-limit pacing happens before the clock starts, so queued units
        # are not timed out while waiting for their request slot.
        await collector.throttle()
        t0 = time.monotonic()
        try:
            return await asyncio.wait_for(collector.collect(unit), timeout=self._timeout)
        except asyncio.TimeoutError:
            log.warning("Timed out collecting %s after %.0fs", unit.label, self._timeout)
            return CollectResult.failure(unit, f"timed out after {self._timeout:.0f}s", time.monotonic() - t0)
        except Exception as exc:
            # collect() is not supposed to raise past its own boundary
            log.error("Collector for %s raised: %s", unit.label, exc)
            return CollectResult.failure(unit, str(exc), time.monotonic() - t0)

    async def run(self, config: RunConfig) -> RunSummary:
        run_id = uuid.uuid4().hex[:12]
        started_at = datetime.now(timezone.utc)
        t0 = time.monotonic()

        units = plan_units(config)
        log.info(
            "Starting run %s: news=%s reddit=%s sorts=%s",
            run_id,
            list(config.news_sources),
            list(config.reddit_subs),
            [s.value for s in config.reddit_sorts],
        )

        results = await self.collect_all(units)
        stories = aggregate(results)
        ranked = rank(self._scorer.score_all(stories), config.max_results)

        summary = RunSummary(
            run_id=run_id,
            started_at=started_at,
            results=results,
            ranked=ranked,
            stories_found=len(stories),
            sink_ok=False,
            duration_seconds=time.monotonic() - t0,
        )
        summary.sink_ok = await self._sink.write(ranked, summary)
        if not summary.sink_ok:
            log.error("Run %s: sink rejected %d ranked stories", run_id, len(ranked))

        log.info(
            "Finished run %s | %d stories found | %d kept | %d/%d units failed | %.1fs",
            run_id,
            summary.stories_found,
            len(ranked),
            len(summary.failed_units),
            len(units),
            summary.duration_seconds,
        )
        if summary.top_story:
            log.info(
                "Top story: %s (%d)", summary.top_story.story.title, summary.top_story.virality_score
            )
        return summary
