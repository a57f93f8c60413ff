from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import Integer, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.models import RunSummary, ScoredStory
from data.schema import DBCollectorRun, DBPipelineRun, DBRankedStory

# ── StoryRepository ──────────────────────────────────────────────────


class StoryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def save_ranking(
        self, run_id: str, stories: Sequence[ScoredStory], ranked_at: datetime | None = None
    ) -> int:
        """Store one run's ranked list. Returns the number of rows written."""
        ranked_at = ranked_at or datetime.now(timezone.utc)
        for rank, scored in enumerate(stories, start=1):
            story = scored.story
            self._s.add(
                DBRankedStory(
                    run_id=run_id,
                    rank=rank,
                    title=story.title,
                    url=story.url,
                    source=story.source,
                    story_type=story.type.value,
                    position=story.position,
                    upvotes=story.upvotes,
                    sort=story.sort.value if story.sort else None,
                    virality_score=scored.virality_score,
                    ranked_at=ranked_at,
                )
            )
        await self._s.flush()
        return len(stories)

    async def latest_ranking(self, limit: int = 20) -> list[DBRankedStory]:
        latest_run = await self._s.scalar(
            select(DBRankedStory.run_id)
            .order_by(DBRankedStory.ranked_at.desc(), DBRankedStory.id.desc())
            .limit(1)
        )
        if latest_run is None:
            return []
        q = (
            select(DBRankedStory)
            .where(DBRankedStory.run_id == latest_run)
            .order_by(DBRankedStory.rank.asc())
            .limit(limit)
        )
        result = await self._s.execute(q)
        return list(result.scalars().all())


# ── RunLogRepository ─────────────────────────────────────────────────


class RunLogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def log_run(self, summary: RunSummary) -> None:
        """Record a pipeline run and the outcome of each of its units of work."""
        self._s.add(
            DBPipelineRun(
                run_id=summary.run_id,
                stories_found=summary.stories_found,
                stories_ranked=len(summary.ranked),
                units_total=len(summary.results),
                units_failed=len(summary.failed_units),
                duration_seconds=round(summary.duration_seconds, 2),
                started_at=summary.started_at,
                finished_at=datetime.now(timezone.utc),
            )
        )
        for result in summary.results:
            self._s.add(
                DBCollectorRun(
                    run_id=summary.run_id,
                    kind=result.unit.kind.value,
                    unit_label=result.unit.label,
                    source=result.unit.source,
                    sort=result.unit.sort.value if result.unit.sort else None,
                    ok=result.ok,
                    items_scraped=len(result.records),
                    error_message=(result.error or "")[:500],
                    duration_seconds=round(result.duration_seconds, 2),
                    started_at=summary.started_at,
                )
            )
        await self._s.flush()

    async def recent_runs(self, limit: int = 20) -> list[DBCollectorRun]:
        q = (
            select(DBCollectorRun)
            .order_by(DBCollectorRun.started_at.desc(), DBCollectorRun.id.desc())
            .limit(limit)
        )
        result = await self._s.execute(q)
        return list(result.scalars().all())

    async def source_stats(self) -> list[dict]:
        """Per unit of work (news source, or subreddit and sort): last run, total runs, success rate."""
        q = (
            select(
                DBCollectorRun.unit_label,
                DBCollectorRun.kind,
                func.count(DBCollectorRun.id).label("total_runs"),
                func.sum(func.cast(DBCollectorRun.ok, Integer)).label("success_count"),
                func.max(DBCollectorRun.started_at).label("last_run"),
                func.sum(DBCollectorRun.items_scraped).label("total_items"),
            )
            .group_by(DBCollectorRun.unit_label, DBCollectorRun.kind)
            .order_by(DBCollectorRun.kind, DBCollectorRun.unit_label)
        )
        rows = (await self._s.execute(q)).all()
        return [
            {
                "source": r[0],
                "kind": r[1],
                "total_runs": r[2],
                "success_rate": round((r[3] or 0) / max(r[2], 1) * 100, 0),
                "last_run": r[4].isoformat() if r[4] else None,
                "total_items": r[5] or 0,
            }
            for r in rows
        ]
