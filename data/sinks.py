"""Destinations for a run's ranked stories."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections.abc import Sequence
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.errors import FatalInitError
from core.models import RunSummary, ScoredStory
from data.database import get_session
from data.repositories import RunLogRepository, StoryRepository

log = logging.getLogger(__name__)


class JsonFileSink:
    """Writes the ranked list as a JSON array, replacing the previous output."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FatalInitError(f"cannot prepare output directory {self.path.parent}: {exc}") from exc

    async def write(self, stories: Sequence[ScoredStory], summary: RunSummary | None = None) -> bool:
        payload = json.dumps([s.to_dict() for s in stories], ensure_ascii=False, indent=2)
        try:
            await asyncio.to_thread(self.path.write_text, payload, encoding="utf-8")
        except OSError as exc:
            log.error("Failed to write %s: %s", self.path, exc)
            return False
        log.info("Wrote %d stories to %s", len(stories), self.path)
        return True


class DatabaseSink:
    """Persists the ranking and, when a summary is given, the run log."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._factory = session_factory

    async def write(self, stories: Sequence[ScoredStory], summary: RunSummary | None = None) -> bool:
        run_id = summary.run_id if summary else uuid.uuid4().hex[:12]
        try:
            async with get_session(self._factory) as session:
                if summary is not None:
                    await RunLogRepository(session).log_run(summary)
                await StoryRepository(session).save_ranking(run_id, stories)
        except SQLAlchemyError as exc:
            log.error("Failed to persist ranking for run %s: %s", run_id, exc)
            return False
        return True


class FanOutSink:
    """Writes to every wrapped sink; succeeds only if all of them do."""

    def __init__(self, *sinks) -> None:
        self._sinks = sinks

    async def write(self, stories: Sequence[ScoredStory], summary: RunSummary | None = None) -> bool:
        ok = True
        for sink in self._sinks:
            ok = await sink.write(stories, summary) and ok
        return ok
