from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod

from core.models import CollectResult, StoryRecord, UnitOfWork

log = logging.getLogger(__name__)

DEFAULT_MAX_ITEMS = 10


class BaseCollector(ABC):
    """Collects one unit of work at a time.

    ``collect`` is the failure boundary: whatever ``_fetch`` raises is logged
    and returned as a failed ``CollectResult``, never propagated.
    """

    source_name: str
    limiter: RateLimiter | None = None

    def __init__(self, max_items: int = DEFAULT_MAX_ITEMS) -> None:
        self.max_items = max_items

    async def throttle(self) -> None:
        """Wait for this collector's request slot. Not counted against a unit's timeout."""
        if self.limiter is not None:
            await self.limiter.wait()

    async def collect(self, unit: UnitOfWork) -> CollectResult:
        t0 = time.monotonic()
        try:
            records = await self._fetch(unit)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log.warning("%s scrape error for %s: %s", self.source_name, unit.label, exc)
            return CollectResult.failure(unit, f"{type(exc).__name__}: {exc}", time.monotonic() - t0)

        batch = [r for r in records if r.is_well_formed][: self.max_items]
        log.info("Scraped %s: %d stories", unit.label, len(batch))
        return CollectResult.success(unit, batch, time.monotonic() - t0)

    @abstractmethod
    async def _fetch(self, unit: UnitOfWork) -> list[StoryRecord]:
        """Fetch the raw records for ``unit``. May raise."""
        ...


class RateLimiter:
    """Simple token-bucket style rate limiter."""

    def __init__(self, delay_seconds: float = 2.0) -> None:
        self._delay = delay_seconds
        self._lock = asyncio.Lock()
        self._last_request: float = 0.0

    async def wait(self) -> None:
        async with self._lock:
            now = asyncio.get_running_loop().time()
            elapsed = now - self._last_request
            if elapsed < self._delay:
                await asyncio.sleep(self._delay - elapsed)
            self._last_request = asyncio.get_running_loop().time()
