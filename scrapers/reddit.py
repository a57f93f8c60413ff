"""Reddit collector using httpx (JSON listing API)."""

from __future__ import annotations

import logging

import httpx

from core.models import RedditSort, StoryRecord, UnitOfWork
from scrapers.base import DEFAULT_MAX_ITEMS, BaseCollector, RateLimiter

log = logging.getLogger(__name__)

USER_AGENT = "DailyScope/1.0 (most-read digest; github.com)"


def _upvotes(raw) -> int:
    try:
        return max(int(raw), 0)
    except (TypeError, ValueError):
        return 0


def parse_listing(
    data: dict, subreddit: str, sort: RedditSort, time_window: str = "day"
) -> list[StoryRecord]:
    records: list[StoryRecord] = []
    for child in data.get("data", {}).get("children", []):
        post = child.get("data", {})
        title = post.get("title") or ""
        if not title.strip():
            continue

        records.append(
            StoryRecord.reddit(
                title=title,
                url=f"https://reddit.com{post.get('permalink', '')}",
                subreddit=subreddit,
                upvotes=_upvotes(post.get("score")),
                sort=sort,
                time_window=time_window,
            )
        )
    return records


class RedditCollector(BaseCollector):
    source_name = "reddit"

    def __init__(
        self,
        max_items: int = DEFAULT_MAX_ITEMS,
        request_delay: float = 2.0,
        time_window: str = "day",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(max_items)
        self._time_window = time_window
        self._timeout = timeout
        self._transport = transport
        self.limiter = RateLimiter(delay_seconds=request_delay)

    async def _fetch(self, unit: UnitOfWork) -> list[StoryRecord]:
        sort = unit.sort or RedditSort.HOT
        url = f"https://www.reddit.com/r/{unit.source}/{sort.value}.json"
        params = {"limit": self.max_items, "t": self._time_window, "raw_json": 1}

        async with httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            resp = await client.get(url, params=params)
            resp.raise_for_status()
            data = resp.json()

        log.debug("r/%s (%s): status %d", unit.source, sort.value, resp.status_code)
        return parse_listing(data, unit.source, sort, self._time_window)
