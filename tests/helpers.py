"""Record builders and fakes shared by the tests."""

from __future__ import annotations

from core.models import CollectResult, RedditSort, StoryRecord, StoryType, UnitOfWork
from scrapers.base import BaseCollector


def news(title="Headline", source="bbc", position=1, url=None) -> StoryRecord:
    return StoryRecord.news(
        title=title,
        url=url or f"https://example.com/{title.lower().replace(' ', '-')}",
        source=source,
        position=position,
    )


def reddit(title="Post", sub="news", upvotes=0, sort=RedditSort.HOT, url=None) -> StoryRecord:
    return StoryRecord.reddit(
        title=title,
        url=url or f"https://reddit.com/r/{sub}/comments/{title.lower().replace(' ', '_')}",
        subreddit=sub,
        upvotes=upvotes,
        sort=sort,
    )


def news_unit(source="bbc") -> UnitOfWork:
    return UnitOfWork(kind=StoryType.NEWS, source=source)


def reddit_unit(sub="news", sort=RedditSort.HOT) -> UnitOfWork:
    return UnitOfWork(kind=StoryType.REDDIT, source=sub, sort=sort)


def ok(unit: UnitOfWork, *records: StoryRecord) -> CollectResult:
    return CollectResult.success(unit, list(records))


class StaticCollector(BaseCollector):
    """Serves canned batches keyed by unit label; raises for labels in ``failures``."""

    source_name = "static"

    def __init__(self, batches=None, failures=None, max_items=10) -> None:
        super().__init__(max_items)
        self.batches = batches or {}
        self.failures = failures or {}
        self.calls: list[UnitOfWork] = []

    async def _fetch(self, unit):
        self.calls.append(unit)
        if unit.label in self.failures:
            raise self.failures[unit.label]
        return list(self.batches.get(unit.label, []))


class RecordingSink:
    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.writes = []

    async def write(self, stories, summary=None) -> bool:
        self.writes.append((list(stories), summary))
        return self.result


