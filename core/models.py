from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

TITLE_MAX_LENGTH = 200


class StoryType(str, Enum):
    NEWS = "news"
    REDDIT = "reddit"


class RedditSort(str, Enum):
    HOT = "hot"
    RISING = "rising"
    NEW = "new"
    TOP = "top"
    CONTROVERSIAL = "controversial"


@dataclass(frozen=True)
class StoryRecord:
    """A single story normalised from a news homepage or a subreddit listing.

    Only the fields belonging to ``type`` are populated: ``position`` for news,
    ``upvotes``/``sort``/``time_window`` for reddit.
    """

    title: str
    url: str
    source: str  # "BBC", "REUTERS", ... or "r/<subreddit>"
    type: StoryType
    position: int | None = None
    upvotes: int | None = None
    sort: RedditSort | None = None
    time_window: str | None = None

    def __post_init__(self) -> None:
        # Plain strings ("news", "hot") are accepted and normalised to the enums.
        object.__setattr__(self, "type", StoryType(self.type))
        if self.sort is not None:
            object.__setattr__(self, "sort", RedditSort(self.sort))
        object.__setattr__(self, "title", self.title[:TITLE_MAX_LENGTH])

        if self.type is StoryType.NEWS:
            if self.upvotes is not None or self.sort is not None or self.time_window is not None:
                raise ValueError("news records carry no reddit fields")
            if self.position is not None and self.position < 1:
                raise ValueError(f"position must be >= 1, got {self.position}")
        else:
            if self.position is not None:
                raise ValueError("reddit records carry no position")
            if self.upvotes is not None and self.upvotes < 0:
                raise ValueError(f"upvotes must be >= 0, got {self.upvotes}")

    @classmethod
    def news(cls, *, title: str, url: str, source: str, position: int | None = None) -> StoryRecord:
        return cls(
            title=title.strip(),
            url=url.strip(),
            source=source.upper(),
            type=StoryType.NEWS,
            position=position,
        )

    @classmethod
    def reddit(
        cls,
        *,
        title: str,
        url: str,
        subreddit: str,
        upvotes: int | None = None,
        sort: RedditSort | None = None,
        time_window: str | None = "day",
    ) -> StoryRecord:
        return cls(
            title=title.strip(),
            url=url.strip(),
            source=f"r/{subreddit}",
            type=StoryType.REDDIT,
            upvotes=upvotes,
            sort=sort,
            time_window=time_window,
        )

    @property
    def is_well_formed(self) -> bool:
        return bool(self.title and self.url)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": self.title,
            "url": self.url,
            "source": self.source,
            "type": self.type.value,
        }
        if self.type is StoryType.NEWS:
            data["position"] = self.position
        else:
            data["score"] = self.upvotes
            data["sort"] = self.sort.value if self.sort else None
            data["time"] = self.time_window
        return data


@dataclass(frozen=True)
class ScoredStory:
    story: StoryRecord
    virality_score: int

    def to_dict(self) -> dict[str, Any]:
        return {**self.story.to_dict(), "viralityScore": self.virality_score}


@dataclass(frozen=True)
class UnitOfWork:
    """One news source, or one (subreddit, sort) pair, collected independently."""

    kind: StoryType
    source: str
    sort: RedditSort | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", StoryType(self.kind))
        if self.sort is not None:
            object.__setattr__(self, "sort", RedditSort(self.sort))

    @property
    def label(self) -> str:
        if self.kind is StoryType.REDDIT:
            sort = self.sort.value if self.sort else RedditSort.HOT.value
            return f"r/{self.source} ({sort})"
        return self.source


@dataclass(frozen=True)
class CollectResult:
    """Outcome of collecting one unit of work: a batch of records or a failure reason."""

    unit: UnitOfWork
    records: tuple[StoryRecord, ...] = ()
    error: str | None = None
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls, unit: UnitOfWork, records: list[StoryRecord] | tuple[StoryRecord, ...], duration_seconds: float = 0.0
    ) -> CollectResult:
        return cls(unit=unit, records=tuple(records), duration_seconds=duration_seconds)

    @classmethod
    def failure(cls, unit: UnitOfWork, reason: str, duration_seconds: float = 0.0) -> CollectResult:
        return cls(unit=unit, error=reason or "unknown error", duration_seconds=duration_seconds)


@dataclass
class RunSummary:
    """Outcome of a single pipeline run."""

    run_id: str
    started_at: datetime
    results: list[CollectResult]
    ranked: list[ScoredStory]
    stories_found: int
    sink_ok: bool
    duration_seconds: float

    @property
    def failed_units(self) -> list[str]:
        return [r.unit.label for r in self.results if not r.ok]

    @property
    def top_story(self) -> ScoredStory | None:
        return self.ranked[0] if self.ranked else None
