"""Virality scoring: map a news or reddit story onto one 0-100 scale."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from core.models import RedditSort, ScoredStory, StoryRecord, StoryType


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ScoringTables:
    """Weights and thresholds used by :class:`ViralityScorer`.

    ``position_buckets`` are ``(max_position, base)`` pairs checked in order;
    ``upvote_thresholds`` are ``(min_upvotes, base)`` pairs checked in order.
    Anything matching no bucket gets a base of 0.
    """

    position_buckets: tuple[tuple[int, int], ...] = ((3, 40), (5, 30), (10, 20))
    default_position: int = 10
    source_weights: Mapping[str, float] = field(
        default_factory=lambda: _frozen(
            {"BBC": 1.2, "REUTERS": 1.3, "APNEWS": 1.3, "VOX": 1.0, "BUZZFEED": 0.8}
        )
    )
    default_source_weight: float = 1.0
    upvote_thresholds: tuple[tuple[int, int], ...] = ((5000, 40), (1000, 30), (500, 20), (100, 10))
    sort_multipliers: Mapping[RedditSort, float] = field(
        default_factory=lambda: _frozen({RedditSort.HOT: 1.2, RedditSort.RISING: 1.1})
    )
    max_score: int = 100

    def __post_init__(self) -> None:
        # Accept plain dicts from callers but never keep a mutable reference.
        object.__setattr__(self, "source_weights", _frozen(
            {k.upper(): v for k, v in self.source_weights.items()}
        ))
        object.__setattr__(self, "sort_multipliers", _frozen(
            {RedditSort(k): v for k, v in self.sort_multipliers.items()}
        ))


DEFAULT_TABLES = ScoringTables()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ViralityScorer:
    def __init__(self, tables: ScoringTables = DEFAULT_TABLES) -> None:
        self._tables = tables

    @property
    def tables(self) -> ScoringTables:
        return self._tables

    def score(self, record: StoryRecord) -> int:
        """Return the virality score of ``record``, always an int in ``[0, max_score]``."""
        if record.type is StoryType.NEWS:
            raw = self._news_base(record) * self._source_weight(record.source)
        else:
            raw = self._reddit_base(record) * self._sort_multiplier(record.sort)
        return max(0, min(round_half_up(raw), self._tables.max_score))

    def apply(self, record: StoryRecord) -> ScoredStory:
        return ScoredStory(story=record, virality_score=self.score(record))

    def score_all(self, records: Iterable[StoryRecord]) -> list[ScoredStory]:
        return [self.apply(r) for r in records]

    # ── branches ─────────────────────────────────────────────────────

    def _news_base(self, record: StoryRecord) -> int:
        # An absent position counts as the 10th slot, not as unranked.
        position = record.position if record.position is not None else self._tables.default_position
        for max_position, base in self._tables.position_buckets:
            if position <= max_position:
                return base
        return 0

    def _source_weight(self, source: str) -> float:
        return self._tables.source_weights.get(source.upper(), self._tables.default_source_weight)

    def _reddit_base(self, record: StoryRecord) -> int:
        upvotes = record.upvotes if record.upvotes is not None else 0
        for min_upvotes, base in self._tables.upvote_thresholds:
            if upvotes >= min_upvotes:
                return base
        return 0

    def _sort_multiplier(self, sort: RedditSort | None) -> float:
        if sort is None:
            return 1.0
        return self._tables.sort_multipliers.get(sort, 1.0)
