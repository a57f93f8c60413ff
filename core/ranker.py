from __future__ import annotations

from collections.abc import Iterable

from core.models import ScoredStory

DEFAULT_MAX_RESULTS = 20


def rank(scored: Iterable[ScoredStory], max_results: int = DEFAULT_MAX_RESULTS) -> list[ScoredStory]:
    """Highest virality first, ties kept in input order, cut to ``max_results``.

    ``max_results <= 0`` means no results, not "unlimited".
    """
    if max_results <= 0:
        return []
    # sorted() is stable, and reverse=True keeps equal keys in their original order
    ordered = sorted(scored, key=lambda s: s.virality_score, reverse=True)
    return ordered[:max_results]
