from __future__ import annotations

import logging
from collections.abc import Iterable

from core.models import CollectResult, StoryRecord

log = logging.getLogger(__name__)


def aggregate(results: Iterable[CollectResult]) -> list[StoryRecord]:
    """Concatenate collector batches in arrival order.

    Failed batches contribute nothing; they are logged and skipped so one
    broken source never empties the whole run.
    """
    stories: list[StoryRecord] = []
    for result in results:
        if not result.ok:
            log.warning("Skipping %s: %s", result.unit.label, result.error)
            continue

        kept = [r for r in result.records if r.is_well_formed]
        dropped = len(result.records) - len(kept)
        if dropped:
            log.debug("%s: dropped %d malformed records", result.unit.label, dropped)
        stories.extend(kept)
    return stories
