from __future__ import annotations

from fastapi import APIRouter, Query

from data.database import get_session
from data.repositories import StoryRepository

router = APIRouter(prefix="/api/stories", tags=["stories"])


def _story_to_dict(s) -> dict:
    return {
        "rank": s.rank,
        "run_id": s.run_id,
        "title": s.title,
        "url": s.url,
        "source": s.source,
        "type": s.story_type,
        "position": s.position,
        "score": s.upvotes,
        "sort": s.sort,
        "viralityScore": s.virality_score,
        "ranked_at": s.ranked_at.isoformat() if s.ranked_at else None,
    }


@router.get("")
async def latest_stories(limit: int = Query(20, ge=1, le=100)):
    async with get_session() as session:
        repo = StoryRepository(session)
        stories = await repo.latest_ranking(limit=limit)
        return [_story_to_dict(s) for s in stories]
