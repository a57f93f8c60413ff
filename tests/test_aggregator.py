import logging

from core.aggregator import aggregate
from core.models import CollectResult, StoryRecord, StoryType
from core.ranker import rank
from core.scoring import ViralityScorer
from tests.helpers import news, news_unit, ok, reddit, reddit_unit


def test_concatenates_batches_in_arrival_order():
    results = [
        ok(news_unit("bbc"), news("b1"), news("b2")),
        ok(reddit_unit("news"), reddit("r1")),
        ok(news_unit("reuters"), news("x1", source="reuters")),
    ]
    assert [s.title for s in aggregate(results)] == ["b1", "b2", "r1", "x1"]


def test_failed_batch_is_skipped_and_logged(caplog):
    results = [
        ok(news_unit("bbc"), news("b1")),
        CollectResult.failure(news_unit("reuters"), "ConnectionError: HTTP 503"),
        ok(reddit_unit("worldnews"), reddit("r1", sub="worldnews")),
    ]
    with caplog.at_level(logging.WARNING, logger="core.aggregator"):
        stories = aggregate(results)

    assert [s.title for s in stories] == ["b1", "r1"]
    assert "reuters" in caplog.text
    assert "HTTP 503" in caplog.text


def test_all_batches_failed_gives_empty_list():
    results = [CollectResult.failure(news_unit(), "boom"), CollectResult.failure(reddit_unit(), "boom")]
    assert aggregate(results) == []


def test_empty_batch_from_failed_collector_does_not_affect_others():
    results = [
        CollectResult.success(news_unit("apnews"), []),
        ok(news_unit("bbc"), news("A", position=1)),
        ok(reddit_unit("news"), reddit("B", upvotes=1200)),
    ]
    ranked = rank(ViralityScorer().score_all(aggregate(results)), 20)
    assert [(s.story.title, s.virality_score) for s in ranked] == [("A", 48), ("B", 36)]


def test_malformed_records_are_filtered():
    untitled = StoryRecord(title="", url="https://example.com/x", source="BBC", type=StoryType.NEWS, position=1)
    no_url = StoryRecord(title="No link", url="", source="BBC", type=StoryType.NEWS, position=2)
    results = [ok(news_unit("bbc"), untitled, news("kept"), no_url)]
    assert [s.title for s in aggregate(results)] == ["kept"]


def test_accepts_generator():
    assert len(aggregate(ok(news_unit(), news(str(i))) for i in range(3))) == 3
