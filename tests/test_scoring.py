import pytest

from core.models import RedditSort, StoryRecord, StoryType
from core.scoring import DEFAULT_TABLES, ScoringTables, ViralityScorer, round_half_up
from tests.helpers import news, reddit


@pytest.fixture
def scorer():
    return ViralityScorer()


class TestNewsScoring:
    @pytest.mark.parametrize(
        "position, expected",
        [(1, 40), (3, 40), (4, 30), (5, 30), (6, 20), (10, 20), (11, 0), (250, 0)],
    )
    def test_position_buckets_unknown_source(self, scorer, position, expected):
        assert scorer.score(news(source="example", position=position)) == expected

    def test_bbc_second_place(self, scorer):
        assert scorer.score(news(source="BBC", position=2)) == 48

    @pytest.mark.parametrize(
        "source, expected",
        [("bbc", 48), ("reuters", 52), ("apnews", 52), ("vox", 40), ("buzzfeed", 32)],
    )
    def test_source_weights_top_slot(self, scorer, source, expected):
        assert scorer.score(news(source=source, position=1)) == expected

    def test_weight_lookup_is_case_insensitive(self, scorer):
        record = StoryRecord(title="t", url="u", source="Reuters", type=StoryType.NEWS, position=4)
        assert scorer.score(record) == 39  # 30 * 1.3

    def test_missing_position_scores_as_tenth_slot(self, scorer):
        assert scorer.score(news(source="example", position=None)) == 20
        assert scorer.score(news(source="bbc", position=None)) == 24

    def test_plain_string_type_scores_on_news_branch(self, scorer):
        assert scorer.score(StoryRecord(title="t", url="u", source="BBC", type="news", position=2)) == 48
        assert scorer.score(StoryRecord(title="t", url="u", source="BBC", type="news")) == 24

    def test_buzzfeed_below_threshold(self, scorer):
        assert scorer.score(news(source="buzzfeed", position=7)) == 16


class TestRedditScoring:
    def test_hot_1200_upvotes(self, scorer):
        assert scorer.score(reddit(upvotes=1200, sort=RedditSort.HOT)) == 36

    @pytest.mark.parametrize(
        "upvotes, expected",
        [(0, 0), (99, 0), (100, 10), (499, 10), (500, 20), (999, 20), (1000, 30), (4999, 30), (5000, 40), (10**7, 40)],
    )
    def test_upvote_thresholds_without_bonus(self, scorer, upvotes, expected):
        assert scorer.score(reddit(upvotes=upvotes, sort=RedditSort.TOP)) == expected

    @pytest.mark.parametrize(
        "sort, expected",
        [(RedditSort.HOT, 48), (RedditSort.RISING, 44), (RedditSort.NEW, 40), (RedditSort.TOP, 40), (None, 40)],
    )
    def test_sort_multipliers(self, scorer, sort, expected):
        assert scorer.score(reddit(upvotes=6000, sort=sort)) == expected

    def test_plain_string_sort_gets_its_multiplier(self, scorer):
        record = StoryRecord(title="t", url="u", source="r/news", type="reddit", upvotes=1200, sort="hot")
        assert scorer.score(record) == 36

    def test_missing_upvotes_scores_zero(self, scorer):
        record = StoryRecord.reddit(title="t", url="u", subreddit="news", upvotes=None, sort=RedditSort.HOT)
        assert scorer.score(record) == 0


class TestBounds:
    def test_scores_are_clamped_to_max(self):
        tables = ScoringTables(source_weights={"BBC": 5.0})
        assert ViralityScorer(tables).score(news(source="bbc", position=1)) == 100

    def test_scores_never_negative(self):
        tables = ScoringTables(sort_multipliers={"hot": -2.0})
        assert ViralityScorer(tables).score(reddit(upvotes=6000, sort=RedditSort.HOT)) == 0

    def test_rounds_half_up(self):
        tables = ScoringTables(source_weights={"HALF": 1.0625})  # 40 * 1.0625 = 42.5
        assert ViralityScorer(tables).score(news(source="half", position=1)) == 43
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4999) == 2

    def test_every_default_combination_in_range(self, scorer):
        for position in [None, 1, 4, 6, 11]:
            for source in ["bbc", "reuters", "apnews", "vox", "buzzfeed", "other"]:
                value = scorer.score(news(source=source, position=position))
                assert isinstance(value, int) and 0 <= value <= 100
        for upvotes in [None, 0, 150, 600, 1500, 9000]:
            for sort in list(RedditSort) + [None]:
                record = StoryRecord.reddit(title="t", url="u", subreddit="x", upvotes=upvotes, sort=sort)
                value = scorer.score(record)
                assert isinstance(value, int) and 0 <= value <= 100


class TestTables:
    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_TABLES.source_weights["BBC"] = 9.0

    def test_custom_table_does_not_alias_caller_dict(self):
        weights = {"bbc": 2.0}
        tables = ScoringTables(source_weights=weights)
        weights["bbc"] = 0.0
        assert tables.source_weights["BBC"] == 2.0

    def test_apply_keeps_record_untouched(self, scorer):
        record = news(source="bbc", position=2)
        scored = scorer.apply(record)
        assert scored.story is record
        assert scored.virality_score == 48

    def test_score_all_preserves_order(self, scorer):
        records = [news("A", position=11), reddit("B", upvotes=6000), news("C", position=1)]
        assert [s.story.title for s in scorer.score_all(records)] == ["A", "B", "C"]
