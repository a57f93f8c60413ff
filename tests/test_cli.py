from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from click.testing import CliRunner

import main
from core.errors import FatalInitError
from core.models import CollectResult, RunSummary, ScoredStory
from tests.helpers import news, news_unit


def _summary(ranked, failed=0) -> RunSummary:
    results = [CollectResult.failure(news_unit(f"src{i}"), "down") for i in range(failed)]
    return RunSummary(
        run_id="cli",
        started_at=datetime.now(timezone.utc),
        results=results,
        ranked=ranked,
        stories_found=len(ranked),
        sink_ok=True,
        duration_seconds=0.1,
    )


@pytest.fixture
def runner():
    return CliRunner()


def test_run_reports_top_story(monkeypatch, runner, tmp_path):
    run_once = AsyncMock(return_value=_summary([ScoredStory(news("Top"), 52)]))
    monkeypatch.setattr(main, "run_once", run_once)

    result = runner.invoke(main.cli, ["run", "--no-db", "--output", str(tmp_path / "o.json")])

    assert result.exit_code == 0, result.output
    assert "Found 1 stories" in result.output
    assert "Top story: Top (52)" in result.output
    config, output_path, use_db = run_once.await_args.args
    assert output_path == str(tmp_path / "o.json")
    assert use_db is False
    assert config.max_results == 20


def test_partial_failure_still_exits_zero(monkeypatch, runner):
    monkeypatch.setattr(main, "run_once", AsyncMock(return_value=_summary([], failed=3)))
    result = runner.invoke(main.cli, ["run", "--no-db"])
    assert result.exit_code == 0


def test_fatal_init_failure_exits_non_zero(monkeypatch, runner):
    monkeypatch.setattr(main, "run_once", AsyncMock(side_effect=FatalInitError("no database")))
    result = runner.invoke(main.cli, ["run"])
    assert result.exit_code == 1


def test_input_document_is_used(monkeypatch, runner, tmp_path):
    path = tmp_path / "input.json"
    path.write_text('{"newsSources": ["vox"], "maxResults": 3}', encoding="utf-8")
    run_once = AsyncMock(return_value=_summary([]))
    monkeypatch.setattr(main, "run_once", run_once)

    result = runner.invoke(main.cli, ["run", "--input", str(path), "--no-db"])

    assert result.exit_code == 0
    config = run_once.await_args.args[0]
    assert config.news_sources == ("vox",)
    assert config.max_results == 3


@pytest.mark.asyncio
async def test_run_once_writes_json_output(monkeypatch, tmp_path):
    class FakePipeline:
        def __init__(self, sink):
            self.sink = sink

        async def run(self, config):
            ranked = [ScoredStory(news("A"), 48)]
            await self.sink.write(ranked)
            return _summary(ranked)

    monkeypatch.setattr(main, "build_pipeline", FakePipeline)
    output = tmp_path / "storage" / "OUTPUT.json"

    summary = await main.run_once(main.RunConfig(), output, use_db=False)

    assert summary.ranked[0].story.title == "A"
    assert output.exists()


def test_build_pipeline_wires_both_collectors():
    pipeline = main.build_pipeline(AsyncMock())
    assert set(pipeline._collectors) == {main.StoryType.NEWS, main.StoryType.REDDIT}
