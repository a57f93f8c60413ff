"""Daily Scope — entry point."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path

import certifi
import click
import uvicorn

# Fix SSL cert resolution for curl_cffi (used by Scrapling)
os.environ.setdefault("CURL_CA_BUNDLE", certifi.where())
os.environ.setdefault("SSL_CERT_FILE", certifi.where())

from api.app import create_app  # noqa: E402
from api.routers.scraper_control import set_scheduler  # noqa: E402
from config.run_config import RunConfig, load_run_config  # noqa: E402
from config.settings import settings  # noqa: E402
from core.errors import FatalInitError  # noqa: E402
from core.models import RunSummary, StoryType  # noqa: E402
from core.pipeline import DailyScopePipeline, StorySink  # noqa: E402
from data.database import init_db  # noqa: E402
from data.sinks import DatabaseSink, FanOutSink, JsonFileSink  # noqa: E402
from scrapers.news import NewsCollector  # noqa: E402
from scrapers.reddit import RedditCollector  # noqa: E402
from scrapers.scheduler import PipelineScheduler  # noqa: E402

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
log = logging.getLogger(__name__)


def build_pipeline(sink: StorySink) -> DailyScopePipeline:
    collectors = {
        StoryType.NEWS: NewsCollector(
            max_items=settings.MAX_ITEMS_PER_SOURCE,
            request_delay=settings.SCRAPE_REQUEST_DELAY,
        ),
        StoryType.REDDIT: RedditCollector(
            max_items=settings.MAX_ITEMS_PER_SOURCE,
            request_delay=settings.SCRAPE_REQUEST_DELAY,
            time_window=settings.REDDIT_TIME_WINDOW,
        ),
    }
    return DailyScopePipeline(
        collectors,
        sink,
        collector_timeout=settings.COLLECTOR_TIMEOUT_SECONDS,
        max_concurrency=settings.MAX_CONCURRENT_COLLECTORS,
    )


async def run_once(config: RunConfig, output_path: str | Path, use_db: bool = True) -> RunSummary:
    sinks: list[StorySink] = [JsonFileSink(output_path)]
    if use_db:
        await init_db()
        sinks.append(DatabaseSink())
    pipeline = build_pipeline(FanOutSink(*sinks))
    return await pipeline.run(config)


# ── API server ───────────────────────────────────────────────────────

app = create_app()


@app.on_event("startup")
async def on_startup() -> None:
    log.info("Initialising database…")
    await init_db()

    log.info("Starting pipeline scheduler…")
    sink = FanOutSink(JsonFileSink(settings.OUTPUT_PATH), DatabaseSink())
    scheduler = PipelineScheduler(build_pipeline(sink))
    app.state.scheduler = scheduler
    set_scheduler(scheduler)
    scheduler.start()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    if hasattr(app.state, "scheduler"):
        app.state.scheduler.stop()
        log.info("Pipeline scheduler stopped.")


# ── CLI ──────────────────────────────────────────────────────────────


@click.group()
def cli():
    pass


@cli.command()
@click.option("--input", "input_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="JSON run input (newsSources, redditSubs, redditSorts, maxResults).")
@click.option("--output", "output_path", default=settings.OUTPUT_PATH, show_default=True)
@click.option("--db/--no-db", "use_db", default=True, help="Also persist the ranking to the database.")
def run(input_path: Path | None, output_path: str, use_db: bool):
    """Collect, score and rank once, then exit."""
    config = load_run_config(input_path)
    try:
        summary = asyncio.run(run_once(config, output_path, use_db))
    except FatalInitError as exc:
        log.error("Cannot start run: %s", exc)
        sys.exit(1)

    click.echo(f"Done! Found {summary.stories_found} stories, kept {len(summary.ranked)}.")
    if summary.top_story:
        click.echo(f"Top story: {summary.top_story.story.title} ({summary.top_story.virality_score})")


@cli.command()
@click.option("--port", default=settings.DASHBOARD_PORT, show_default=True)
def serve(port: int):
    """Serve the API and run the pipeline on a schedule."""
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=False)


if __name__ == "__main__":
    cli()
