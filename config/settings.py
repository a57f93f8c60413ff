from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./daily_scope.db"

    # Server
    DASHBOARD_PORT: int = 8001
    LOG_LEVEL: str = "INFO"

    # Default run configuration (overridable per run by the input document)
    NEWS_SOURCES: str = "bbc,reuters,apnews"
    REDDIT_SUBREDDITS: str = "news,worldnews"
    REDDIT_SORTS: str = "hot,rising"
    MAX_RESULTS: int = 20

    # Collection
    REDDIT_TIME_WINDOW: str = "day"
    MAX_ITEMS_PER_SOURCE: int = 10
    SCRAPE_REQUEST_DELAY: float = 2.0
    COLLECTOR_TIMEOUT_SECONDS: float = 30.0
    MAX_CONCURRENT_COLLECTORS: int = 4

    # Output
    OUTPUT_PATH: str = "./storage/OUTPUT.json"
    RUN_INTERVAL_MINUTES: int = 60

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
