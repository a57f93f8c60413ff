"""Per-run configuration: which sources to collect and how many results to keep.

Every field falls back to its documented default on its own when it is missing
or unusable, so a half-broken input document still produces a run.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from config.settings import Settings, settings as default_settings
from core.models import RedditSort
from core.ranker import DEFAULT_MAX_RESULTS

log = logging.getLogger(__name__)

DEFAULT_NEWS_SOURCES = ("bbc", "reuters", "apnews")
DEFAULT_REDDIT_SUBS = ("news", "worldnews")
DEFAULT_REDDIT_SORTS = (RedditSort.HOT, RedditSort.RISING)


def _split(value: Any) -> Any:
    if isinstance(value, str):
        return value.split(",")
    return value


def _clean_names(values: list[Any], *, strip_prefix: str = "") -> list[str]:
    cleaned: list[str] = []
    for v in values:
        if not isinstance(v, str):
            continue
        name = v.strip().lower()
        if strip_prefix and name.startswith(strip_prefix):
            name = name[len(strip_prefix):]
        if name and name not in cleaned:
            cleaned.append(name)
    return cleaned


class RunConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    news_sources: tuple[str, ...] = Field(DEFAULT_NEWS_SOURCES, alias="newsSources")
    reddit_subs: tuple[str, ...] = Field(DEFAULT_REDDIT_SUBS, alias="redditSubs")
    reddit_sorts: tuple[RedditSort, ...] = Field(DEFAULT_REDDIT_SORTS, alias="redditSorts")
    max_results: int = Field(DEFAULT_MAX_RESULTS, alias="maxResults")

    @field_validator("news_sources", mode="before")
    @classmethod
    def _clean_sources(cls, value: Any) -> Any:
        value = _split(value)
        return _clean_names(value) if isinstance(value, (list, tuple)) else value

    @field_validator("reddit_subs", mode="before")
    @classmethod
    def _clean_subs(cls, value: Any) -> Any:
        value = _split(value)
        return _clean_names(value, strip_prefix="r/") if isinstance(value, (list, tuple)) else value

    @field_validator("reddit_sorts", mode="before")
    @classmethod
    def _clean_sorts(cls, value: Any) -> Any:
        value = _split(value)
        if not isinstance(value, (list, tuple)):
            return value
        known = {s.value for s in RedditSort}
        return [name for name in _clean_names(value) if name in known]

    @field_validator("max_results", mode="before")
    @classmethod
    def _reject_non_integers(cls, value: Any) -> Any:
        # bool is an int subclass and "20.5" would be truncated; both are invalid here
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            raise ValueError("maxResults must be an integer")
        return value

    @field_validator("*", mode="wrap")
    @classmethod
    def _fallback_to_default(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        default = cls.model_fields[info.field_name].default
        try:
            validated = handler(value)
        except ValidationError:
            log.debug("Invalid %s=%r, using default %r", info.field_name, value, default)
            return default
        if isinstance(validated, tuple) and not validated:
            return default
        return validated


def _defaults_from_settings(s: Settings) -> dict[str, Any]:
    return {
        "newsSources": s.NEWS_SOURCES,
        "redditSubs": s.REDDIT_SUBREDDITS,
        "redditSorts": s.REDDIT_SORTS,
        "maxResults": s.MAX_RESULTS,
    }


def load_run_config(input_path: str | Path | None = None, settings: Settings = default_settings) -> RunConfig:
    """Build the run configuration from settings, overlaid with an optional JSON input document."""
    data = _defaults_from_settings(settings)

    if input_path is not None:
        path = Path(input_path)
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.warning("Could not read run input %s (%s); using defaults", path, exc)
            document = None

        if isinstance(document, dict):
            data.update(document)
        elif document is not None:
            log.warning("Run input %s is not a JSON object; using defaults", path)

    return RunConfig.model_validate(data)
