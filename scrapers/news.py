from __future__ import annotations

import asyncio
import logging
from urllib.parse import urljoin

from scrapling import Fetcher

from core.errors import CollectorError
from core.models import StoryRecord, UnitOfWork
from scrapers.base import DEFAULT_MAX_ITEMS, BaseCollector, RateLimiter

log = logging.getLogger(__name__)

# Per-source extraction config.  ``list_selector`` matches the entries of the
# site's most-read list; title and link are looked up inside each entry.
NEWS_SOURCE_CONFIGS: dict[str, dict] = {
    "bbc": {
        "url": "https://www.bbc.com/news",
        "list_selector": ".most-read__list-items li",
        "title_selector": "h3",
        "link_selector": "a",
    },
    "reuters": {
        "url": "https://www.reuters.com",
        "list_selector": ".story-box-collection li, .story-list li",
        "title_selector": "h3, a",
        "link_selector": "a",
    },
    "apnews": {
        "url": "https://apnews.com/hub/ap-top-25",
        "list_selector": ".PageList-Items li, .headline",
        "title_selector": "h3, a",
        "link_selector": "a",
    },
    "vox": {
        "url": "https://www.vox.com",
        "list_selector": ".crop-21-9 li, .most-ember-widget li",
        "title_selector": "h3, a",
        "link_selector": "a",
    },
    "buzzfeed": {
        "url": "https://www.buzzfeednews.com",
        "list_selector": ".news-article, .story-card",
        "title_selector": "h2, h3",
        "link_selector": "a",
    },
}


def _first(el, selector: str):
    found = el.css(selector)
    return found[0] if found else None


def parse_most_read(source: str, config: dict, page, max_items: int = DEFAULT_MAX_ITEMS) -> list[StoryRecord]:
    """Turn a fetched homepage into ranked news records.

    A story's position is its 1-based index in the most-read list, so entries
    that fail to parse still use up their slot.
    """
    records: list[StoryRecord] = []
    for index, el in enumerate(page.css(config["list_selector"])[:max_items]):
        try:
            title_el = _first(el, config["title_selector"])
            link_el = _first(el, config["link_selector"])
            title = title_el.get_all_text(separator=" ", strip=True) if title_el else ""
            href = link_el.attrib.get("href", "") if link_el else el.attrib.get("href", "")
        except Exception as exc:
            log.debug("%s: skipping list entry %d: %s", source, index + 1, exc)
            continue

        if not title or not href:
            continue

        records.append(
            StoryRecord.news(
                title=title,
                url=urljoin(config["url"], href.strip()),
                source=source,
                position=index + 1,
            )
        )
    return records


class NewsCollector(BaseCollector):
    source_name = "news"

    def __init__(
        self,
        max_items: int = DEFAULT_MAX_ITEMS,
        request_delay: float = 2.0,
        configs: dict[str, dict] | None = None,
    ) -> None:
        super().__init__(max_items)
        self._configs = configs if configs is not None else NEWS_SOURCE_CONFIGS
        self.limiter = RateLimiter(request_delay)

    async def _fetch(self, unit: UnitOfWork) -> list[StoryRecord]:
        config = self._configs.get(unit.source)
        if config is None:
            raise CollectorError(f"no extraction config for news source '{unit.source}'")

        page = await asyncio.to_thread(self._get_page, config["url"])
        return parse_most_read(unit.source, config, page, self.max_items)

    @staticmethod
    def _get_page(url: str):
        fetcher = Fetcher()
        page = fetcher.get(url, stealthy_headers=True, follow_redirects=True)
        if page.status != 200:
            raise ConnectionError(f"HTTP {page.status}")
        return page
