from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import feedparser
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import HTTP_TIMEOUT, INITIAL_RETRY_DELAY, REQUEST_HEADERS, RETRY_ATTEMPTS
from ..datamodels import Feed, Item
from .base import FeedError, FeedSource

logger = logging.getLogger("feed_assistant")


class RSSFeedSource(FeedSource):
    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.timeout = self.config.get("timeout", HTTP_TIMEOUT)
        self.attempts = self.config.get("attempts", RETRY_ATTEMPTS)
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        s = requests.Session()
        s.headers.update(REQUEST_HEADERS)
        retries = Retry(
            total=5, backoff_factor=0.3, status_forcelist=[429, 500, 502, 503, 504]
        )
        adapter = HTTPAdapter(max_retries=retries)
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        return s

    def _retryable_fetch(self, url: str) -> bytes:
        delay = INITIAL_RETRY_DELAY
        for attempt in range(1, self.attempts + 1):
            try:
                logger.debug("Fetching %s (attempt %d/%d)", url, attempt, self.attempts)
                resp = self.session.get(url, timeout=self.timeout)
                resp.raise_for_status()
                logger.debug("Fetched %s OK", url)
                return resp.content
            except requests.RequestException as e:
                logger.debug("Fetch attempt %d failed for %s: %s", attempt, url, e)
                if attempt == self.attempts:
                    logger.warning("All fetch attempts failed for %s", url)
                    raise FeedError(url, e) from e
                time.sleep(delay)
                delay *= 2
        raise FeedError(url, "no fetch attempts configured")

    def fetch(self, url: str) -> Feed:
        started = time.monotonic()
        content = self._retryable_fetch(url)
        parsed = feedparser.parse(content)
        entries = parsed.get("entries") or []
        if parsed.get("bozo") and not entries:
            raise FeedError(url, parsed.get("bozo_exception") or "unparseable feed")

        channel = parsed.get("feed") or {}
        items = [_entry_to_item(entry) for entry in entries]
        logger.info(
            "Loaded feed %s: %d items in %.2fs",
            url,
            len(items),
            time.monotonic() - started,
        )
        return Feed(
            items=items,
            feed_url=url,
            title=_text(channel.get("title")),
            link=_text(channel.get("link")),
            description=_text(channel.get("subtitle")),
            language=_text(channel.get("language")),
            last_build_date=_text(channel.get("updated")),
        )


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _optional_text(value: Any) -> Optional[str]:
    return _text(value) or None


def _categories(entry: Any) -> tuple[str, ...]:
    terms: List[str] = []
    for tag in entry.get("tags") or []:
        term = _text(tag.get("term")) if hasattr(tag, "get") else ""
        if term and term not in terms:
            terms.append(term)
    return tuple(terms)


def _entry_to_item(entry: Any) -> Item:
    return Item(
        id=_optional_text(entry.get("id")),
        title=_text(entry.get("title")),
        link=_text(entry.get("link")),
        description=_text(entry.get("summary") or entry.get("description")),
        published_at=_text(entry.get("published") or entry.get("updated")),
        categories=_categories(entry),
        author=_optional_text(entry.get("author")),
    )
