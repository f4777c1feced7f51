from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .cache import ContentCache
from .config import cache_ttl, feed_registry
from .datamodels import RelatedResponse, SearchResponse, SearchResult
from .search import find_related, search_items
from .source_manager import get_source

logger = logging.getLogger("feed_assistant")

SEARCH_FAILED_MESSAGE = "An error occurred while searching for information."
NO_RELATED_MESSAGE = "No related content found."
RELATED_FAILED_MESSAGE = "An error occurred while looking up related content."


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SiteSearch:
    """Keyword search over the cached feed sections of the site."""

    def __init__(self, config: Dict[str, Any], cache: Optional[ContentCache] = None):
        self.config = config
        if cache is None:
            cache = ContentCache(
                source=get_source(config),
                feed_urls=feed_registry(config),
                ttl=cache_ttl(config),
            )
        self.cache = cache

    def sections(self) -> List[str]:
        return list(self.cache.feed_urls)

    def search(self, section: str, query: str) -> SearchResponse:
        """Search one section. Never raises; failures are reported in ``message``."""
        logger.info("Tool used: search section=%r query=%r", section, query)
        started = time.monotonic()
        try:
            normalized = (section or "").strip().lower()
            if not self.cache.has_feed(normalized):
                logger.info("No cache available for section %s", normalized)
                return SearchResponse(
                    section=section,
                    query=query,
                    results=[],
                    timestamp=_now_iso(),
                    message=f"No cached content is available for section '{section}'.",
                )

            self.cache.ensure_fresh(normalized)
            results: List[SearchResult] = search_items(
                self.cache.get_items(normalized), query
            )
            logger.info(
                "Found %d results in section %s (%.3fs)",
                len(results),
                normalized,
                time.monotonic() - started,
            )
            return SearchResponse(
                section=section, query=query, results=results, timestamp=_now_iso()
            )
        except Exception:
            logger.exception("Search failed for section %r query %r", section, query)
            return SearchResponse(
                section=section,
                query=query,
                results=[],
                timestamp=_now_iso(),
                message=SEARCH_FAILED_MESSAGE,
            )

    def related(self, section: str, query: str) -> RelatedResponse:
        """Items related to what ``query`` finds in ``section``. Never raises."""
        logger.info("Tool used: related section=%r query=%r", section, query)
        try:
            found = self.search(section, query)
            if not found.results:
                return RelatedResponse(
                    section=section, query=query, related=[], message=NO_RELATED_MESSAGE
                )

            normalized = (section or "").strip().lower()
            related = find_related(self.cache.get_items(normalized), found.results)
            logger.info("Found %d related items in section %s", len(related), normalized)
            return RelatedResponse(section=section, query=query, related=related)
        except Exception as e:
            logger.exception("Related lookup failed for section %r query %r", section, query)
            return RelatedResponse(
                section=section,
                query=query,
                related=[],
                message=RELATED_FAILED_MESSAGE,
                error=str(e),
            )
