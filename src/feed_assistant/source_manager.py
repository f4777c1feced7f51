from __future__ import annotations

from typing import Any, Dict

from .sources.base import FeedSource
from .sources.rss import RSSFeedSource

SOURCES = {"rss": RSSFeedSource}


def get_source(config: Dict[str, Any]) -> FeedSource:
    source_name = config.get("source", "rss")
    source_config = config.get("sources", {}).get(source_name, {})
    source_class = SOURCES.get(source_name)
    if not source_class:
        raise ValueError(f"Unknown source: {source_name}")
    return source_class(source_config)
