from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .config import CACHE_TTL
from .datamodels import Item
from .sources.base import FeedSource

logger = logging.getLogger("feed_assistant")


@dataclass
class SectionCache:
    items: Dict[str, Item] = field(default_factory=dict)
    last_refreshed_at: float = 0.0
    refreshing: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    idle: threading.Event = field(default_factory=threading.Event, repr=False)

    def __post_init__(self) -> None:
        self.idle.set()


class ContentCache:
    """In-memory per-section index of feed items.

    Each section is refreshed from its feed when older than ``ttl`` seconds or
    empty. A refresh replaces the whole item map in one swap, so readers see
    either the old set or the new one. At most one refresh per section runs at
    a time; the ``refreshing`` flag is always released, even when the fetch
    raises or is interrupted.
    """

    def __init__(
        self,
        source: FeedSource,
        feed_urls: Mapping[str, str],
        ttl: float = CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.source = source
        self.feed_urls = dict(feed_urls)
        self.ttl = ttl
        self.clock = clock
        self._sections: Dict[str, SectionCache] = {}
        self._sections_lock = threading.Lock()

    def _section(self, section: str) -> SectionCache:
        with self._sections_lock:
            state = self._sections.get(section)
            if state is None:
                state = self._sections[section] = SectionCache()
            return state

    def has_feed(self, section: str) -> bool:
        return section in self.feed_urls

    def is_refreshing(self, section: str) -> bool:
        return self._section(section).refreshing

    def needs_refresh(self, section: str) -> bool:
        state = self._section(section)
        if not state.items:
            return True
        return self.clock() - state.last_refreshed_at > self.ttl

    def ensure_fresh(
        self, section: str, wait: bool = False, timeout: Optional[float] = None
    ) -> bool:
        """Refresh ``section`` if stale or empty.

        If another refresh is already running this returns without waiting
        for it, unless ``wait`` is set, in which case it blocks until that
        refresh finishes (or ``timeout`` elapses). Returns True only when this
        call performed a successful refresh.
        """
        if not self.needs_refresh(section):
            logger.debug("Cache fresh for section %s", section)
            return False

        state = self._section(section)
        if state.refreshing and wait:
            logger.debug("Waiting for in-flight refresh of %s", section)
            state.idle.wait(timeout)
            return False
        return self.refresh(section)

    def refresh(self, section: str) -> bool:
        state = self._section(section)
        with state.lock:
            if state.refreshing:
                logger.debug("Refresh already in progress for section %s", section)
                return False
            state.refreshing = True
            state.idle.clear()

        try:
            url = self.feed_urls.get(section)
            if not url:
                logger.warning("No feed URL configured for section %s", section)
                return False

            logger.info("Refreshing cache for section %s", section)
            feed = self.source.fetch(url)

            items: Dict[str, Item] = {}
            dropped = 0
            for item in feed.items:
                if item.id:
                    items[item.id] = item
                else:
                    dropped += 1
            if dropped:
                logger.debug(
                    "Dropped %d items without an id from section %s", dropped, section
                )

            with state.lock:
                state.items = items
                state.last_refreshed_at = self.clock()
            logger.info("Cache refreshed for section %s, %d items", section, len(items))
            return True
        except Exception as e:
            logger.error("Failed to refresh cache for section %s: %s", section, e)
            return False
        finally:
            with state.lock:
                state.refreshing = False
                state.idle.set()

    def get_items(self, section: str) -> List[Item]:
        state = self._section(section)
        with state.lock:
            items = state.items
        return list(items.values())

    def preload_all(self, sections: Optional[Iterable[str]] = None) -> Dict[str, bool]:
        """Refresh every section concurrently; one failure never stops the rest."""
        to_load = list(sections) if sections is not None else list(self.feed_urls)
        logger.info("Preloading caches for %d sections", len(to_load))
        results: Dict[str, bool] = {}
        if not to_load:
            return results

        with ThreadPoolExecutor(max_workers=len(to_load)) as executor:
            future_to_section = {
                executor.submit(self.refresh, section): section for section in to_load
            }
            for future in as_completed(future_to_section):
                section = future_to_section[future]
                try:
                    results[section] = future.result()
                except Exception as e:
                    logger.error("Failed to preload section %s: %s", section, e)
                    results[section] = False

        logger.info(
            "Preloaded %d/%d sections", sum(results.values()), len(results)
        )
        return results

    def start_preload(self, sections: Optional[Iterable[str]] = None) -> threading.Thread:
        """Run preload_all on a daemon thread.

        Queries issued before it finishes may see empty sections.
        """
        to_load = list(sections) if sections is not None else None

        def _run() -> None:
            try:
                self.preload_all(to_load)
            except Exception:
                logger.exception("Background preload crashed")

        thread = threading.Thread(target=_run, name="feed-preload", daemon=True)
        thread.start()
        return thread

    def stats(self) -> Dict[str, Dict[str, Any]]:
        with self._sections_lock:
            snapshot = list(self._sections.items())
        return {
            section: {
                "items": len(state.items),
                "last_update": datetime.fromtimestamp(
                    state.last_refreshed_at, tz=timezone.utc
                ).isoformat(),
            }
            for section, state in snapshot
        }
