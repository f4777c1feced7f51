from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from ..datamodels import Feed


class FeedError(Exception):
    """Raised when a feed cannot be fetched or parsed."""

    def __init__(self, url: str, reason: Any):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to load feed {url}: {reason}")


class FeedSource(ABC):
    """Abstract base class for a syndication feed source."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config

    @abstractmethod
    def fetch(self, url: str) -> Feed:
        """Fetch and parse the feed at ``url``.

        Raises FeedError on network or parse failure.
        """
        pass
