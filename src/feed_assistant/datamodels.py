from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


# --- Data models ---
@dataclass(frozen=True)
class Item:
    title: str
    link: str
    description: str = ""
    published_at: str = ""
    categories: Tuple[str, ...] = ()
    id: Optional[str] = None
    author: Optional[str] = None


@dataclass
class Feed:
    items: List[Item] = field(default_factory=list)
    feed_url: str = ""
    title: str = ""
    link: str = ""
    description: str = ""
    language: str = ""
    last_build_date: str = ""


class Relevance(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"


@dataclass
class SearchResult:
    title: str
    content: str
    url: str
    relevance: Relevance
    published_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "title": self.title,
            "content": self.content,
            "url": self.url,
            "relevance": self.relevance.value,
        }
        if self.published_at is not None:
            data["date"] = self.published_at
        return data


@dataclass
class SearchResponse:
    section: str
    query: str
    results: List[SearchResult]
    timestamp: str
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "section": self.section,
            "query": self.query,
            "results": [r.to_dict() for r in self.results],
            "timestamp": self.timestamp,
        }
        if self.message is not None:
            data["message"] = self.message
        return data


@dataclass
class RelatedItem:
    title: str
    url: str
    excerpt: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "url": self.url, "excerpt": self.excerpt}


@dataclass
class RelatedResponse:
    section: str
    query: str
    related: List[RelatedItem]
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "section": self.section,
            "query": self.query,
            "related": [r.to_dict() for r in self.related],
        }
        if self.message is not None:
            data["message"] = self.message
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class Message:
    role: str
    content: str
