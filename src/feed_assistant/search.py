from __future__ import annotations

from typing import Iterable, List, Sequence

from .datamodels import Item, RelatedItem, Relevance, SearchResult
from .markup import strip_tags

MIN_KEYWORD_LENGTH = 4
RELATED_LIMIT = 5
NO_DESCRIPTION = "No description available"


def _contains(item: Item, needle: str) -> bool:
    if needle in item.title.lower() or needle in item.description.lower():
        return True
    return any(needle in category.lower() for category in item.categories)


def _to_result(item: Item, relevance: Relevance) -> SearchResult:
    clean = strip_tags(item.description).strip()
    return SearchResult(
        title=item.title,
        content=clean or item.description,
        url=item.link,
        relevance=relevance,
        published_at=item.published_at or None,
    )


def extract_keywords(query: str) -> List[str]:
    return [word for word in query.lower().split() if len(word) >= MIN_KEYWORD_LENGTH]


def search_items(items: Iterable[Item], query: str) -> List[SearchResult]:
    """Rank ``items`` against ``query`` in two tiers.

    Items containing the whole query (title, description or a category) are
    ``high``. Only if none are found, items containing any query word longer
    than three characters are ``medium``. Order within a tier follows the
    input order.
    """
    candidates: Sequence[Item] = list(items)
    needle = query.lower()

    results = [_to_result(item, Relevance.HIGH) for item in candidates if _contains(item, needle)]
    if results:
        return results

    keywords = extract_keywords(query)
    if not keywords:
        return []
    return [
        _to_result(item, Relevance.MEDIUM)
        for item in candidates
        if any(_contains(item, keyword) for keyword in keywords)
    ]


def _related_item(item: Item) -> RelatedItem:
    excerpt = strip_tags(item.description).strip()
    return RelatedItem(title=item.title, url=item.link, excerpt=excerpt or NO_DESCRIPTION)


def find_related(
    items: Iterable[Item], results: Sequence[SearchResult], limit: int = RELATED_LIMIT
) -> List[RelatedItem]:
    """Pick up to ``limit`` items related to ``results``.

    Items sharing a category (case-insensitive) with a matched item come
    first. Without any, the first other items in feed order are used. When
    the feed holds nothing besides the matches, the matches themselves are
    returned.
    """
    candidates: Sequence[Item] = list(items)
    matched_urls = {result.url for result in results}

    categories = set()
    for item in candidates:
        if item.link in matched_urls:
            categories.update(category.lower() for category in item.categories)

    others = [item for item in candidates if item.link not in matched_urls]
    related = [
        item
        for item in others
        if any(category.lower() in categories for category in item.categories)
    ][:limit]
    if not related:
        related = others[:limit]
    if not related:
        return [
            RelatedItem(title=result.title, url=result.url, excerpt=result.content)
            for result in results
        ]
    return [_related_item(item) for item in related]
