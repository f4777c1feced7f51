from __future__ import annotations

import pytest

from feed_assistant.datamodels import Item, Relevance
from feed_assistant.search import NO_DESCRIPTION, extract_keywords, find_related, search_items


@pytest.fixture
def items():
    return [
        Item(id="1", title="React hooks guide", link="http://x/1", description="<p>All about hooks</p>"),
        Item(id="2", title="Intro to Vue", link="http://x/2", description="Templates and directives"),
        Item(
            id="3",
            title="State management",
            link="http://x/3",
            description="This library uses react under the hood",
            published_at="Tue, 07 Jan 2025 09:00:00 GMT",
        ),
    ]


def test_title_match_ranks_before_description_match(items):
    results = search_items(items, "react")
    assert [r.url for r in results] == ["http://x/1", "http://x/3"]
    assert all(r.relevance is Relevance.HIGH for r in results)


def test_exact_match_is_case_insensitive(items):
    results = search_items(items, "VUE")
    assert [r.title for r in results] == ["Intro to Vue"]


def test_category_match(items):
    tagged = Item(id="4", title="Untitled", link="http://x/4", categories=("Frontend",))
    results = search_items(items + [tagged], "frontend")
    assert [r.url for r in results] == ["http://x/4"]


def test_keyword_fallback_when_no_exact_match():
    catalog = [
        Item(id="1", title="Understanding reactivity", link="http://x/1"),
        Item(id="2", title="Cooking pasta", link="http://x/2"),
        Item(id="3", title="Signals", link="http://x/3", categories=("Reactivity",)),
    ]
    results = search_items(catalog, "reactivity systems explained")
    assert [r.url for r in results] == ["http://x/1", "http://x/3"]
    assert all(r.relevance is Relevance.MEDIUM for r in results)


def test_no_medium_results_when_high_exists():
    catalog = [
        Item(id="1", title="vue router", link="http://x/1"),
        Item(id="2", title="router basics", link="http://x/2"),
    ]
    results = search_items(catalog, "vue router")
    assert [r.url for r in results] == ["http://x/1"]


def test_short_words_are_not_keywords(items):
    assert extract_keywords("how to use the api") == []
    assert search_items(items, "the and for") == []


def test_empty_query_matches_everything(items):
    results = search_items(items, "")
    assert len(results) == 3
    assert all(r.relevance is Relevance.HIGH for r in results)


def test_content_is_stripped_of_markup(items):
    result = search_items(items, "hooks guide")[0]
    assert result.content == "All about hooks"
    assert result.published_at is None


def test_content_falls_back_to_raw_description():
    catalog = [Item(id="1", title="Gallery", link="http://x/1", description="<img src='a.png'/>")]
    result = search_items(catalog, "gallery")[0]
    assert result.content == "<img src='a.png'/>"


def test_result_dict_shape(items):
    data = search_items(items, "state")[0].to_dict()
    assert data == {
        "title": "State management",
        "content": "This library uses react under the hood",
        "url": "http://x/3",
        "relevance": "high",
        "date": "Tue, 07 Jan 2025 09:00:00 GMT",
    }


def test_find_related_prefers_shared_categories():
    feed = [
        Item(id="1", title="React hooks", link="http://x/1", categories=("React",)),
        Item(id="2", title="Vue intro", link="http://x/2", categories=("Vue",)),
        Item(
            id="3",
            title="React context",
            link="http://x/3",
            description="<p>Sharing state</p>",
            categories=("react",),
        ),
    ]
    related = find_related(feed, search_items(feed, "hooks"))
    assert [r.url for r in related] == ["http://x/3"]
    assert related[0].excerpt == "Sharing state"


def test_find_related_falls_back_to_feed_order():
    feed = [Item(id=str(n), title=f"Post {n}", link=f"http://x/{n}") for n in range(8)]
    related = find_related(feed, search_items(feed, "Post 0"))
    assert [r.url for r in related] == [f"http://x/{n}" for n in range(1, 6)]
    assert related[0].excerpt == NO_DESCRIPTION


def test_find_related_returns_matches_when_feed_has_nothing_else():
    feed = [Item(id="1", title="React hooks", link="http://x/1", description="All about hooks")]
    related = find_related(feed, search_items(feed, "react"))
    assert [(r.title, r.url, r.excerpt) for r in related] == [
        ("React hooks", "http://x/1", "All about hooks")
    ]
