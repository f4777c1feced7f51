from __future__ import annotations

from bs4 import BeautifulSoup


def strip_tags(fragment: str) -> str:
    """Return the text content of an HTML fragment with all tags removed."""
    if not fragment:
        return ""
    return BeautifulSoup(fragment, "lxml").get_text()
