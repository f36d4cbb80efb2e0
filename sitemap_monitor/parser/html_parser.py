# === FILE: sitemap_monitor/parser/html_parser.py ===
"""HTML helpers for SitemapMonitor.

Only one piece of information is pulled from a page: a human-readable title
used to help reviewers recognise a newly discovered URL.

* ``<meta property="og:title" content="…">`` (or ``name="og:title"``) wins;
* otherwise the document ``<title>`` text;
* otherwise ``None``.

The body handed in may be truncated mid-document; ``html.parser`` tolerates that.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = ("extract_title",)


def _og_title(soup: BeautifulSoup) -> Optional[str]:
    for attr in ("property", "name"):
        tag = soup.find("meta", attrs={attr: "og:title"})
        if isinstance(tag, Tag):
            content = tag.get("content")
            if isinstance(content, str) and content.strip():
                return content.strip()
    return None


def extract_title(html: str) -> Optional[str]:
    """Return og:title, else <title>, else None."""
    if not html:
        return None
    soup = BeautifulSoup(html, "html.parser")

    og = _og_title(soup)
    if og:
        return og

    title_tag = soup.find("title")
    if isinstance(title_tag, Tag):
        title = title_tag.get_text(strip=True)
        if title:
            return title
    return None
