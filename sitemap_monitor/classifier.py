"""sitemap_monitor.classifier: Coarse page type and review keyword derived from a URL path."""

from __future__ import annotations

from typing import Optional
from urllib.parse import SplitResult, urlsplit

from sitemap_monitor.models import UrlType

__all__ = ["classify_url", "extract_keyword"]


def _split(url: str) -> Optional[SplitResult]:
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return parts


def classify_url(url: str) -> UrlType:
    """Classify *url* as home, category, tag or game; ``unknown`` when it cannot be parsed.

    Any deep path that is neither a category nor a tag listing is assumed to be a game page.
    """
    parts = _split(url)
    if parts is None:
        return "unknown"
    path = parts.path
    if path in ("", "/"):
        return "home"
    if path.startswith("/c/") or "/category/" in path:
        return "category"
    if path.startswith("/t/") or "/tag/" in path:
        return "tag"
    return "game"


def extract_keyword(url: str) -> str:
    """Last non-empty path segment, ``-``/``_`` → space, lower-cased.

    >>> extract_keyword("https://site.com/super-cool-game")
    'super cool game'
    """
    parts = _split(url)
    if parts is None:
        return ""
    segments = [s for s in parts.path.split("/") if s]
    if not segments:
        return ""
    slug = segments[-1].replace("-", " ").replace("_", " ")
    return slug.strip().lower()
