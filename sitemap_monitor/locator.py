# File: sitemap_monitor/locator.py
"""sitemap_monitor.locator: Discover a domain's sitemap via robots.txt or the /sitemap.xml convention."""

from __future__ import annotations

from typing import Optional

from sitemap_monitor.crawler.fetcher import Fetcher
from sitemap_monitor.errors import NetworkError
from sitemap_monitor.logger import get_logger
from sitemap_monitor.models import LocateResult
from sitemap_monitor.parser.robots_parser import find_sitemap_directive, resolve_sitemap_location
from sitemap_monitor.parser.sitemap_parser import SitemapIndex, Urlset, parse_sitemap
from sitemap_monitor.utils import get_scheme

__all__ = ["locate_sitemap", "sitemap_from_robots", "default_sitemap_url"]

logger = get_logger("locator")


def default_sitemap_url(domain: str) -> str:
    return f"{get_scheme(domain)}{domain}/sitemap.xml"


async def sitemap_from_robots(domain: str, fetcher: Fetcher) -> Optional[str]:
    """Sitemap URL announced in robots.txt, or None when robots.txt is missing or silent."""
    origin = f"{get_scheme(domain)}{domain}"
    robots_url = f"{origin}/robots.txt"
    try:
        result = await fetcher.fetch(robots_url, timeout=fetcher.config.robots_timeout)
    except NetworkError as exc:
        logger.debug("robots.txt unavailable for %s: %s", domain, exc)
        return None
    if not result.ok:
        logger.debug("robots.txt %s -> HTTP %s", robots_url, result.status)
        return None
    value = find_sitemap_directive(result.content)
    if value is None:
        return None
    return resolve_sitemap_location(value, origin)


async def locate_sitemap(domain: str, fetcher: Fetcher) -> LocateResult:
    """Resolve and validate the sitemap for *domain*.

    robots.txt problems are never fatal, they only mean falling back to
    ``/sitemap.xml``. The candidate is then fetched and its root element
    decides the status: ``urlset`` → ok, ``sitemapindex`` → unsupported,
    anything else → unsupported; HTTP or network failure → failed.
    """
    target = await sitemap_from_robots(domain, fetcher) or default_sitemap_url(domain)
    logger.info("Validating sitemap for %s: %s", domain, target)

    try:
        result = await fetcher.fetch(target, timeout=fetcher.config.sitemap_timeout)
    except NetworkError as exc:
        logger.warning("Sitemap fetch failed for %s: %s", domain, exc)
        return LocateResult(target, "failed", str(exc) or "Network error")

    if not result.ok:
        return LocateResult(target, "failed", f"HTTP {result.status}")

    document = parse_sitemap(result.body)
    if isinstance(document, Urlset):
        return LocateResult(target, "ok")
    if isinstance(document, SitemapIndex):
        return LocateResult(target, "unsupported", "Type: sitemapindex")
    return LocateResult(target, "unsupported", document.reason)
