"""Best-effort page title lookup for newly discovered URLs."""

import asyncio
from typing import List, Optional, Sequence

from sitemap_monitor.crawler.fetcher import Fetcher
from sitemap_monitor.errors import NetworkError
from sitemap_monitor.logger import get_logger
from sitemap_monitor.parser.html_parser import extract_title

logger = get_logger("enricher")


class TitleEnricher:
    """Fetches page titles with a per-request timeout, a body cap and bounded concurrency."""

    def __init__(self, fetcher: Fetcher, concurrency: Optional[int] = None) -> None:
        self.fetcher = fetcher
        limit = concurrency or fetcher.config.enrich_concurrency
        self.semaphore = asyncio.Semaphore(limit)

    async def fetch_title(self, url: str) -> Optional[str]:
        """Return the page title, or None on timeout, non-200, or no match."""
        config = self.fetcher.config
        async with self.semaphore:
            try:
                result = await self.fetcher.fetch(
                    url, timeout=config.title_timeout, max_bytes=config.title_max_bytes
                )
            except NetworkError as exc:
                logger.debug("Title fetch failed %s: %s", url, exc)
                return None
            except Exception as exc:
                logger.warning("Unexpected error fetching title for %s: %s", url, exc)
                return None
        if not result.ok:
            logger.debug("Title fetch %s -> HTTP %s", url, result.status)
            return None
        try:
            return extract_title(result.content)
        except Exception as exc:  # pragma: no cover
            logger.debug("Title extraction failed %s: %s", url, exc)
            return None

    async def run(self, urls: Sequence[str]) -> List[Optional[str]]:
        """Titles for *urls*, in the same order."""
        return list(await asyncio.gather(*(self.fetch_title(u) for u in urls)))
