"""sitemap_monitor.monitor: Site registry on top of the diff engine.

This is the surface the CLI (or any HTTP layer) talks to: import domains,
discover sitemaps, run baseline/scan by site id, list the review feed and
apply reviewer edits. Baseline and scan of the same site are serialized with
a per-site lock; different sites may run concurrently.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Dict, Iterable, List, Optional

from sitemap_monitor.config import MonitorConfig
from sitemap_monitor.crawler.fetcher import Fetcher
from sitemap_monitor.engine import BaselineResult, Clock, DiffEngine, ScanResult
from sitemap_monitor.errors import ItemNotFoundError, MonitorError, SiteNotFoundError
from sitemap_monitor.locator import default_sitemap_url
from sitemap_monitor.logger import get_logger
from sitemap_monitor.models import NewItem, Page, ReviewStatus, Site, isoformat
from sitemap_monitor.storage.base import Repository
from sitemap_monitor.utils import normalize_domain

__all__ = ["SiteMonitor"]

logger = get_logger("monitor")


def _paginate(rows: List, page: int, limit: int) -> Page:
    page = max(1, page)
    limit = max(1, limit)
    offset = (page - 1) * limit
    return Page(data=rows[offset:offset + limit], total=len(rows), page=page, limit=limit)


class SiteMonitor:
    """Facade for collaborators: all operations address sites by id and persist their results."""

    def __init__(
        self,
        config: MonitorConfig,
        repository: Repository,
        fetcher: Fetcher,
        *,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config
        self.repository = repository
        self.clock = clock or Clock()
        self.engine = DiffEngine(fetcher, repository, clock=self.clock, sample_size=config.sample_size)
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock(self, site_id: str) -> asyncio.Lock:
        return self._locks.setdefault(site_id, asyncio.Lock())

    # --- registry ----------------------------------------------------------

    def list_sites(self) -> List[Site]:
        return self.repository.load_sites()

    def get_site(self, site_id: str) -> Site:
        for site in self.repository.load_sites():
            if site.id == site_id:
                return site
        raise SiteNotFoundError(site_id)

    def import_sites(self, domains: Iterable[str]) -> int:
        """Register new domains; returns how many were added."""
        sites = self.repository.load_sites()
        known = {s.domain for s in sites}
        added = 0
        for raw in domains:
            if not raw:
                continue
            domain = normalize_domain(raw)
            if not domain or domain in known:
                continue
            sites.append(
                Site(
                    id=f"site_{uuid.uuid4().hex[:8]}",
                    domain=domain,
                    sitemap_url=default_sitemap_url(domain),
                    created_at=isoformat(self.clock.now()),
                )
            )
            known.add(domain)
            added += 1
        self.repository.save_sites(sites)
        logger.info("Imported %d domain(s)", added)
        return added

    # --- engine operations -------------------------------------------------

    async def discover(self, site_id: str) -> Site:
        async with self._lock(site_id):
            site = await self.engine.discover(self.get_site(site_id))
            self.repository.save_site(site)
            return site

    async def baseline(self, site_id: str) -> BaselineResult:
        async with self._lock(site_id):
            result = await self.engine.run_baseline(self.get_site(site_id))
            self.repository.save_site(result.site)
            return result

    async def scan(self, site_id: str) -> ScanResult:
        """Scan one site. PreconditionError propagates and the stored site is left as is."""
        async with self._lock(site_id):
            result = await self.engine.run_scan(self.get_site(site_id))
            self.repository.save_site(result.site)
            return result

    async def discover_all(self) -> List[Site]:
        return await self._for_each([s.id for s in self.list_sites()], self.discover)

    async def scan_all(self) -> List[ScanResult]:
        """Scan every baseline-ready site, at most ``site_concurrency`` at a time."""
        sites = self.list_sites()
        ready = [s.id for s in sites if s.baseline_ready]
        skipped = len(sites) - len(ready)
        if skipped:
            logger.info("Skipping %d site(s) without baseline", skipped)
        return await self._for_each(ready, self.scan)

    async def _for_each(self, site_ids: List[str], operation) -> List:
        semaphore = asyncio.Semaphore(self.config.site_concurrency)

        async def _run(site_id: str):
            async with semaphore:
                return await operation(site_id)

        results = await asyncio.gather(*(_run(i) for i in site_ids), return_exceptions=True)
        done = []
        for site_id, result in zip(site_ids, results):
            if isinstance(result, MonitorError):
                logger.warning("Site %s: %s", site_id, result)
                continue
            if isinstance(result, BaseException):
                raise result
            done.append(result)
        return done

    # --- review feed -------------------------------------------------------

    def feed(self) -> List[NewItem]:
        """All items: pending first, then newest first."""
        items = sorted(self.repository.load_items(), key=lambda i: i.discovered_at, reverse=True)
        items.sort(key=lambda i: i.review_status != "pending")
        return items

    def site_items(self, site_id: str, page: int = 1, limit: int = 50) -> Page:
        self.get_site(site_id)
        items = sorted(self.repository.load_items(site_id), key=lambda i: i.discovered_at, reverse=True)
        return _paginate(items, page, limit)

    def site_seen(self, site_id: str, page: int = 1, limit: int = 50) -> Page:
        self.get_site(site_id)
        return _paginate(list(self.repository.load_seen(site_id).values()), page, limit)

    def review_item(
        self,
        item_id: str,
        *,
        keyword_final: Optional[str] = None,
        review_status: Optional[ReviewStatus] = None,
    ) -> NewItem:
        updated = self.repository.update_item(
            item_id, keyword_final=keyword_final, review_status=review_status
        )
        if updated is None:
            raise ItemNotFoundError(item_id)
        return updated
