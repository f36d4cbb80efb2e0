# File: sitemap_monitor/engine.py
"""sitemap_monitor.engine: Diff engine: discover, baseline and incremental scan of one site.

Each operation is a single transaction over one site: load the seen-set
snapshot, compute, write back. Either every write lands or none does; on
failure the returned site carries ``status="failed"`` and an error message,
and the stored seen-set and items are exactly as before the call. The one
exception is a scan whose seen-set rollback fails too; that is logged as an
error and the merged seen-set stays stored.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sitemap_monitor.aggregator import DEFAULT_SAMPLE_SIZE, SummaryBuilder
from sitemap_monitor.classifier import classify_url, extract_keyword
from sitemap_monitor.crawler.fetcher import Fetcher
from sitemap_monitor.enricher import TitleEnricher
from sitemap_monitor.errors import MonitorError, PreconditionError
from sitemap_monitor.locator import locate_sitemap
from sitemap_monitor.logger import get_logger
from sitemap_monitor.models import NewItem, ScanSummary, SeenSet, Site, isoformat, utc_now
from sitemap_monitor.parser.sitemap_parser import fetch_sitemap_urls
from sitemap_monitor.storage.base import Repository
from sitemap_monitor.utils import hash_url, normalize_url

__all__ = ["Clock", "BaselineResult", "ScanResult", "DiffEngine", "diff_urls"]

logger = get_logger("engine")

# Storage and decoding failures are reported like fetch failures.
_OPERATION_ERRORS = (MonitorError, OSError, ValueError)


class Clock:
    """Wall-clock timestamps and a monotonic timer; replaced in tests."""

    def now(self) -> datetime:
        return utc_now()

    def monotonic(self) -> float:
        return time.monotonic()


@dataclass(frozen=True, slots=True)
class BaselineResult:
    site: Site
    summary: ScanSummary


@dataclass(frozen=True, slots=True)
class ScanResult:
    site: Site
    summary: ScanSummary
    new_items: List[NewItem] = field(default_factory=list)


def diff_urls(raw_urls: Sequence[str], seen: SeenSet) -> List[Tuple[str, str]]:
    """(hash, normalized url) for every URL absent from *seen*, in sitemap order.

    A URL repeated in the sitemap is reported once, at its first occurrence.
    """
    fresh: List[Tuple[str, str]] = []
    pending: set[str] = set()
    for raw in raw_urls:
        url = normalize_url(raw)
        digest = hash_url(url)
        if digest in seen or digest in pending:
            continue
        pending.add(digest)
        fresh.append((digest, url))
    return fresh


class DiffEngine:
    """Composes locator, parser, normalizer, classifier and enricher against a Repository."""

    def __init__(
        self,
        fetcher: Fetcher,
        repository: Repository,
        *,
        clock: Optional[Clock] = None,
        enricher: Optional[TitleEnricher] = None,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
    ) -> None:
        self.fetcher = fetcher
        self.repository = repository
        self.clock = clock or Clock()
        self.enricher = enricher or TitleEnricher(fetcher)
        self.sample_size = sample_size

    def _summary(self) -> SummaryBuilder:
        return SummaryBuilder(sample_size=self.sample_size, monotonic=self.clock.monotonic)

    def _fail(self, site: Site, builder: SummaryBuilder, operation: str, exc: Exception) -> ScanSummary:
        message = str(exc) or type(exc).__name__
        logger.warning("%s failed for %s: %s", operation, site.domain, message)
        site.status = "failed"
        site.error_message = message
        site.last_result = builder.failure(message)
        return site.last_result

    async def discover(self, site: Site) -> Site:
        """Locate the sitemap and record url/status/error on a copy of *site*."""
        site = site.copy()
        result = await locate_sitemap(site.domain, self.fetcher)
        site.sitemap_url = result.sitemap_url
        site.status = result.status
        site.error_message = result.error or ""
        logger.info("Discovered %s: %s (%s)", site.domain, result.sitemap_url, result.status)
        return site

    async def run_baseline(self, site: Site) -> BaselineResult:
        """Populate the seen-set from the current sitemap without creating review items."""
        site = site.copy()
        builder = self._summary()
        logger.info("Baseline started: %s", site.domain)
        try:
            urls = await fetch_sitemap_urls(site.sitemap_url, self.fetcher)
            seen = self.repository.load_seen(site.id)
            for raw in urls:
                url = normalize_url(raw)
                digest = hash_url(url)
                if digest not in seen:
                    seen[digest] = url
                    builder.new_count += 1
                builder.add_sample(url)
            builder.parsed_count = len(urls)
            self.repository.save_seen(site.id, seen)
        except _OPERATION_ERRORS as exc:
            summary = self._fail(site, builder, "Baseline", exc)
            return BaselineResult(site, summary)

        site.baseline_ready = True
        site.baseline_at = isoformat(self.clock.now())
        site.status = "ok"
        site.error_message = ""
        site.seen_count = len(seen)
        site.last_result = builder.success()
        logger.info(
            "Baseline done: %s parsed=%d inserted=%d seen=%d",
            site.domain, builder.parsed_count, builder.new_count, site.seen_count,
        )
        return BaselineResult(site, site.last_result)

    async def run_scan(self, site: Site) -> ScanResult:
        """Diff the sitemap against the seen-set and create review items for new URLs.

        Raises PreconditionError, before any I/O, when the site has no baseline.
        """
        if not site.baseline_ready:
            raise PreconditionError("Baseline not ready")

        site = site.copy()
        builder = self._summary()
        logger.info("Scan started: %s", site.domain)
        try:
            urls = await fetch_sitemap_urls(site.sitemap_url, self.fetcher)
            snapshot = self.repository.load_seen(site.id)
            fresh = diff_urls(urls, snapshot)
            titles = await self.enricher.run([url for _, url in fresh])
            items = [self._build_item(site, url, title) for (_, url), title in zip(fresh, titles)]

            merged = dict(snapshot)
            merged.update(fresh)
            if fresh:
                self.repository.save_seen(site.id, merged)
                try:
                    stored = self.repository.append_items(items)
                except _OPERATION_ERRORS:
                    try:
                        self.repository.save_seen(site.id, snapshot)
                    except _OPERATION_ERRORS as rollback_exc:
                        # known gap: merged seen-set stays on disk, these URLs get no items
                        logger.error(
                            "Seen-set rollback failed for %s: %s; %d URL(s) stay seen without review items",
                            site.domain, rollback_exc, len(fresh),
                        )
                    raise
            else:
                stored = []
        except _OPERATION_ERRORS as exc:
            summary = self._fail(site, builder, "Scan", exc)
            return ScanResult(site, summary)

        if len(stored) < len(items):
            logger.warning(
                "%s: %d new URL(s) already had review items and were not re-added",
                site.domain, len(items) - len(stored),
            )
        builder.parsed_count = len(urls)
        builder.new_count = len(stored)
        builder.extend_samples(item.url for item in stored)

        site.last_scan_at = isoformat(self.clock.now())
        site.status = "ok"
        site.error_message = ""
        site.seen_count = len(merged)
        site.last_new_found = len(stored)
        site.last_result = builder.success()
        logger.info(
            "Scan done: %s parsed=%d new=%d seen=%d",
            site.domain, builder.parsed_count, builder.new_count, site.seen_count,
        )
        return ScanResult(site, site.last_result, stored)

    def _build_item(self, site: Site, url: str, title: Optional[str]) -> NewItem:
        url_type = classify_url(url)
        keyword = extract_keyword(url)
        return NewItem(
            id=f"new_{uuid.uuid4()}",
            site_id=site.id,
            domain=site.domain,
            url=url,
            keyword_auto=keyword,
            keyword_final=keyword,
            review_status="pending" if url_type == "game" else "not_game",
            url_type=url_type,
            title=title,
            discovered_at=isoformat(self.clock.now()),
            source_sitemap_url=site.sitemap_url,
        )
