# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple, Union

import pytest
from aiohttp import web

from sitemap_monitor.config import MonitorConfig
from sitemap_monitor.crawler.models import FetchResult
from sitemap_monitor.errors import NetworkError
from sitemap_monitor.models import Site
from sitemap_monitor.storage.memory import InMemoryRepository

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"

Route = Union[Tuple[int, bytes], Exception]


def urlset_xml(*urls: str) -> str:
    """Build a <urlset> sitemap with one <url><loc> per URL."""
    entries = "".join(f"<url><loc>{u}</loc><lastmod>2024-01-01</lastmod></url>" for u in urls)
    return f'<?xml version="1.0" encoding="UTF-8"?><urlset xmlns="{SITEMAP_NS}">{entries}</urlset>'


def sitemapindex_xml(*children: str) -> str:
    entries = "".join(f"<sitemap><loc>{u}</loc></sitemap>" for u in children)
    return f'<?xml version="1.0" encoding="UTF-8"?><sitemapindex xmlns="{SITEMAP_NS}">{entries}</sitemapindex>'


class FakeFetcher:
    """
    In-memory stand-in for Fetcher: routes map URL → (status, body) or an exception.
    Unknown URLs answer 404.
    """

    def __init__(self, config: MonitorConfig, routes: Optional[Dict[str, Route]] = None) -> None:
        self.config = config
        self.routes: Dict[str, Route] = dict(routes or {})
        self.calls: list[str] = []

    def serve(self, url: str, body: Union[str, bytes], status: int = 200) -> None:
        self.routes[url] = (status, body.encode("utf-8") if isinstance(body, str) else body)

    def fail(self, url: str, message: str = "Connection refused") -> None:
        self.routes[url] = NetworkError(message, url=url)

    async def fetch(self, url: str, *, timeout: float, max_bytes: Optional[int] = None) -> FetchResult:
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            return FetchResult(url, 404, b"Not Found")
        if isinstance(route, Exception):
            raise route
        status, body = route
        if max_bytes is not None and len(body) > max_bytes:
            return FetchResult(url, status, body[:max_bytes], truncated=True)
        return FetchResult(url, status, body)


class FixedClock:
    """Deterministic clock: wall time advances one second per call, timer 250 ms per call."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        self._ticks = 0.0

    def now(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now

    def monotonic(self) -> float:
        self._ticks += 0.25
        return self._ticks


@pytest.fixture()
def config(tmp_path) -> MonitorConfig:
    """Return a MonitorConfig with storage under tmp_path and short timeouts."""
    return MonitorConfig(
        data_dir=tmp_path / "data",
        user_agent="TestAgent/1.0",
        robots_timeout=1.0,
        sitemap_timeout=1.0,
        fetch_urls_timeout=1.0,
        title_timeout=0.5,
        title_max_bytes=4096,
    )


@pytest.fixture()
def fetcher(config) -> FakeFetcher:
    return FakeFetcher(config)


@pytest.fixture()
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def site(repository) -> Site:
    """A site already discovered (status ok) and stored in the repository."""
    s = Site(
        id="site_test0001",
        domain="games.example",
        sitemap_url="https://games.example/sitemap.xml",
        status="ok",
    )
    repository.save_sites([s])
    return s


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield ``localhost:port``, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"localhost:{port}"
    finally:
        await runner.cleanup()
