# sitemap_monitor/crawler/fetcher.py
"""
Fetcher module: HTTP GET with timeout, User-Agent, optional CORS relay and retry/backoff.
"""
from __future__ import annotations

import asyncio
from typing import Optional, Sequence
from urllib.parse import quote

from aiohttp import ClientError, ClientSession, ClientTimeout

from sitemap_monitor.config import MonitorConfig
from sitemap_monitor.crawler.models import FetchResult
from sitemap_monitor.errors import NetworkError
from sitemap_monitor.logger import get_logger

_LOCAL_MARKERS = ("localhost", "127.0.0.1")
_CHUNK_SIZE = 16 * 1024

logger = get_logger("fetcher")


class Fetcher:
    """Performs GET requests and returns status + body, or raises NetworkError.

    Non-2xx responses are *returned*, not raised: callers decide whether a
    404 on robots.txt is a fallback or a 404 on the sitemap is a failure.
    Only transport problems (DNS, refused connection, timeout) raise.

    Use as an async context manager, or pass an existing session::

        async with Fetcher(config) as fetcher:
            result = await fetcher.fetch("https://example.com/robots.txt", timeout=5)
    """

    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(self, config: MonitorConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(
                headers={
                    "User-Agent": self.config.user_agent,
                    "Accept": "application/xml, text/xml, text/html, text/plain, */*",
                },
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def request_url(self, url: str) -> str:
        """URL actually requested: the target itself, or the relay wrapping it."""
        relay = self.config.relay_url
        if relay is None or any(marker in url for marker in _LOCAL_MARKERS):
            return url
        return f"{str(relay).rstrip('/')}?url={quote(url, safe='')}"

    async def fetch(
        self,
        url: str,
        *,
        timeout: float,
        max_bytes: Optional[int] = None,
    ) -> FetchResult:
        """
        GET *url* within *timeout* seconds.

        With *max_bytes* the body is read in chunks and cut once the limit is
        reached (``FetchResult.truncated`` is set).
        Raises NetworkError on connection failure or timeout.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized")

        target = self.request_url(url)
        attempts = 0
        while True:
            try:
                async with self.session.get(target, timeout=ClientTimeout(total=timeout)) as resp:
                    if resp.status in self._RETRY_STATUS and attempts < self.config.retry_times:
                        raise ClientError(f"Retryable status {resp.status}")
                    if max_bytes is None:
                        body, truncated = await resp.read(), False
                    else:
                        body, truncated = await self._read_limited(resp, max_bytes)
                    return FetchResult(url, resp.status, body, truncated, resp.charset)
            except asyncio.TimeoutError as exc:
                # no retry on timeout
                logger.debug("Timeout after %.1fs: %s", timeout, url)
                raise NetworkError(f"Timeout after {timeout:g}s", url=url) from exc
            except ClientError as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    logger.debug("Request failed %s: %s", url, exc)
                    raise NetworkError(str(exc) or type(exc).__name__, url=url) from exc
                backoff = min(2**attempts, 60)
                logger.debug("Retry %d/%d for %s after %d s", attempts, self.config.retry_times, url, backoff)
                await asyncio.sleep(backoff)

    @staticmethod
    async def _read_limited(resp, max_bytes: int) -> tuple[bytes, bool]:
        chunks: list[bytes] = []
        received = 0
        async for chunk in resp.content.iter_chunked(_CHUNK_SIZE):
            chunks.append(chunk)
            received += len(chunk)
            if received >= max_bytes:
                return b"".join(chunks)[:max_bytes], True
        return b"".join(chunks), False

