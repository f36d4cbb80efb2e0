# sitemap_monitor/crawler/models.py
"""
Data models for the SitemapMonitor fetcher.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class FetchResult:
    """HTTP status and raw body of one GET request.

    ``body`` is kept as received so XML parsers can honour the document's own
    encoding declaration; ``content`` is the body decoded with the response
    charset (UTF-8 when none is given).
    """

    url: str
    status: int
    body: bytes
    truncated: bool = False
    charset: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == 200

    @property
    def content(self) -> str:
        try:
            return self.body.decode(self.charset or "utf-8", errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")
