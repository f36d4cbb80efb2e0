"""sitemap_monitor.errors: Типизированные ошибки монитора."""

from __future__ import annotations


class MonitorError(Exception):
    """Base class for every error raised by sitemap_monitor."""


class NetworkError(MonitorError):
    """Host unreachable, timeout or non-2xx response."""

    def __init__(self, message: str, *, url: str = "", status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class ParseError(MonitorError):
    """Sitemap document has an unexpected shape."""


class PreconditionError(MonitorError):
    """Operation is not valid in the current site state (e.g. scan before baseline)."""


class SiteNotFoundError(MonitorError, KeyError):
    """No site with the requested id."""

    def __str__(self) -> str:
        return f"Site not found: {self.args[0]}" if self.args else "Site not found"


class ItemNotFoundError(MonitorError, KeyError):
    """No new item with the requested id."""

    def __str__(self) -> str:
        return f"Item not found: {self.args[0]}" if self.args else "Item not found"


__all__ = [
    "MonitorError",
    "NetworkError",
    "ParseError",
    "PreconditionError",
    "SiteNotFoundError",
    "ItemNotFoundError",
]
