"""
Data models for SitemapMonitor: sites, seen-set entries, review items and scan summaries.

All models round-trip through plain JSON dicts (``to_dict`` / ``from_dict``)
so the storage layer never needs to know their shape.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

SiteStatus = Literal["unknown", "ok", "failed", "unsupported"]
ReviewStatus = Literal["pending", "confirmed", "ignored", "not_game"]
UrlType = Literal["game", "tag", "category", "home", "unknown"]
Outcome = Literal["success", "failure"]

REVIEW_STATUSES: tuple[str, ...] = ("pending", "confirmed", "ignored", "not_game")
URL_TYPES: tuple[str, ...] = ("game", "tag", "category", "home", "unknown")

SeenSet = Dict[str, str]
"""Mapping of ``hash_url(normalized)`` → normalized URL for one site."""


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(moment: datetime) -> str:
    """ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class ScanSummary:
    """Outcome of one baseline or scan, kept on the site for observability."""

    outcome: Outcome
    parsed_count: int
    new_or_inserted_count: int
    duration_ms: int
    sample_urls: tuple[str, ...] = ()
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["sample_urls"] = list(self.sample_urls)
        if self.error is None:
            data.pop("error")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ScanSummary:
        return cls(
            outcome=data["outcome"],
            parsed_count=int(data.get("parsed_count", 0)),
            new_or_inserted_count=int(data.get("new_or_inserted_count", 0)),
            duration_ms=int(data.get("duration_ms", 0)),
            sample_urls=tuple(data.get("sample_urls") or ()),
            error=data.get("error"),
        )


@dataclass(slots=True)
class Site:
    """A monitored domain and its discovery/scan state."""

    id: str
    domain: str
    sitemap_url: str
    status: SiteStatus = "unknown"
    error_message: str = ""
    baseline_ready: bool = False
    baseline_at: Optional[str] = None
    last_scan_at: Optional[str] = None
    seen_count: int = 0
    last_new_found: int = 0
    last_result: Optional[ScanSummary] = None
    created_at: str = field(default_factory=lambda: isoformat(utc_now()))

    def copy(self) -> Site:
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        data = {name: getattr(self, name) for name in self.__dataclass_fields__}
        data["last_result"] = self.last_result.to_dict() if self.last_result else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Site:
        fields = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        summary = fields.get("last_result")
        fields["last_result"] = ScanSummary.from_dict(summary) if summary else None
        return cls(**fields)


@dataclass(slots=True)
class NewItem:
    """A newly discovered URL awaiting human review."""

    id: str
    site_id: str
    domain: str
    url: str
    keyword_auto: str
    keyword_final: str
    review_status: ReviewStatus
    url_type: UrlType
    discovered_at: str
    source_sitemap_url: str
    title: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {name: getattr(self, name) for name in self.__dataclass_fields__}
        if self.title is None:
            data.pop("title")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> NewItem:
        # rows written by the first server use camelCase keys and a single gameKeyword
        def pick(key: str, legacy: str, default: Any = None) -> Any:
            value = data.get(key)
            return value if value else data.get(legacy, default)

        legacy_keyword = data.get("game_keyword") or data.get("gameKeyword") or ""
        return cls(
            id=data["id"],
            site_id=data["site_id"] if "site_id" in data else data["siteId"],
            domain=data.get("domain", ""),
            url=data["url"],
            keyword_auto=pick("keyword_auto", "keywordAuto") or legacy_keyword,
            keyword_final=pick("keyword_final", "keywordFinal") or legacy_keyword,
            review_status=pick("review_status", "reviewStatus") or "pending",
            url_type=pick("url_type", "urlType") or "game",
            discovered_at=pick("discovered_at", "discoveredAt", ""),
            source_sitemap_url=pick("source_sitemap_url", "sourceSitemapUrl", ""),
            title=data.get("title"),
        )


@dataclass(frozen=True, slots=True)
class LocateResult:
    """Result of sitemap discovery for one domain."""

    sitemap_url: str
    status: SiteStatus
    error: Optional[str] = None


@dataclass(slots=True)
class Page:
    """One page of a paginated listing."""

    data: List[Any]
    total: int
    page: int
    limit: int


__all__ = [
    "SiteStatus",
    "ReviewStatus",
    "UrlType",
    "Outcome",
    "REVIEW_STATUSES",
    "URL_TYPES",
    "SeenSet",
    "ScanSummary",
    "Site",
    "NewItem",
    "LocateResult",
    "Page",
    "utc_now",
    "isoformat",
]
