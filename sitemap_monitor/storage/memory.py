"""In-process repository with the same semantics as the JSON store."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from typing import Dict, List, Optional

from sitemap_monitor.models import NewItem, ReviewStatus, SeenSet, Site
from sitemap_monitor.storage.base import Repository, filter_new_items


class InMemoryRepository(Repository):
    """Stores copies so callers can never mutate persisted state by accident."""

    def __init__(self) -> None:
        self._sites: List[Site] = []
        self._seen: Dict[str, SeenSet] = {}
        self._items: List[NewItem] = []

    def load_sites(self) -> List[Site]:
        return [s.copy() for s in self._sites]

    def save_sites(self, sites: Sequence[Site]) -> None:
        self._sites = [s.copy() for s in sites]

    def load_seen(self, site_id: str) -> SeenSet:
        return dict(self._seen.get(site_id, {}))

    def save_seen(self, site_id: str, seen: SeenSet) -> None:
        self._seen[site_id] = dict(seen)

    def load_items(self, site_id: Optional[str] = None) -> List[NewItem]:
        return [replace(i) for i in self._items if site_id is None or i.site_id == site_id]

    def append_items(self, items: Sequence[NewItem]) -> List[NewItem]:
        to_add = filter_new_items(self._items, items)
        self._items.extend(replace(i) for i in to_add)
        return to_add

    def update_item(
        self,
        item_id: str,
        *,
        keyword_final: Optional[str] = None,
        review_status: Optional[ReviewStatus] = None,
    ) -> Optional[NewItem]:
        for item in self._items:
            if item.id == item_id:
                if keyword_final is not None:
                    item.keyword_final = keyword_final
                if review_status is not None:
                    item.review_status = review_status
                return replace(item)
        return None
