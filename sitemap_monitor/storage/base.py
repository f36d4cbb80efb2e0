"""
Storage layer interfaces for sites, seen-sets and review items.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import List, Optional

from sitemap_monitor.models import NewItem, ReviewStatus, SeenSet, Site
from sitemap_monitor.utils import hash_url


class Repository(ABC):
    """
    Persistence abstraction used by the diff engine and the site registry.

    Every ``save_*`` / ``append_*`` call must be atomic from a reader's point
    of view. Concurrent writers are last-writer-wins; callers serialize work
    per site.
    """

    # --- sites -------------------------------------------------------------

    @abstractmethod
    def load_sites(self) -> List[Site]:
        """Return all sites in insertion order."""

    @abstractmethod
    def save_sites(self, sites: Sequence[Site]) -> None:
        """Replace the whole site list."""

    def save_site(self, site: Site) -> None:
        """Insert or replace one site, keeping list order."""
        sites = self.load_sites()
        for index, current in enumerate(sites):
            if current.id == site.id:
                sites[index] = site
                break
        else:
            sites.append(site)
        self.save_sites(sites)

    # --- seen-sets ---------------------------------------------------------

    @abstractmethod
    def load_seen(self, site_id: str) -> SeenSet:
        """Return a copy of the site's seen-set (empty when none is stored)."""

    @abstractmethod
    def save_seen(self, site_id: str, seen: SeenSet) -> None:
        """Replace the site's seen-set."""

    # --- items -------------------------------------------------------------

    @abstractmethod
    def load_items(self, site_id: Optional[str] = None) -> List[NewItem]:
        """Return stored items in append order, optionally for one site."""

    @abstractmethod
    def append_items(self, items: Sequence[NewItem]) -> List[NewItem]:
        """
        Append items not already stored for the same (site_id, url).

        Returns the items actually written.
        """

    @abstractmethod
    def update_item(
        self,
        item_id: str,
        *,
        keyword_final: Optional[str] = None,
        review_status: Optional[ReviewStatus] = None,
    ) -> Optional[NewItem]:
        """Apply reviewer edits; return the updated item or None when unknown."""


def item_key(site_id: str, url: str) -> str:
    """Dedup key for review items: one item per (site, url)."""
    return f"{site_id}_{hash_url(url)}"


def filter_new_items(
    existing: Sequence[NewItem], items: Sequence[NewItem], known_keys: Iterable[str] = ()
) -> List[NewItem]:
    """Items whose (site_id, url) is neither in *existing*, in *known_keys*, nor earlier in *items*."""
    known = {item_key(i.site_id, i.url) for i in existing}
    known.update(known_keys)
    fresh: List[NewItem] = []
    for item in items:
        key = item_key(item.site_id, item.url)
        if key in known:
            continue
        known.add(key)
        fresh.append(item)
    return fresh
