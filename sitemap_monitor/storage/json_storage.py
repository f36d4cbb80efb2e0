"""
JSON-file repository: ``sites.json``, ``seen_urls.json`` and ``new_items.json`` under one data directory.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from sitemap_monitor.logger import get_logger
from sitemap_monitor.models import NewItem, ReviewStatus, SeenSet, Site
from sitemap_monitor.storage.base import Repository, filter_new_items, item_key

logger = get_logger("storage")

SITES_FILE = "sites.json"
SEEN_FILE = "seen_urls.json"
NEW_ITEMS_FILE = "new_items.json"


def atomic_write_json(path: Path, data: Any) -> None:
    """Write *data* to a temp file in the same directory, then rename over *path*."""
    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class JsonFileRepository(Repository):
    """
    File-backed repository.

    Seen-sets of all sites share one file (``{site_id: {hash: url}}``); saving
    one site's set rewrites the file with the other sites' sets untouched.
    A process-local lock serializes read-modify-write cycles.
    """

    def __init__(self, data_dir: Union[str, Path]) -> None:
        self.data_dir = Path(data_dir)
        self._lock = threading.RLock()
        self.ensure_files()

    def ensure_files(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for name, empty in ((SITES_FILE, []), (SEEN_FILE, {}), (NEW_ITEMS_FILE, [])):
            path = self.data_dir / name
            if not path.exists():
                atomic_write_json(path, empty)

    def _read(self, name: str, default: Any) -> Any:
        path = self.data_dir / name
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return default
        except json.JSONDecodeError as exc:
            raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc

    def _write(self, name: str, data: Any) -> None:
        atomic_write_json(self.data_dir / name, data)

    # --- sites -------------------------------------------------------------

    def load_sites(self) -> List[Site]:
        with self._lock:
            return [Site.from_dict(row) for row in self._read(SITES_FILE, [])]

    def save_sites(self, sites: Sequence[Site]) -> None:
        with self._lock:
            self._write(SITES_FILE, [s.to_dict() for s in sites])

    def save_site(self, site: Site) -> None:
        with self._lock:
            super().save_site(site)

    # --- seen-sets ---------------------------------------------------------

    def load_seen(self, site_id: str) -> SeenSet:
        with self._lock:
            all_seen: Dict[str, SeenSet] = self._read(SEEN_FILE, {})
            return dict(all_seen.get(site_id, {}))

    def save_seen(self, site_id: str, seen: SeenSet) -> None:
        with self._lock:
            all_seen: Dict[str, SeenSet] = self._read(SEEN_FILE, {})
            all_seen[site_id] = dict(seen)
            self._write(SEEN_FILE, all_seen)

    # --- items -------------------------------------------------------------
    # Rows that NewItem.from_dict cannot read stay in the file untouched and
    # still count for dedup when they carry a site id and a url.

    def _read_rows(self) -> List[Dict[str, Any]]:
        return list(self._read(NEW_ITEMS_FILE, []))

    @staticmethod
    def _parse(row: Dict[str, Any]) -> Optional[NewItem]:
        try:
            return NewItem.from_dict(row)
        except (KeyError, TypeError, AttributeError) as exc:
            logger.warning("Unreadable item row kept as is (%s: %s)", type(exc).__name__, exc)
            return None

    @staticmethod
    def _row_key(row: Dict[str, Any]) -> Optional[str]:
        if not isinstance(row, dict):
            return None
        site_id = row.get("site_id") or row.get("siteId")
        url = row.get("url")
        if not site_id or not url:
            return None
        return item_key(site_id, url)

    def load_items(self, site_id: Optional[str] = None) -> List[NewItem]:
        with self._lock:
            rows = self._read_rows()
        items = [item for item in map(self._parse, rows) if item is not None]
        if site_id is None:
            return items
        return [i for i in items if i.site_id == site_id]

    def append_items(self, items: Sequence[NewItem]) -> List[NewItem]:
        with self._lock:
            rows = self._read_rows()
            known = {key for key in map(self._row_key, rows) if key is not None}
            to_add = filter_new_items((), items, known)
            if to_add:
                self._write(NEW_ITEMS_FILE, [*rows, *(i.to_dict() for i in to_add)])
            skipped = len(items) - len(to_add)
            if skipped:
                logger.info("Skipped %d already stored item(s)", skipped)
            return to_add

    def update_item(
        self,
        item_id: str,
        *,
        keyword_final: Optional[str] = None,
        review_status: Optional[ReviewStatus] = None,
    ) -> Optional[NewItem]:
        with self._lock:
            rows = self._read_rows()
            for index, row in enumerate(rows):
                if not isinstance(row, dict) or row.get("id") != item_id:
                    continue
                item = self._parse(row)
                if item is None:
                    continue
                if keyword_final is not None:
                    item.keyword_final = keyword_final
                if review_status is not None:
                    item.review_status = review_status
                rows[index] = item.to_dict()
                self._write(NEW_ITEMS_FILE, rows)
                return item
            return None
