"""sitemap_monitor.storage: Хранилища сайтов, seen-set и элементов ревью."""

from .base import Repository, filter_new_items, item_key
from .json_storage import JsonFileRepository
from .memory import InMemoryRepository

__all__ = ["Repository", "JsonFileRepository", "InMemoryRepository", "item_key", "filter_new_items"]
