"""
SitemapMonitor package initializer.
Defines package version and exposes the core API.
"""
__version__ = "0.1.0"

from sitemap_monitor.classifier import classify_url, extract_keyword
from sitemap_monitor.engine import DiffEngine
from sitemap_monitor.locator import locate_sitemap
from sitemap_monitor.utils import hash_url, normalize_url

__all__ = [
    "__version__",
    "DiffEngine",
    "locate_sitemap",
    "classify_url",
    "extract_keyword",
    "normalize_url",
    "hash_url",
]
