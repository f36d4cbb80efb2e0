# File: sitemap_monitor/utils.py
"""sitemap_monitor.utils: Утилиты для URL и доменов: нормализация, хеш, выбор схемы."""

from __future__ import annotations

import hashlib
import re
from typing import Collection, List, Sequence

from sitemap_monitor.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "hash_url",
    "normalize_domain",
    "get_scheme",
    "remove_duplicates",
)

_LOCAL_PREFIXES = ("localhost", "127.0.0.1", "0.0.0.0")
_IPV4_RE = re.compile(r"^(?:[0-9]{1,3}\.){3}[0-9]{1,3}(?::[0-9]+)?$")
_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def normalize_url(url: str) -> str:
    """Нормализует URL: trim, отбрасывает фрагмент (#...), снимает один завершающий слеш."""
    clean = url.strip()
    clean = clean.split("#", 1)[0]
    if clean.endswith("/"):
        clean = clean[:-1]
    return clean


def hash_url(url: str) -> str:
    """SHA-1 от уже нормализованного URL в hex (ключ seen-set)."""
    return hashlib.sha1(url.encode("utf-8")).hexdigest()


def normalize_domain(raw: str) -> str:
    """Приводит ввод пользователя к домену: lower-case, без схемы и завершающего слеша."""
    domain = raw.strip().lower()
    domain = _SCHEME_RE.sub("", domain)
    if domain.endswith("/"):
        domain = domain[:-1]
    return domain


def get_scheme(domain: str) -> str:
    """Возвращает ``http://`` для локальных хостов и голых IPv4, иначе ``https://``."""
    is_local = (
        domain.startswith(_LOCAL_PREFIXES)
        or "localhost:" in domain
        or bool(_IPV4_RE.match(domain))
    )
    return "http://" if is_local else "https://"


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
