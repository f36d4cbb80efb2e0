# File: sitemap_monitor/parser/robots_parser.py
"""sitemap_monitor.parser.robots_parser: Извлечение директивы Sitemap из robots.txt."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

_ABSOLUTE_RE = re.compile(r"^https?://", re.IGNORECASE)


def find_sitemap_directive(text: str) -> Optional[str]:
    """Возвращает значение первой директивы ``Sitemap:`` или None.

    Строка должна начинаться с ``sitemap:`` без учёта регистра, пробел перед
    двоеточием не допускается (``Sitemap : /x.xml`` не директива). Строка
    делится только по первому двоеточию, поэтому схема в значении сохраняется.
    Пустые значения пропускаются.
    """
    for directive, value in _prepare_lines(text):
        if directive == "sitemap" and value:
            return value
    return None


def resolve_sitemap_location(value: str, origin: str) -> str:
    """Превращает значение директивы в абсолютный URL.

    Args:
        value: значение директивы (абсолютный URL или путь).
        origin: ``{scheme}{domain}`` без завершающего слеша.
    """
    if _ABSOLUTE_RE.match(value):
        return value
    if not value.startswith("/"):
        value = "/" + value
    return f"{origin}{value}"


def _prepare_lines(text: str) -> List[Tuple[str, str]]:
    """Разделяет текст на (директива, значение), директива в нижнем регистре."""
    lines: List[Tuple[str, str]] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or ":" not in line:
            continue
        key, val = line.split(":", 1)
        lines.append((key.lower(), val.strip()))
    return lines
