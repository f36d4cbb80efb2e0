# File: sitemap_monitor/parser/sitemap_parser.py
"""sitemap_monitor.parser.sitemap_parser: Разбор sitemap.xml в тип документа и список URL."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Union

from lxml import etree

from sitemap_monitor.crawler.fetcher import Fetcher
from sitemap_monitor.errors import ParseError
from sitemap_monitor.logger import get_logger

logger = get_logger("sitemap")


@dataclass(frozen=True, slots=True)
class Urlset:
    """``<urlset>``: страницы сайта, ``urls`` в порядке документа."""

    urls: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class SitemapIndex:
    """``<sitemapindex>``: ссылки на другие sitemap (не поддерживается)."""


@dataclass(frozen=True, slots=True)
class Unrecognized:
    """Корневой элемент не распознан или XML не разобран."""

    reason: str = "Unknown XML structure"


SitemapDocument = Union[Urlset, SitemapIndex, Unrecognized]


def _xml_parser(encoding: Optional[str] = None) -> etree.XMLParser:
    return etree.XMLParser(
        encoding=encoding, ns_clean=True, recover=True, resolve_entities=False, no_network=True
    )


def parse_sitemap(xml_content: Union[str, bytes]) -> SitemapDocument:
    """Разбирает XML sitemap и определяет тип документа.

    Args:
        xml_content: байты ответа как есть (кодировку берёт из XML-декларации lxml)
            или уже декодированная строка (декларация encoding= тогда игнорируется).

    Returns:
        ``Urlset`` со списком URL из ``<url><loc>``, ``SitemapIndex`` или ``Unrecognized``.
        Записи ``<url>`` без ``<loc>`` (или с пустым ``<loc>``) пропускаются.

    Пример:
    ```python
    from sitemap_monitor.parser.sitemap_parser import Urlset, parse_sitemap

    doc = parse_sitemap(content)
    if isinstance(doc, Urlset):
        print(doc.urls)
    ```
    """
    if isinstance(xml_content, str):
        raw, encoding = xml_content.strip().encode("utf-8"), "utf-8"
    else:
        raw, encoding = xml_content.strip(), None
    if not raw:
        return Unrecognized()
    try:
        root = etree.fromstring(raw, parser=_xml_parser(encoding))
    except (etree.XMLSyntaxError, ValueError) as exc:
        logger.debug("XML parse failed: %s", exc)
        return Unrecognized()
    if root is None:
        return Unrecognized()

    tag = etree.QName(root).localname
    if tag == "urlset":
        urls: List[str] = []
        for entry in root.iterfind("{*}url"):
            loc = entry.find("{*}loc")
            if loc is not None and loc.text and loc.text.strip():
                urls.append(loc.text.strip())
        return Urlset(tuple(urls))
    if tag == "sitemapindex":
        return SitemapIndex()
    return Unrecognized()


async def fetch_sitemap_urls(sitemap_url: str, fetcher: Fetcher) -> List[str]:
    """Загружает sitemap и возвращает URL в порядке документа.

    Raises:
        NetworkError: сеть недоступна или таймаут.
        ParseError: ответ не 200 или документ не ``urlset``.
    """
    result = await fetcher.fetch(sitemap_url, timeout=fetcher.config.fetch_urls_timeout)
    if not result.ok:
        raise ParseError(f"HTTP {result.status}")
    document = parse_sitemap(result.body)
    if not isinstance(document, Urlset):
        raise ParseError("Not a urlset sitemap")
    logger.debug("Parsed %d URLs from %s", len(document.urls), sitemap_url)
    return list(document.urls)
