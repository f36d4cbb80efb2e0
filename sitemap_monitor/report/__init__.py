"""sitemap_monitor.report: Экспорт ленты новых URL для CLI и тестов."""

from .json_report import render_json

__all__ = ["render_json"]
