# sitemap_monitor/report/json_report.py

"""
Генерация JSON-отчёта для SitemapMonitor.

Сериализация ленты новых URL (NewItem) в файл.
"""
import json
from pathlib import Path
from typing import Iterable

from sitemap_monitor.models import NewItem


def render_json(items: Iterable[NewItem], output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет ленту items в формате JSON по указанному пути.

    :param items: элементы ревью в нужном порядке
    :param output_path: путь к JSON-файлу
    :param pretty: отступ 2 (иначе компактно)
    :return: Path сохранённого файла

    Пример:
    ```python
    from sitemap_monitor.report.json_report import render_json
    report_path = render_json(monitor.feed(), 'reports/feed.json')
    print(f"JSON report saved to: {report_path}")
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = [item.to_dict() for item in items]

    with output.open('w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2 if pretty else None)

    return output
