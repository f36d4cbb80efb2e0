# === FILE: sitemap_monitor/cli.py ===
#!/usr/bin/env python3
"""
Точка входа SitemapMonitor через командную строку.

Команды:
  import    Добавить домены (аргументы или --file)
  sites     Показать сайты и их состояние
  discover  Найти sitemap (robots.txt или /sitemap.xml)
  baseline  Заполнить seen-set без создания элементов ревью
  scan      Найти новые URL и создать элементы ревью
  feed      Лента новых URL (pending сначала)
  seen      Просмотренные URL сайта (постранично)
  items     Новые URL сайта (постранично)
  review    Изменить keyword_final / review_status элемента
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Пример:
  sitemap-monitor import example.com games.io
  sitemap-monitor discover --all
  sitemap-monitor baseline site_1a2b3c4d
  sitemap-monitor scan --all
"""
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import click

from sitemap_monitor import __version__
from sitemap_monitor.config import MonitorConfig, load_config
from sitemap_monitor.crawler.fetcher import Fetcher
from sitemap_monitor.errors import MonitorError
from sitemap_monitor.logger import init_logging
from sitemap_monitor.models import REVIEW_STATUSES
from sitemap_monitor.monitor import SiteMonitor
from sitemap_monitor.report.json_report import render_json
from sitemap_monitor.storage.json_storage import JsonFileRepository
from sitemap_monitor.utils import remove_duplicates

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def echo_json(data: Any, pretty: bool = True) -> None:
    click.echo(json.dumps(data, ensure_ascii=False, indent=2 if pretty else None))


def build_monitor(cfg: MonitorConfig, fetcher: Optional[Fetcher] = None) -> SiteMonitor:
    return SiteMonitor(cfg, JsonFileRepository(cfg.data_dir), fetcher or Fetcher(cfg))


async def run_with_monitor(cfg: MonitorConfig, operation: Callable[[SiteMonitor], Awaitable[Any]]) -> Any:
    """Open an HTTP session, run *operation* against a monitor, close the session."""
    async with Fetcher(cfg) as fetcher:
        return await operation(build_monitor(cfg, fetcher))


def _run_network(ctx, operation) -> Any:
    cfg = ctx.obj['config']
    try:
        return asyncio.run(run_with_monitor(cfg, operation))
    except MonitorError as e:
        print_error(str(e))


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='SitemapMonitor, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON (default: configs/default.yaml).'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд SitemapMonitor CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('import', context_settings=CONTEXT_SETTINGS)
@click.argument('domains', nargs=-1)
@click.option(
    '--file', '-f', 'domains_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Файл со списком доменов (по одному в строке)'
)
@click.pass_context
def import_sites(ctx, domains, domains_file):
    """Добавить домены для мониторинга."""
    items = list(domains)
    if domains_file:
        items.extend(line.strip() for line in domains_file.read_text(encoding='utf-8').splitlines())
    items = remove_duplicates([d for d in items if d])
    if not items:
        print_error('Не указано ни одного домена')
    monitor = build_monitor(ctx.obj['config'])
    added = monitor.import_sites(items)
    click.echo(f'Imported: {added}')


@cli.command('sites', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def list_sites(ctx):
    """Показать сайты в JSON."""
    monitor = build_monitor(ctx.obj['config'])
    echo_json([s.to_dict() for s in monitor.list_sites()])


@cli.command('discover', context_settings=CONTEXT_SETTINGS)
@click.argument('site_id', required=False)
@click.option('--all', 'all_sites', is_flag=True, help='Для всех сайтов')
@click.pass_context
def discover(ctx, site_id, all_sites):
    """Найти и проверить sitemap."""
    if not site_id and not all_sites:
        print_error('Укажите SITE_ID или --all')
    if all_sites:
        sites = _run_network(ctx, lambda m: m.discover_all())
    else:
        sites = [_run_network(ctx, lambda m: m.discover(site_id))]
    for site in sites:
        line = f'{site.id} {site.domain}: {site.status} {site.sitemap_url}'
        if site.error_message:
            line += f' ({site.error_message})'
        click.echo(line)


@cli.command('baseline', context_settings=CONTEXT_SETTINGS)
@click.argument('site_id')
@click.pass_context
def baseline(ctx, site_id):
    """Заполнить seen-set сайта."""
    result = _run_network(ctx, lambda m: m.baseline(site_id))
    echo_json(result.summary.to_dict())
    if result.summary.outcome == 'failure':
        print_error(f'Baseline не выполнен: {result.site.error_message}')


@cli.command('scan', context_settings=CONTEXT_SETTINGS)
@click.argument('site_id', required=False)
@click.option('--all', 'all_sites', is_flag=True, help='Для всех сайтов с готовым baseline')
@click.pass_context
def scan(ctx, site_id, all_sites):
    """Найти новые URL."""
    if not site_id and not all_sites:
        print_error('Укажите SITE_ID или --all')
    if all_sites:
        results = _run_network(ctx, lambda m: m.scan_all())
    else:
        results = [_run_network(ctx, lambda m: m.scan(site_id))]

    failed = 0
    for result in results:
        site = result.site
        if result.summary.outcome == 'failure':
            failed += 1
            click.echo(f'{site.id} {site.domain}: failed ({site.error_message})')
            continue
        click.echo(f'{site.id} {site.domain}: {len(result.new_items)} new')
        for item in result.new_items:
            click.echo(f'  [{item.url_type}] {item.url}' + (f' | {item.title}' if item.title else ''))
    if failed:
        print_error(f'Ошибок сканирования: {failed}')


@cli.command('feed', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить ленту в JSON-файл'
)
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.pass_context
def feed(ctx, json_output, pretty):
    """Лента новых URL."""
    items = build_monitor(ctx.obj['config']).feed()
    if json_output:
        try:
            saved = render_json(items, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')
        return
    echo_json([i.to_dict() for i in items], pretty=pretty)


def _page_options(func):
    func = click.option('--page', default=1, show_default=True, type=click.IntRange(min=1))(func)
    func = click.option('--limit', default=50, show_default=True, type=click.IntRange(min=1))(func)
    return func


@cli.command('seen', context_settings=CONTEXT_SETTINGS)
@click.argument('site_id')
@_page_options
@click.pass_context
def seen(ctx, site_id, page, limit):
    """Просмотренные URL сайта."""
    try:
        result = build_monitor(ctx.obj['config']).site_seen(site_id, page, limit)
    except MonitorError as e:
        print_error(str(e))
    echo_json({'data': result.data, 'total': result.total, 'page': result.page, 'limit': result.limit})


@cli.command('items', context_settings=CONTEXT_SETTINGS)
@click.argument('site_id')
@_page_options
@click.pass_context
def site_items(ctx, site_id, page, limit):
    """Новые URL сайта, свежие сначала."""
    try:
        result = build_monitor(ctx.obj['config']).site_items(site_id, page, limit)
    except MonitorError as e:
        print_error(str(e))
    echo_json({
        'data': [i.to_dict() for i in result.data],
        'total': result.total,
        'page': result.page,
        'limit': result.limit,
    })


@cli.command('review', context_settings=CONTEXT_SETTINGS)
@click.argument('item_id')
@click.option('--keyword', 'keyword_final', default=None, help='Итоговое ключевое слово')
@click.option('--status', 'review_status', default=None, type=click.Choice(REVIEW_STATUSES))
@click.pass_context
def review(ctx, item_id, keyword_final, review_status):
    """Изменить элемент ревью."""
    if keyword_final is None and review_status is None:
        print_error('Укажите --keyword и/или --status')
    try:
        item = build_monitor(ctx.obj['config']).review_item(
            item_id, keyword_final=keyword_final, review_status=review_status
        )
    except MonitorError as e:
        print_error(str(e))
    echo_json(item.to_dict())


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


# expose these names at module level for test monkey-patching
cli.run_with_monitor = run_with_monitor
cli.render_json = render_json

if __name__ == "__main__":
    cli()
