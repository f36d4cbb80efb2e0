# === FILE: sitemap_monitor/logger.py ===
"""Логирование SitemapMonitor.

Один корневой логгер проекта ``SitemapMonitor``; модули берут дочерние
логгеры через :func:`get_logger` (``SitemapMonitor.engine``,
``SitemapMonitor.fetcher`` …) и пишут через обработчики корневого.

Уровни по соглашению:
  DEBUG    детали по отдельным URL (robots.txt, заголовки, повторы)
  INFO     начало и итог discover/baseline/scan
  WARNING  неудачная операция над сайтом, поглощённые ошибки

CLI вызывает :func:`init_logging` со своими опциями; до этого действует
конфигурация по умолчанию (stdout, INFO).
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Optional, TextIO, Union

LOGGER_NAME: Final[str] = "SitemapMonitor"
LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# ротация файла логов
_MAX_BYTES: Final[int] = 5 * 1024 * 1024
_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _handlers(log_format: str, log_file: Union[str, Path, None], stream: Optional[TextIO]) -> List[logging.Handler]:
    formatter = logging.Formatter(log_format)
    handlers: List[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(str(log_file), maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8")
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = LOG_FORMAT,
    stream: Optional[TextIO] = None,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Пере)настраивает корневой логгер проекта.

    :param level: уровень, числом или строкой (``"DEBUG"``)
    :param log_file: файл с ротацией (5 MB × 3); None → только поток
    :param log_format: формат для :class:`logging.Formatter`
    :param stream: поток консольного вывода (по умолчанию текущий ``sys.stdout``)
    :param replace_handlers: снять ранее установленные обработчики
    """
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    if replace_handlers:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
    for handler in _handlers(log_format, log_file, stream):
        root.addHandler(handler)
    root.propagate = False
    return root


def init_logging(
    level: _LevelT = "INFO",
    log_file: Union[str, Path, None] = None,
    log_format: str = LOG_FORMAT,
) -> logging.Logger:
    """Вызов из CLI: заменить обработчики и применить уровень."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


def get_logger(name: str) -> logging.Logger:
    """Дочерний логгер модуля, например ``get_logger("locator")`` → ``SitemapMonitor.locator``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "get_logger", "LOGGER_NAME", "LOG_FORMAT"]
