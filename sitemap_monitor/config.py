# === FILE: sitemap_monitor/config.py ===
"""
Модуль для загрузки и валидации конфигурации SitemapMonitor.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
)


class MonitorConfig(BaseModel):
    """Настройки монитора sitemap: таймауты, лимиты, хранилище."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    data_dir: Path = Field(Path("data"), description="Каталог JSON-хранилища.")
    user_agent: str = Field("GameSitemapMonitor/1.0", min_length=1, description="Заголовок User-Agent.")
    relay_url: Optional[HttpUrl] = Field(
        None, description="CORS-relay: запросы уходят на {relay_url}?url=<target>."
    )
    robots_timeout: float = Field(5.0, gt=0, description="Таймаут robots.txt (секунд).")
    sitemap_timeout: float = Field(10.0, gt=0, description="Таймаут проверки sitemap при discover.")
    fetch_urls_timeout: float = Field(15.0, gt=0, description="Таймаут загрузки sitemap при baseline/scan.")
    title_timeout: float = Field(3.0, gt=0, description="Таймаут загрузки заголовка страницы.")
    title_max_bytes: int = Field(500 * 1024, ge=1, description="Лимит тела страницы для заголовка.")
    enrich_concurrency: int = Field(5, ge=1, description="Параллельные загрузки заголовков в одном scan.")
    site_concurrency: int = Field(4, ge=1, description="Параллельно сканируемые сайты.")
    retry_times: int = Field(0, ge=0, description="Число повторных попыток при 5xx/429.")
    sample_size: int = Field(5, ge=0, description="Размер выборки URL в сводке.")

    @field_validator("relay_url", mode="before")
    def _strip_trailing_slash(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.rstrip("/")
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> MonitorConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект MonitorConfig.
    Без явного пути использует configs/default.yaml, а если его нет, то значения по умолчанию.
    Явно указанный, но отсутствующий файл приводит к FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            return MonitorConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    return MonitorConfig(**data)


__all__ = ["MonitorConfig", "load_config", "ValidationError"]
