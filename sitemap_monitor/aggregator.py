# File: sitemap_monitor/aggregator.py
"""sitemap_monitor.aggregator: Сборка ScanSummary: счётчики, длительность, исход и выборка URL."""

from __future__ import annotations

import time
from typing import Callable, Iterable, List

from sitemap_monitor.models import ScanSummary

DEFAULT_SAMPLE_SIZE = 5


class SummaryBuilder:
    """Накопитель данных одного baseline/scan.

    Таймер запускается при создании; ``success()`` / ``failure()`` возвращают
    неизменяемый ScanSummary с длительностью в миллисекундах.
    """

    def __init__(
        self,
        *,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.sample_size = sample_size
        self._monotonic = monotonic
        self._started = monotonic()
        self.parsed_count = 0
        self.new_count = 0
        self.samples: List[str] = []

    def add_sample(self, url: str) -> None:
        """Добавляет URL в выборку, пока она не заполнена."""
        if len(self.samples) < self.sample_size:
            self.samples.append(url)

    def extend_samples(self, urls: Iterable[str]) -> None:
        for url in urls:
            if len(self.samples) >= self.sample_size:
                break
            self.samples.append(url)

    def elapsed_ms(self) -> int:
        return max(0, int(round((self._monotonic() - self._started) * 1000)))

    def success(self) -> ScanSummary:
        return ScanSummary(
            outcome="success",
            parsed_count=self.parsed_count,
            new_or_inserted_count=self.new_count,
            duration_ms=self.elapsed_ms(),
            sample_urls=tuple(self.samples),
        )

    def failure(self, error: str) -> ScanSummary:
        """Сводка неудачи: счётчики обнуляются, выборка пустая."""
        return ScanSummary(
            outcome="failure",
            parsed_count=0,
            new_or_inserted_count=0,
            duration_ms=self.elapsed_ms(),
            sample_urls=(),
            error=error,
        )


__all__ = ["SummaryBuilder", "DEFAULT_SAMPLE_SIZE"]
