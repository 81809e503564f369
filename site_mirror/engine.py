# File: site_mirror/engine.py
"""site_mirror.engine: Orchestration layer для запуска зеркалирования."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional, Union

from site_mirror.aggregator import MirrorReport
from site_mirror.config import MirrorConfig, load_config
from site_mirror.crawler.crawler import MirrorCrawler
from site_mirror.logger import logger

__all__ = ["Engine", "start_mirror", "run"]


async def start_mirror(config: MirrorConfig) -> MirrorReport:
    """Корутина: зеркалирует сайт по конфигу и возвращает отчёт."""
    async with MirrorCrawler(config) as crawler:
        return await crawler.run()


def run(seed_url: str, output_dir: Union[str, Path] = "mirror", **overrides: Any) -> MirrorReport:
    """
    Блокирующая точка входа: зеркалирует ``seed_url`` в ``output_dir`` и
    возвращается, когда не осталось ни одной задачи.

    ``overrides``: остальные поля MirrorConfig (concurrency, timeout, user_agent).
    """
    config = MirrorConfig(base_url=seed_url, output_dir=output_dir, **overrides)
    return Engine(config).start_mirror()


class Engine:
    """Фасад для CLI и тестов: загрузка конфига и запуск зеркалирования."""

    @staticmethod
    def load_config(path: Optional[str], **overrides: Any) -> MirrorConfig:
        """Загружает конфиг из YAML/JSON, применяя переопределения."""
        return load_config(path, **overrides)

    def __init__(self, config: MirrorConfig) -> None:
        """Инициализирует Engine с заданной конфигурацией."""
        self.config = config

    def start_mirror(self, run_timeout: Optional[float] = None) -> MirrorReport:
        """Запускает зеркалирование и блокируется до его завершения."""
        logger.info("Starting mirror of %s…", self.config.seed_url)

        coro = start_mirror(self.config)
        if run_timeout:
            coro = asyncio.wait_for(coro, timeout=run_timeout)
        try:
            return asyncio.run(coro)
        except asyncio.TimeoutError:
            logger.error("Mirroring did not finish within %s seconds", run_timeout)
            raise
        except Exception as exc:
            logger.error("Mirroring failed: %s", exc)
            raise
