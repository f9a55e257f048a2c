# File: page_scout/engine.py
"""page_scout.engine: Синхронный фасад над start_analysis для CLI, скриптов и тестов."""

from __future__ import annotations

import asyncio
from typing import Optional

from page_scout.aggregator import AnalysisReport
from page_scout.config import AnalyzerConfig, load_config
from page_scout.errors import AnalysisError
from page_scout.logger import logger
from page_scout.scanner import start_analysis

__all__ = ["Engine", "status_for"]


def status_for(exc: BaseException) -> int:
    """HTTP-статус для исключения: свой у AnalysisError, 500 для остальных."""
    return exc.status_code if isinstance(exc, AnalysisError) else 500


class Engine:
    """Фасад: загрузка конфига и запуск анализа одной страницы."""

    @staticmethod
    def load_config(path: Optional[str]) -> AnalyzerConfig:
        """Загружает конфиг из YAML/JSON или использует значения по умолчанию."""
        return load_config(path)

    def __init__(self, config: AnalyzerConfig) -> None:
        self.config = config

    def run(self, url: str) -> AnalysisReport:
        """Запускает анализ в новом event loop и возвращает отчёт."""
        logger.info("Starting analysis of %s", url)
        try:
            return asyncio.run(start_analysis(url, self.config))
        except AnalysisError as exc:
            logger.error("Analysis failed (%d): %s", exc.status_code, exc.message)
            raise
