# === FILE: page_scout/scanner.py ===
"""
Асинхронный конвейер анализа одной страницы.

Основная страница и вспомогательные пробы загружаются одновременно; если
основная загрузка падает, задача проб отменяется и ошибка уходит наружу.
"""
from __future__ import annotations

import asyncio

from aiohttp import ClientSession

from page_scout.aggregator import AnalysisReport, aggregate_results
from page_scout.config import AnalyzerConfig
from page_scout.crawler.ancillary import gather_ancillary
from page_scout.crawler.fetcher import Fetcher
from page_scout.crawler.pagespeed import SleepT
from page_scout.errors import AnalysisError
from page_scout.logger import for_target, logger
from page_scout.parser.html_parser import parse_html
from page_scout.rules import run_rules
from page_scout.rules.base import AnalysisContext
from page_scout.utils import normalize_input_url

_PAGE_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


async def _analyze(
    url: str,
    config: AnalyzerConfig,
    session: ClientSession,
    sleep: SleepT,
) -> AnalysisReport:
    target = normalize_input_url(url)
    fetcher = Fetcher(session, config)
    log = for_target(target.href)
    log.info("Analysis started")

    ancillary_task = asyncio.create_task(gather_ancillary(fetcher, target, sleep=sleep))
    try:
        page = await fetcher.fetch(target.href, headers={"Accept": _PAGE_ACCEPT})
    except BaseException:
        ancillary_task.cancel()
        await asyncio.gather(ancillary_task, return_exceptions=True)
        raise
    ancillary = await ancillary_task

    log.info(
        "Fetched %s: HTTP %d, %d bytes in %d ms",
        page.url,
        page.status,
        page.byte_length,
        page.elapsed_ms,
    )
    doc = parse_html(page.body)
    ctx = AnalysisContext(doc=doc, target=target, page=page, ancillary=ancillary)
    if config.rule_workers > 1:
        results = await asyncio.to_thread(run_rules, ctx, config.rule_workers)
    else:
        results = run_rules(ctx)

    report = aggregate_results(
        target.href,
        results,
        load_time_ms=page.elapsed_ms,
        content_length=page.byte_length,
    )
    log.info("Analysis finished: score %d", report.overall_score)
    return report


async def start_analysis(
    url: str,
    config: AnalyzerConfig,
    session: ClientSession | None = None,
    *,
    sleep: SleepT = asyncio.sleep,
) -> AnalysisReport:
    """
    Анализирует страницу по адресу url и возвращает полный отчёт.

    Parameters
    ----------
    url : str
        Адрес страницы; схема https:// добавляется, если не указана.
    config : AnalyzerConfig
        Таймауты, настройки PageSpeed и число потоков для правил.
    session : ClientSession, optional
        Общая HTTP-сессия; без неё создаётся и закрывается своя.

    Raises
    ------
    AnalysisError
        InvalidUrlError, FetchError и его подклассы; любой другой сбой
        оборачивается в AnalysisError.
    """
    try:
        if session is not None:
            return await _analyze(url, config, session, sleep)
        async with ClientSession() as own_session:
            return await _analyze(url, config, own_session, sleep)
    except AnalysisError:
        raise
    except Exception as exc:
        logger.exception("Unexpected failure while analyzing %s", url)
        raise AnalysisError(f"An unexpected error occurred: {exc}") from exc


__all__ = ["start_analysis"]
