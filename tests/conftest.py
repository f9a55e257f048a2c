# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Mapping

import pytest
import pytest_asyncio
from aiohttp import ClientSession, web

from page_scout.config import AnalyzerConfig
from page_scout.crawler.models import AncillaryData, FetchResult
from page_scout.parser.html_parser import parse_html
from page_scout.rules.base import AnalysisContext
from page_scout.utils import normalize_input_url

ServeT = Callable[[web.Application], Awaitable[str]]


@pytest.fixture()
def config() -> AnalyzerConfig:
    """
    Конфиг для тестов: короткие таймауты, PageSpeed выключен, без пауз между попытками.
    """
    return AnalyzerConfig(
        user_agent="TestAgent/1.0",
        probe_user_agent="TestProbe/1.0",
        fetch_timeout=2.0,
        sitemap_timeout=1.0,
        robots_timeout=1.0,
        llms_timeout=1.0,
        https_probe_timeout=1.0,
        pagespeed_enabled=False,
        pagespeed_rate_limit_backoff=0,
        pagespeed_retry_backoff=0,
    )


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> AsyncIterator[ServeT]:
    """Запускает aiohttp-приложения на свободных портах и возвращает их базовые URL."""
    runners: list[web.AppRunner] = []

    async def _start(app: web.Application) -> str:
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    try:
        yield _start
    finally:
        for runner in runners:
            await runner.cleanup()


@pytest_asyncio.fixture
async def session() -> AsyncIterator[ClientSession]:
    async with ClientSession() as client:
        yield client


def make_ctx(
    html: str,
    url: str = "https://example.com/",
    *,
    headers: Mapping[str, str] | None = None,
    elapsed_ms: int = 120,
    ancillary: AncillaryData | None = None,
) -> AnalysisContext:
    """Контекст правила без сети: страница уже «загружена»."""
    target = normalize_input_url(url)
    page = FetchResult.build(
        url=target.href,
        status=200,
        headers=headers or {"Content-Type": "text/html; charset=utf-8"},
        body=html,
        elapsed_ms=elapsed_ms,
    )
    return AnalysisContext(
        doc=parse_html(html),
        target=target,
        page=page,
        ancillary=ancillary or AncillaryData(),
    )


@pytest.fixture()
def ctx_for() -> Callable[..., AnalysisContext]:
    return make_ctx


def page(head: str = "", body: str = "", *, lang: str = "en") -> str:
    return (
        f'<!DOCTYPE html><html lang="{lang}"><head><meta charset="utf-8">{head}</head>'
        f"<body>{body}</body></html>"
    )


@pytest.fixture()
def html_page() -> Callable[..., str]:
    return page
