# File: tests/test_scanner.py
from __future__ import annotations

import pytest
from aiohttp import web

from page_scout import scanner
from page_scout.engine import Engine, status_for
from page_scout.errors import AnalysisError, HttpStatusError, InvalidUrlError, NetworkError
from page_scout.rules import CHECK_NAMES

PAGE = (
    "<!DOCTYPE html><html lang='en'><head><meta charset='utf-8'>"
    "<title>Trail Running Shoes Buying Guide</title>"
    "<meta name='description' content='Learn how to pick trail running shoes.'>"
    "</head><body><h1>Trail running shoes</h1><p>Grip matters.</p></body></html>"
)


def site_app() -> web.Application:
    async def index(_: web.Request) -> web.Response:
        return web.Response(text=PAGE, content_type="text/html")

    async def robots(_: web.Request) -> web.Response:
        return web.Response(text="User-agent: GPTBot\nDisallow: /\n")

    async def gone(_: web.Request) -> web.Response:
        return web.Response(status=410)

    app = web.Application()
    app.router.add_get("/", index)
    app.router.add_get("/robots.txt", robots)
    app.router.add_get("/gone", gone)
    return app


@pytest.mark.asyncio()
async def test_start_analysis_full_report(serve, session, config):
    base = await serve(site_app())
    report = await scanner.start_analysis(base, config, session)

    assert report.url == base + "/"
    assert list(report.results) == list(CHECK_NAMES)
    assert report.content_length == len(PAGE.encode("utf-8"))
    assert report.load_time_ms >= 0
    assert 0 <= report.overall_score <= 100

    results = report.to_dict()["results"]
    assert results["sslHttps"]["severity"] == "fail"
    assert results["robotsTxt"]["exists"] is True
    assert results["aiSearchVisibility"]["blockedBots"] == ["ChatGPT/OpenAI"]
    assert results["googlePageSpeed"]["severity"] == "warning"
    assert results["title"]["title"] == "Trail Running Shoes Buying Guide"


@pytest.mark.asyncio()
async def test_start_analysis_threaded_rules(serve, session, config):
    base = await serve(site_app())
    threaded = await scanner.start_analysis(base, config.model_copy(update={"rule_workers": 4}), session)
    sequential = await scanner.start_analysis(base, config, session)
    assert {k: v.severity for k, v in threaded.results.items()} == {
        k: v.severity for k, v in sequential.results.items()
    }


@pytest.mark.asyncio()
async def test_primary_http_error(serve, session, config):
    base = await serve(site_app())
    with pytest.raises(HttpStatusError) as exc_info:
        await scanner.start_analysis(f"{base}/gone", config, session)
    assert exc_info.value.status == 410
    assert status_for(exc_info.value) == 422


@pytest.mark.asyncio()
async def test_unreachable_site(config, unused_tcp_port):
    with pytest.raises(NetworkError):
        await scanner.start_analysis(f"http://127.0.0.1:{unused_tcp_port}/", config)


@pytest.mark.asyncio()
async def test_invalid_url(config):
    with pytest.raises(InvalidUrlError) as exc_info:
        await scanner.start_analysis("   ", config)
    assert exc_info.value.message == "URL is required"
    assert status_for(exc_info.value) == 400


@pytest.mark.asyncio()
async def test_unexpected_errors_are_wrapped(serve, session, config, monkeypatch):
    def broken(html):
        raise RuntimeError("parser exploded")

    monkeypatch.setattr(scanner, "parse_html", broken)
    base = await serve(site_app())
    with pytest.raises(AnalysisError) as exc_info:
        await scanner.start_analysis(base, config, session)
    assert type(exc_info.value) is AnalysisError
    assert exc_info.value.message == "An unexpected error occurred: parser exploded"
    assert status_for(exc_info.value) == 500


def test_status_for_plain_exception():
    assert status_for(RuntimeError("x")) == 500


def test_engine_reraises_analysis_errors(config):
    with pytest.raises(InvalidUrlError):
        Engine(config).run("")
