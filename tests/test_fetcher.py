# File: tests/test_fetcher.py
from __future__ import annotations

import asyncio

import pytest
from aiohttp import web

from page_scout.crawler.fetcher import Fetcher
from page_scout.errors import FetchError, FetchTimeoutError, HttpStatusError, NetworkError


def make_app() -> web.Application:
    async def page(request: web.Request) -> web.Response:
        return web.Response(
            text=f"<html><body>UA={request.headers.get('User-Agent')}</body></html>",
            content_type="text/html",
            headers={"X-Custom": "yes"},
        )

    async def missing(_: web.Request) -> web.Response:
        return web.Response(status=404, text="nope")

    async def slow(_: web.Request) -> web.Response:
        await asyncio.sleep(1)
        return web.Response(text="late")

    async def moved(_: web.Request) -> web.Response:
        raise web.HTTPMovedPermanently("/page")

    app = web.Application()
    app.router.add_get("/page", page)
    app.router.add_get("/missing", missing)
    app.router.add_get("/slow", slow)
    app.router.add_get("/moved", moved)
    return app


@pytest.mark.asyncio()
async def test_fetch_success(serve, session, config):
    base = await serve(make_app())
    result = await Fetcher(session, config).fetch(f"{base}/page")
    assert result.status == 200
    assert "UA=TestAgent/1.0" in result.body
    assert result.headers["x-custom"] == "yes"
    assert result.byte_length == len(result.body.encode("utf-8"))
    assert result.elapsed_ms >= 0


@pytest.mark.asyncio()
async def test_fetch_follows_redirects(serve, session, config):
    base = await serve(make_app())
    result = await Fetcher(session, config).fetch(f"{base}/moved")
    assert result.url == f"{base}/page"


@pytest.mark.asyncio()
async def test_fetch_custom_headers_override_agent(serve, session, config):
    base = await serve(make_app())
    result = await Fetcher(session, config).fetch(f"{base}/page", headers={"User-Agent": "Other/2.0"})
    assert "UA=Other/2.0" in result.body


@pytest.mark.asyncio()
async def test_http_status_error(serve, session, config):
    base = await serve(make_app())
    fetcher = Fetcher(session, config)
    with pytest.raises(HttpStatusError) as exc_info:
        await fetcher.fetch(f"{base}/missing")
    assert exc_info.value.status == 404
    assert exc_info.value.status_code == 422
    assert exc_info.value.message == "Failed to fetch URL: HTTP 404"

    result = await fetcher.fetch(f"{base}/missing", raise_for_status=False)
    assert result.status == 404


@pytest.mark.asyncio()
async def test_head_has_no_body(serve, session, config):
    base = await serve(make_app())
    result = await Fetcher(session, config).fetch(f"{base}/page", method="HEAD")
    assert result.status == 200
    assert result.body == ""


@pytest.mark.asyncio()
async def test_timeout(serve, session, config):
    base = await serve(make_app())
    with pytest.raises(FetchTimeoutError) as exc_info:
        await Fetcher(session, config).fetch(f"{base}/slow", timeout=0.2)
    assert exc_info.value.timeout == 0.2
    assert exc_info.value.message == "Request timed out. The website took too long to respond."


@pytest.mark.asyncio()
async def test_network_error(session, config, unused_tcp_port):
    with pytest.raises(NetworkError) as exc_info:
        await Fetcher(session, config).fetch(f"http://127.0.0.1:{unused_tcp_port}/")
    assert isinstance(exc_info.value, FetchError)
    assert exc_info.value.message.startswith("Could not reach the website:")
