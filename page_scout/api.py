# File: page_scout/api.py
"""page_scout.api: HTTP-интерфейс анализатора на aiohttp.web.

POST /api/analyze {"url": "..."} -> отчёт JSON или {"error": "..."} со статусом
400 / 422 / 500. GET /healthz -> {"status": "ok"}.
"""

from __future__ import annotations

from typing import AsyncIterator

from aiohttp import ClientSession, web

from page_scout import __version__
from page_scout.config import AnalyzerConfig
from page_scout.engine import status_for
from page_scout.errors import AnalysisError
from page_scout.logger import adopt_aiohttp_loggers, logger
from page_scout.scanner import start_analysis

CONFIG_KEY = web.AppKey("config", AnalyzerConfig)
SESSION_KEY = web.AppKey("session", ClientSession)

routes = web.RouteTableDef()


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


@routes.get("/healthz")
async def healthz(_: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "version": __version__})


@routes.post("/api/analyze")
async def analyze(request: web.Request) -> web.Response:
    try:
        payload = await request.json()
    except ValueError:
        return _error("Request body must be JSON", 400)
    url = payload.get("url") if isinstance(payload, dict) else None
    if not isinstance(url, str) or not url.strip():
        return _error("URL is required", 400)

    app = request.app
    try:
        report = await start_analysis(url, app[CONFIG_KEY], app[SESSION_KEY])
    except AnalysisError as exc:
        logger.warning("Analysis of %s failed: %s", url, exc.message)
        return _error(exc.message, status_for(exc))
    return web.json_response(report.to_dict())


async def _client_session(app: web.Application) -> AsyncIterator[None]:
    async with ClientSession() as session:
        app[SESSION_KEY] = session
        yield


def create_app(config: AnalyzerConfig) -> web.Application:
    """Приложение aiohttp с общей ClientSession на всё время работы."""
    app = web.Application()
    app[CONFIG_KEY] = config
    app.cleanup_ctx.append(_client_session)
    app.add_routes(routes)
    return app


def run_server(config: AnalyzerConfig, host: str = "127.0.0.1", port: int = 8080) -> None:
    adopt_aiohttp_loggers()
    logger.info("PageScout API listening on http://%s:%d", host, port)
    web.run_app(create_app(config), host=host, port=port, print=None)


__all__ = ["create_app", "run_server", "CONFIG_KEY", "SESSION_KEY"]
