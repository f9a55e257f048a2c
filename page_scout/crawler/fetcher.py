# page_scout/crawler/fetcher.py
"""
Fetcher module: a single bounded-timeout HTTP exchange with distinct failure modes.

No retries happen here; callers that need a retry policy (the PageSpeed probe)
loop around :meth:`Fetcher.fetch` themselves.
"""
from __future__ import annotations

import asyncio
import time
from typing import Mapping, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from page_scout.config import AnalyzerConfig
from page_scout.crawler.models import FetchResult
from page_scout.errors import FetchTimeoutError, HttpStatusError, NetworkError
from page_scout.logger import logger

ParamsT = Mapping[str, str] | Sequence[tuple[str, str]]


class Fetcher:
    """Wraps a shared :class:`aiohttp.ClientSession` with per-call timeouts."""

    def __init__(self, session: ClientSession, config: AnalyzerConfig) -> None:
        self.session = session
        self.config = config

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        params: ParamsT | None = None,
        timeout: float | None = None,
        allow_redirects: bool = True,
        raise_for_status: bool = True,
        read_body: bool = True,
    ) -> FetchResult:
        """
        Perform one request and return a :class:`FetchResult`.

        ``elapsed_ms`` is measured until response headers arrive. With
        ``raise_for_status`` any non-2xx status raises :class:`HttpStatusError`;
        otherwise the result is returned and the caller inspects ``status``.

        Raises FetchTimeoutError when the wall-clock budget is exhausted and
        NetworkError for every other transport failure.
        """
        budget = timeout if timeout is not None else self.config.fetch_timeout
        req_headers = {"User-Agent": self.config.user_agent}
        if headers:
            req_headers.update(headers)

        started = time.monotonic()
        try:
            async with self.session.request(
                method,
                url,
                headers=req_headers,
                params=params,
                allow_redirects=allow_redirects,
                timeout=ClientTimeout(total=budget),
            ) as resp:
                elapsed_ms = int((time.monotonic() - started) * 1000)
                if raise_for_status and not 200 <= resp.status < 300:
                    raise HttpStatusError(url, resp.status)
                body = ""
                if read_body and method.upper() != "HEAD":
                    body = await resp.text(errors="replace")
                return FetchResult.build(
                    url=str(resp.url),
                    status=resp.status,
                    headers=resp.headers,
                    body=body,
                    elapsed_ms=elapsed_ms,
                )
        except asyncio.TimeoutError as exc:
            logger.debug("%s %s timed out after %ss", method, url, budget)
            raise FetchTimeoutError(url, budget) from exc
        except ClientError as exc:
            reason = str(exc) or type(exc).__name__
            logger.debug("%s %s failed: %s", method, url, reason)
            raise NetworkError(url, reason) from exc
