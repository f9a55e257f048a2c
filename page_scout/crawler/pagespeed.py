# page_scout/crawler/pagespeed.py
"""
PageSpeed Insights probe with its own retry / rate-limit policy.

The probe never raises: every outcome is a :class:`PerfResult`, either with
the Lighthouse payload or with an error tag the consuming rules understand.
"""
from __future__ import annotations

import asyncio
import json
from typing import Awaitable, Callable

from page_scout.config import AnalyzerConfig, resolve_api_key
from page_scout.crawler.fetcher import Fetcher
from page_scout.crawler.models import PerfResult
from page_scout.errors import FetchTimeoutError, NetworkError
from page_scout.logger import logger

SleepT = Callable[[float], Awaitable[None]]


def build_params(page_url: str, config: AnalyzerConfig, api_key: str) -> list[tuple[str, str]]:
    params = [("url", page_url)]
    params.extend(("category", category) for category in config.pagespeed_categories)
    if api_key:
        params.append(("key", api_key))
    params.append(("strategy", config.pagespeed_strategy))
    return params


async def fetch_pagespeed(
    fetcher: Fetcher,
    page_url: str,
    *,
    api_key: str | None = None,
    sleep: SleepT = asyncio.sleep,
) -> PerfResult:
    """
    Query the scoring API for *page_url*.

    429 and transport failures are retried after a pause until
    ``pagespeed_max_attempts`` is used up; 403 and other HTTP errors are
    terminal on the first attempt.
    """
    config = fetcher.config
    if not config.pagespeed_enabled:
        return PerfResult(error="disabled")

    key = resolve_api_key(config) if api_key is None else api_key
    params = build_params(page_url, config, key)
    attempts = config.pagespeed_max_attempts

    for attempt in range(1, attempts + 1):
        last = attempt == attempts
        try:
            resp = await fetcher.fetch(
                config.pagespeed_endpoint,
                headers={"User-Agent": config.probe_user_agent, "Accept": "application/json"},
                params=params,
                timeout=config.pagespeed_timeout,
                raise_for_status=False,
            )
        except FetchTimeoutError:
            logger.warning("PageSpeed attempt %d/%d timed out", attempt, attempts)
            if last:
                return PerfResult(error="timeout")
            await sleep(config.pagespeed_retry_backoff)
            continue
        except NetworkError as exc:
            logger.warning("PageSpeed attempt %d/%d failed: %s", attempt, attempts, exc.reason)
            if last:
                return PerfResult(error="unavailable")
            await sleep(config.pagespeed_retry_backoff)
            continue

        if resp.status == 429:
            logger.warning("PageSpeed rate limited (attempt %d/%d)", attempt, attempts)
            if last:
                return PerfResult(error="rate_limited")
            await sleep(config.pagespeed_rate_limit_backoff)
            continue
        if resp.status == 403:
            return PerfResult(error="api_not_enabled")
        if not 200 <= resp.status < 300:
            return PerfResult(error=f"http_{resp.status}")

        try:
            payload = json.loads(resp.body)
        except json.JSONDecodeError:
            logger.warning("PageSpeed returned non-JSON body")
            return PerfResult(error="invalid_response")
        if not isinstance(payload, dict):
            return PerfResult(error="invalid_response")
        return PerfResult(data=payload)

    return PerfResult(error="unavailable")
