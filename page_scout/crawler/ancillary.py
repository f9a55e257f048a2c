# page_scout/crawler/ancillary.py
"""
Ancillary gatherer: sitemap, robots.txt, llms.txt, HTTPS redirect and PageSpeed
probes run concurrently next to the primary fetch.

Every probe is a "try, degrade" coroutine returning a value; the gatherer
joins them inside one task group and never fails as a whole.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from page_scout.crawler.fetcher import Fetcher
from page_scout.crawler.models import (
    AncillaryData,
    HttpsRedirectProbe,
    LlmsFiles,
    PerfResult,
    SitemapProbe,
)
from page_scout.crawler.pagespeed import SleepT, fetch_pagespeed
from page_scout.errors import FetchError
from page_scout.logger import logger
from page_scout.utils import TargetUrl, toggle_www

T = TypeVar("T")

__all__ = [
    "gather_ancillary",
    "probe_sitemap",
    "probe_robots",
    "probe_llms",
    "probe_https_redirect",
]


def _probe_headers(fetcher: Fetcher) -> dict[str, str]:
    return {"User-Agent": fetcher.config.probe_user_agent}


async def probe_sitemap(fetcher: Fetcher, target: TargetUrl) -> SitemapProbe:
    """HEAD /sitemap.xml on the origin, then once more on the www-toggled host."""
    alt_host = toggle_www(target.hostname)
    alt_netloc = f"{alt_host}:{target.port}" if target.port is not None else alt_host
    candidates = (
        f"{target.origin}/sitemap.xml",
        f"{target.scheme}://{alt_netloc}/sitemap.xml",
    )
    tested: list[str] = []
    for url in candidates:
        tested.append(url)
        try:
            resp = await fetcher.fetch(
                url,
                method="HEAD",
                headers=_probe_headers(fetcher),
                timeout=fetcher.config.sitemap_timeout,
                raise_for_status=False,
            )
        except FetchError as exc:
            logger.debug("Sitemap probe %s failed: %s", url, exc)
            continue
        if 200 <= resp.status < 300:
            return SitemapProbe(exists=True, found_at=resp.url, tested_urls=tuple(tested))
        logger.debug("Sitemap probe %s -> HTTP %d", url, resp.status)
    return SitemapProbe(exists=False, found_at=None, tested_urls=tuple(tested))


async def probe_robots(fetcher: Fetcher, target: TargetUrl) -> str | None:
    """robots.txt text, accepted only when it looks like a robots file."""
    try:
        resp = await fetcher.fetch(
            f"{target.origin}/robots.txt",
            headers=_probe_headers(fetcher),
            timeout=fetcher.config.robots_timeout,
            raise_for_status=False,
        )
    except FetchError as exc:
        logger.debug("robots.txt probe failed: %s", exc)
        return None
    if not 200 <= resp.status < 300:
        return None
    if "User-agent" in resp.body or "user-agent" in resp.body:
        return resp.body
    return None


async def _fetch_text(fetcher: Fetcher, url: str) -> str | None:
    try:
        resp = await fetcher.fetch(
            url,
            headers=_probe_headers(fetcher),
            timeout=fetcher.config.llms_timeout,
            raise_for_status=False,
        )
    except FetchError as exc:
        logger.debug("Probe %s failed: %s", url, exc)
        return None
    if not 200 <= resp.status < 300 or not resp.body.strip():
        return None
    return resp.body


async def probe_llms(fetcher: Fetcher, target: TargetUrl) -> LlmsFiles:
    llms, llms_full = await asyncio.gather(
        _fetch_text(fetcher, f"{target.origin}/llms.txt"),
        _fetch_text(fetcher, f"{target.origin}/llms-full.txt"),
    )
    return LlmsFiles(llms_txt=llms, llms_full_txt=llms_full)


async def probe_https_redirect(fetcher: Fetcher, target: TargetUrl) -> HttpsRedirectProbe:
    """Request the http:// form of the page and see where redirects end up."""
    plain = target.with_scheme("http").href
    try:
        resp = await fetcher.fetch(
            plain,
            headers=_probe_headers(fetcher),
            timeout=fetcher.config.https_probe_timeout,
            raise_for_status=False,
            read_body=False,
        )
    except FetchError as exc:
        return HttpsRedirectProbe(checked=False, error=exc.message)
    return HttpsRedirectProbe(
        checked=True,
        redirects_to_https=resp.url.lower().startswith("https://"),
        final_url=resp.url,
        status=resp.status,
    )


async def _isolated(name: str, coro: Awaitable[T], default: T) -> T:
    try:
        return await coro
    except Exception:
        logger.exception("Ancillary probe %s crashed; using empty value", name)
        return default


async def gather_ancillary(
    fetcher: Fetcher,
    target: TargetUrl,
    *,
    sleep: SleepT = asyncio.sleep,
) -> AncillaryData:
    """Run all probes concurrently; the result always has every field."""
    async with asyncio.TaskGroup() as tg:
        sitemap = tg.create_task(
            _isolated("sitemap", probe_sitemap(fetcher, target), SitemapProbe())
        )
        robots = tg.create_task(_isolated("robots", probe_robots(fetcher, target), None))
        llms = tg.create_task(_isolated("llms", probe_llms(fetcher, target), LlmsFiles()))
        https = tg.create_task(
            _isolated(
                "https_redirect",
                probe_https_redirect(fetcher, target),
                HttpsRedirectProbe(error="probe crashed"),
            )
        )
        perf = tg.create_task(
            _isolated(
                "pagespeed",
                fetch_pagespeed(fetcher, target.href, sleep=sleep),
                PerfResult(error="unavailable"),
            )
        )

    data = AncillaryData(
        sitemap=sitemap.result(),
        perf=perf.result(),
        llms=llms.result(),
        robots_txt=robots.result(),
        https_redirect=https.result(),
    )
    logger.info(
        "Ancillary data: sitemap=%s robots=%s llms=%s perf=%s",
        data.sitemap.exists,
        data.robots_txt is not None,
        data.llms.llms_txt is not None,
        data.perf.error or "ok",
    )
    return data
