# page_scout/crawler/models.py
"""
Data models produced by the fetch layer: the primary page and ancillary probes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(slots=True, frozen=True)
class FetchResult:
    """Immutable outcome of one successful HTTP exchange."""

    url: str
    status: int
    headers: Mapping[str, str]
    body: str
    elapsed_ms: int
    byte_length: int

    @classmethod
    def build(
        cls,
        url: str,
        status: int,
        headers: Mapping[str, str],
        body: str,
        elapsed_ms: int,
    ) -> FetchResult:
        lowered = {key.lower(): value for key, value in headers.items()}
        return cls(
            url=url,
            status=status,
            headers=MappingProxyType(lowered),
            body=body,
            elapsed_ms=elapsed_ms,
            byte_length=len(body.encode("utf-8")),
        )


@dataclass(slots=True, frozen=True)
class SitemapProbe:
    exists: bool = False
    found_at: str | None = None
    tested_urls: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class PerfResult:
    """Lighthouse payload or an error tag (``rate_limited``, ``timeout``, ...)."""

    data: Mapping[str, Any] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.data is not None and self.error is None


@dataclass(slots=True, frozen=True)
class LlmsFiles:
    llms_txt: str | None = None
    llms_full_txt: str | None = None


@dataclass(slots=True, frozen=True)
class HttpsRedirectProbe:
    checked: bool = False
    redirects_to_https: bool = False
    final_url: str | None = None
    status: int | None = None
    error: str | None = None


@dataclass(slots=True, frozen=True)
class AncillaryData:
    """Everything the gatherer collected; each field degrades on its own."""

    sitemap: SitemapProbe = field(default_factory=SitemapProbe)
    perf: PerfResult = field(default_factory=lambda: PerfResult(error="unavailable"))
    llms: LlmsFiles = field(default_factory=LlmsFiles)
    robots_txt: str | None = None
    https_redirect: HttpsRedirectProbe = field(default_factory=HttpsRedirectProbe)
