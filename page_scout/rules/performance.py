# File: page_scout/rules/performance.py
"""Server timing, HTML weight, compression, CDN and Lighthouse-based checks."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional

from page_scout.crawler.models import PerfResult
from page_scout.parser.html_parser import attr_of
from page_scout.rules.base import FAIL, PASS, WARNING, AnalysisContext, Findings, Verdict
from page_scout.rules.registry import rule
from page_scout.rules.tables import (
    CDN_DOMAINS,
    CDN_HEADERS,
    COMPRESSION_ENCODINGS,
    LIGHTHOUSE_METRICS,
    LIGHTHOUSE_OPPORTUNITIES,
    PERF_ERROR_DEFAULT,
    PERF_ERROR_MESSAGES,
)
from page_scout.utils import js_round, plural, resolve_url

# (max KB inclusive, severity, issue)
HTML_SIZE_TIERS = (
    (33, PASS, "HTML size is excellent (under 33 KB)."),
    (100, PASS, "HTML size is good (under 100 KB)."),
    (250, WARNING, "HTML size is above 100 KB."),
    (500, WARNING, "HTML document is large (over 250 KB)."),
)
BOOTUP_TIERS = ((2000, PASS), (3500, WARNING))
TBT_TIERS = ((200, PASS), (600, WARNING))


def perf_error_message(error: Optional[str]) -> str:
    return PERF_ERROR_MESSAGES.get(error or "", PERF_ERROR_DEFAULT)


def _tier(value: float, tiers: tuple[tuple[int, str], ...]) -> str:
    for ceiling, severity in tiers:
        if value <= ceiling:
            return severity
    return FAIL


@rule("pageSpeed")
def analyze_page_speed(ctx: AnalysisContext) -> Verdict:
    size_kb = js_round(ctx.content_length / 1024)
    load_ms = ctx.load_time_ms
    f = Findings()
    f.issue(f"HTML document size: {size_kb} KB.")
    f.issue(f"Server response time: {load_ms} ms.")

    if size_kb > 100:
        f.flag(
            WARNING,
            recommendation="HTML is large. "
            "Consider reducing inline scripts/styles and removing unnecessary code.",
        )

    if load_ms > 3000:
        f.flag(
            FAIL,
            "Server response is slow (over 3 seconds).",
            "Investigate server performance. Aim for under 200ms server response time.",
        )
    elif load_ms > 1000:
        f.flag(
            WARNING,
            "Server response is moderate (over 1 second).",
            "Consider caching, CDN, or server optimization to improve response time.",
        )
    else:
        f.issue("Server response time is good.")

    scripts = ctx.doc.count("script[src]")
    stylesheets = ctx.doc.count('link[rel="stylesheet"]')
    f.issue(f"External resources: {scripts} scripts, {stylesheets} stylesheets.")
    if scripts + stylesheets > 20:
        f.flag(
            WARNING,
            recommendation="High number of external resources. Consider bundling or deferring scripts.",
        )
    return f.verdict(sizeKb=size_kb, loadTimeMs=load_ms, scripts=scripts, stylesheets=stylesheets)


@rule("htmlPageSize")
def analyze_html_page_size(ctx: AnalysisContext) -> Verdict:
    size_kb = ctx.content_length / 1024
    shown = round(size_kb, 1)
    f = Findings()
    f.issue(f"HTML document size: {shown} KB ({ctx.content_length} bytes).")

    for ceiling, severity, issue in HTML_SIZE_TIERS:
        if size_kb <= ceiling:
            f.flag(severity, issue)
            break
    else:
        f.flag(FAIL, "HTML document is very large (over 500 KB).")

    if size_kb > 100:
        f.recommend(
            "Reduce HTML weight: move inline scripts and styles to cached files, "
            "remove unused markup and paginate long lists."
        )
    return f.verdict(sizeKb=shown, bytes=ctx.content_length)


@rule("htmlCompression")
def analyze_html_compression(ctx: AnalysisContext) -> Verdict:
    encoding = (ctx.headers.get("content-encoding") or "").lower().strip()
    used = [name for name in COMPRESSION_ENCODINGS if name in encoding]
    f = Findings()
    if used:
        f.issue(f"HTML is served compressed ({', '.join(used)}).")
        if "br" not in used and "zstd" not in used:
            f.recommend("Consider Brotli compression for smaller transfers than gzip.")
    else:
        f.flag(
            FAIL,
            "HTML is served without compression.",
            "Enable gzip or Brotli compression on the web server for text responses.",
        )
    return f.verdict(contentEncoding=encoding or None, compressed=bool(used))


def match_cdn(url: str) -> Optional[str]:
    """Первый провайдер из CDN_DOMAINS, чья подстрока встречается в адресе."""
    lowered = url.lower()
    for needle, provider in CDN_DOMAINS:
        if needle in lowered:
            return provider
    return None


def header_cdn(headers: Mapping[str, str]) -> Optional[str]:
    for header, provider in CDN_HEADERS:
        if header in headers:
            return provider
    server = (headers.get("server") or "").lower()
    return match_cdn(server) if server else None


@rule("cdnUsage")
def analyze_cdn_usage(ctx: AnalysisContext) -> Verdict:
    doc = ctx.doc
    refs: List[str] = []
    for el in doc.select("script[src]"):
        refs.append(attr_of(el, "src") or "")
    for el in doc.select('link[rel="stylesheet"][href]'):
        refs.append(attr_of(el, "href") or "")
    for el in doc.select("img[src]"):
        refs.append(attr_of(el, "src") or "")

    document_cdn = header_cdn(ctx.headers)
    providers: Dict[str, int] = {}
    total = on_cdn = 0
    for ref in refs:
        resolved = resolve_url(ref, ctx.target.href) if ref.strip() else None
        if resolved is None:
            continue
        total += 1
        provider = match_cdn(resolved.href)
        if provider is None and document_cdn and resolved.hostname == ctx.target.hostname:
            provider = document_cdn
        if provider:
            on_cdn += 1
            providers[provider] = providers.get(provider, 0) + 1

    percent = js_round(on_cdn / total * 100) if total else 0
    f = Findings()
    if document_cdn:
        f.issue(f"Page is served through a CDN ({document_cdn}).")
    if total:
        f.issue(f"{on_cdn} of {total} {plural(total, 'resource')} served from a CDN ({percent}%).")
    if providers:
        f.issue(f"CDN providers: {', '.join(providers)}.")

    served = on_cdn * 2 >= total if total else document_cdn is not None
    if served:
        f.issue("CDN usage looks good.")
    elif on_cdn:
        f.flag(
            WARNING,
            "Less than half of the static resources are served from a CDN.",
            "Serve more static assets (scripts, styles, images) from a CDN.",
        )
    else:
        f.flag(
            WARNING,
            "No CDN usage detected.",
            "Use a CDN to serve static assets closer to visitors and reduce latency.",
        )
    return f.verdict(
        providers=providers,
        documentCdn=document_cdn,
        totalResources=total,
        cdnResources=on_cdn,
        cdnPercent=percent,
    )


def _degraded(perf: PerfResult, f: Findings) -> None:
    f.flag(WARNING, perf_error_message(perf.error))
    if perf.error == "api_not_enabled":
        f.recommend("Enable PageSpeed Insights API in your Google Cloud Console")
        f.recommend("Wait 2-3 minutes after enabling for changes to propagate")
        f.recommend("Ensure your API key has permission to access PageSpeed Insights API")
    else:
        f.recommend("Try analyzing again in a few seconds.")
        f.recommend("Ensure the URL is publicly accessible (not behind auth or VPN).")


def _score(value: Any) -> Optional[float]:
    """Числовой score Lighthouse; строки, списки, bool и NaN не считаются."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def _lighthouse(perf: PerfResult) -> Mapping[str, Any]:
    result = (perf.data or {}).get("lighthouseResult")
    return result if isinstance(result, Mapping) else {}


def _audits(perf: PerfResult) -> Mapping[str, Any]:
    audits = _lighthouse(perf).get("audits")
    return audits if isinstance(audits, Mapping) else {}


@rule("googlePageSpeed")
def analyze_google_pagespeed(ctx: AnalysisContext) -> Verdict:
    perf = ctx.ancillary.perf
    f = Findings()
    if not perf.ok:
        _degraded(perf, f)
        return f.verdict(
            performanceScore=None,
            seoScore=None,
            accessibilityScore=None,
            bestPracticesScore=None,
            metrics=None,
            categories=None,
        )

    categories: Dict[str, int] = {}
    raw_categories = _lighthouse(perf).get("categories")
    if isinstance(raw_categories, Mapping):
        for key, cat in raw_categories.items():
            if not isinstance(cat, Mapping):
                continue
            raw_score = cat.get("score")
            score = 0.0 if raw_score is None else _score(raw_score)
            if score is None:
                continue
            categories[key] = js_round(score * 100)

    perf_score = categories.get("performance")
    seo_score = categories.get("seo")
    a11y_score = categories.get("accessibility")
    bp_score = categories.get("best-practices")

    for label, value in (("Performance", perf_score), ("SEO", seo_score)):
        if value is None:
            continue
        f.issue(f"{label}: {value}/100")
        if value < 50:
            f.escalate(FAIL)
        elif value < 90:
            f.escalate(WARNING)
    if a11y_score is not None:
        f.issue(f"Accessibility: {a11y_score}/100")
    if bp_score is not None:
        f.issue(f"Best Practices: {bp_score}/100")

    audits = _audits(perf)
    metrics: Dict[str, Dict[str, Any]] = {}
    for audit_key, (label, key) in LIGHTHOUSE_METRICS.items():
        audit = audits.get(audit_key)
        if not isinstance(audit, Mapping):
            continue
        metrics[key] = {
            "value": audit.get("numericValue"),
            "display": audit.get("displayValue"),
            "score": audit.get("score"),
        }
        f.issue(f"{label}: {audit.get('displayValue') or 'N/A'}")

    for audit_key in LIGHTHOUSE_OPPORTUNITIES:
        audit = audits.get(audit_key)
        if not isinstance(audit, Mapping):
            continue
        score = _score(audit.get("score"))
        title = audit.get("title")
        if score is not None and score < 0.9 and title:
            display = audit.get("displayValue")
            f.recommend(f"{title} ({display})" if display else title)

    if perf_score is not None and perf_score >= 90 and not f.recommendations:
        f.issue("Excellent performance score. No major issues detected.")
    if not f.issues:
        f.issue("PageSpeed Insights returned no category scores for this page.")

    return f.verdict(
        performanceScore=perf_score,
        seoScore=seo_score,
        accessibilityScore=a11y_score,
        bestPracticesScore=bp_score,
        metrics=metrics,
        categories=categories,
    )


def _numeric(audits: Mapping[str, Any], key: str) -> Optional[float]:
    audit = audits.get(key)
    if not isinstance(audit, Mapping):
        return None
    value = audit.get("numericValue")
    return float(value) if isinstance(value, (int, float)) else None


@rule("jsExecutionTime")
def analyze_js_execution_time(ctx: AnalysisContext) -> Verdict:
    perf = ctx.ancillary.perf
    f = Findings()
    if not perf.ok:
        _degraded(perf, f)
        return f.verdict(bootupTimeMs=None, totalBlockingTimeMs=None, mainThreadMs=None)

    audits = _audits(perf)
    bootup = _numeric(audits, "bootup-time")
    tbt = _numeric(audits, "total-blocking-time")
    main_thread = _numeric(audits, "mainthread-work-breakdown")

    if bootup is None and tbt is None:
        f.flag(
            WARNING,
            "Lighthouse did not report JavaScript execution metrics for this page.",
            "Try analyzing again in a few seconds.",
        )
    if bootup is not None:
        severity = _tier(bootup, BOOTUP_TIERS)
        f.flag(severity, f"JavaScript execution time: {js_round(bootup)} ms.")
        if severity != PASS:
            f.recommend(
                "Reduce JavaScript execution time: split bundles, defer non-critical scripts "
                "and remove unused code."
            )
    if tbt is not None:
        severity = _tier(tbt, TBT_TIERS)
        f.flag(severity, f"Total Blocking Time: {js_round(tbt)} ms.")
        if severity != PASS:
            f.recommend("Break up long main-thread tasks to keep Total Blocking Time under 200 ms.")
    if main_thread is not None:
        f.issue(f"Main-thread work: {js_round(main_thread)} ms.")

    return f.verdict(
        bootupTimeMs=js_round(bootup) if bootup is not None else None,
        totalBlockingTimeMs=js_round(tbt) if tbt is not None else None,
        mainThreadMs=js_round(main_thread) if main_thread is not None else None,
    )
