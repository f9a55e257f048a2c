# File: page_scout/rules/technical.py
"""Analytics tags and static script / resource hygiene."""

from __future__ import annotations

import re
from collections import Counter
from typing import Dict, List

from page_scout.parser.html_parser import attr_of
from page_scout.rules.base import FAIL, WARNING, AnalysisContext, Findings, Verdict
from page_scout.rules.registry import rule
from page_scout.utils import plural

_GA4_RE = re.compile(r"\bG-[A-Z0-9]{4,}\b")
_UA_RE = re.compile(r"\bUA-\d+-\d+\b")
_GTM_RE = re.compile(r"\bGTM-[A-Z0-9]+\b")
_EVAL_RE = re.compile(r"\beval\s*\(")
_DOC_WRITE_RE = re.compile(r"document\.write(ln)?\s*\(")

# (selector, attribute) pairs that load sub-resources
_RESOURCE_REFS = (
    ("script[src]", "src"),
    ("img[src]", "src"),
    ("iframe[src]", "src"),
    ('link[rel="stylesheet"][href]', "href"),
)


def _unique(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


@rule("googleAnalytics")
def analyze_google_analytics(ctx: AnalysisContext) -> Verdict:
    html = ctx.html
    srcs = [(attr_of(el, "src") or "").lower() for el in ctx.doc.select("script[src]")]
    ga4 = _unique(_GA4_RE.findall(html))
    universal = _unique(_UA_RE.findall(html))
    gtm = _unique(_GTM_RE.findall(html))
    gtag_loaded = any("googletagmanager.com/gtag/js" in src for src in srcs)
    gtm_loaded = any("googletagmanager.com/gtm.js" in src for src in srcs)
    legacy_loaded = any("google-analytics.com" in src for src in srcs) or (
        "google-analytics.com/analytics.js" in html
    )

    trackers: List[str] = []
    if ga4 or gtag_loaded:
        trackers.append("Google Analytics 4")
    if universal or legacy_loaded:
        trackers.append("Universal Analytics")
    if gtm or gtm_loaded:
        trackers.append("Google Tag Manager")

    f = Findings()
    if not trackers:
        f.flag(
            WARNING,
            "No Google Analytics or Google Tag Manager tracking detected.",
            "Install Google Analytics 4 (directly or via Tag Manager) to measure traffic.",
        )
    else:
        f.issue(f"Tracking detected: {', '.join(trackers)}.")
        ids = ga4 + universal + gtm
        if ids:
            f.issue(f"Measurement {plural(len(ids), 'ID')}: {', '.join(ids[:10])}.")
        if "Universal Analytics" in trackers and "Google Analytics 4" not in trackers:
            f.flag(
                WARNING,
                "Only Universal Analytics found; it stopped processing data in July 2023.",
                "Migrate to Google Analytics 4.",
            )
    return f.verdict(trackers=trackers, ga4Ids=ga4, uaIds=universal, gtmIds=gtm)


@rule("jsErrors")
def analyze_js_errors(ctx: AnalysisContext) -> Verdict:
    doc = ctx.doc
    is_https = ctx.target.scheme == "https"
    insecure: List[str] = []
    empty_src = 0
    for el in doc.select("script[src]"):
        src = (attr_of(el, "src") or "").strip()
        if not src:
            empty_src += 1
        elif is_https and src.lower().startswith("http://"):
            insecure.append(src[:120])

    inline = [el.get_text() for el in doc.select("script:not([src])")]
    eval_count = sum(len(_EVAL_RE.findall(code)) for code in inline)
    write_count = sum(len(_DOC_WRITE_RE.findall(code)) for code in inline)

    f = Findings()
    if insecure:
        f.flag(
            FAIL,
            f"{len(insecure)} {plural(len(insecure), 'script')} loaded over HTTP on an HTTPS page; "
            "browsers block them as mixed content.",
            "Load every script over HTTPS.",
        )
    if empty_src:
        f.flag(
            WARNING,
            f"{empty_src} <script> {plural(empty_src, 'tag')} with an empty src attribute.",
            "Remove script tags with empty src; they trigger a useless request.",
        )
    if eval_count:
        f.flag(
            WARNING,
            f"Inline scripts call eval() {eval_count} {plural(eval_count, 'time')}.",
            "Avoid eval(); it is slow and blocked by strict Content Security Policies.",
        )
    if write_count:
        f.flag(
            WARNING,
            f"Inline scripts use document.write() {write_count} {plural(write_count, 'time')}.",
            "Replace document.write() with DOM APIs; browsers may block it on slow connections.",
        )
    if not f.issues:
        f.issue("No common JavaScript problems detected in the page source.")
    return f.verdict(
        insecureScripts=insecure,
        emptySrc=empty_src,
        evalCalls=eval_count,
        documentWriteCalls=write_count,
    )


@rule("consoleErrors")
def analyze_console_errors(ctx: AnalysisContext) -> Verdict:
    doc = ctx.doc
    is_https = ctx.target.scheme == "https"
    mixed: List[str] = []
    empty_refs = 0
    for selector, attr in _RESOURCE_REFS:
        for el in doc.select(selector):
            value = (attr_of(el, attr) or "").strip()
            if not value:
                empty_refs += 1
            elif is_https and value.lower().startswith("http://"):
                mixed.append(value[:120])

    id_counts = Counter(attr_of(el, "id") for el in doc.select("[id]"))
    duplicates: Dict[str, int] = {
        str(key): count for key, count in id_counts.items() if key and count > 1
    }

    f = Findings()
    if mixed:
        f.flag(
            FAIL,
            f"{len(mixed)} mixed-content {plural(len(mixed), 'resource')} (HTTP on an HTTPS page).",
            "Serve every image, frame, script and stylesheet over HTTPS.",
        )
    if empty_refs:
        f.flag(
            WARNING,
            f"{empty_refs} {plural(empty_refs, 'resource')} with an empty src/href.",
            "Remove or fill empty resource references; browsers report them as failed requests.",
        )
    if duplicates:
        listed = ", ".join(f"#{key}" for key in list(duplicates)[:10])
        f.flag(
            WARNING,
            f"{len(duplicates)} duplicate element {plural(len(duplicates), 'ID')}: {listed}.",
            "Element IDs must be unique; duplicates break scripts and label associations.",
        )
    if not f.issues:
        f.issue("No likely console error sources found in the page markup.")
    return f.verdict(mixedContent=mixed, emptyReferences=empty_refs, duplicateIds=duplicates)
