# File: page_scout/rules/meta.py
"""Head-level checks: title, description, robots meta, canonical, hreflang, favicon, charset, doctype, viewport."""

from __future__ import annotations

import re

from page_scout.parser.html_parser import attr_of
from page_scout.rules.base import FAIL, WARNING, AnalysisContext, Findings, Verdict
from page_scout.rules.registry import rule
from page_scout.rules.tables import ACTION_WORDS
from page_scout.utils import display_length, plural, resolve_url

_WS_RE = re.compile(r"\s+")
_CHARSET_RE = re.compile(r"charset=([^\s;]+)", re.IGNORECASE)


@rule("title")
def analyze_title(ctx: AnalysisContext) -> Verdict:
    title = ctx.doc.text("title").strip()
    if not title:
        f = Findings(FAIL)
        f.issue("No title tag found. Every page must have a title tag.")
        f.recommend("Add a unique, descriptive title tag to the page.")
        return f.verdict(title="", length=0)

    f = Findings()
    length = display_length(title)
    if length < 30:
        f.flag(
            WARNING,
            f"Title is too short ({length} characters). Aim for 50-60 characters.",
            "Expand your title to include more descriptive keywords.",
        )
    elif length > 60:
        f.flag(
            WARNING,
            f"Title is too long ({length} characters). "
            "Search engines typically truncate after 60 characters.",
            "Shorten your title to 60 characters or fewer to prevent truncation in search results.",
        )

    first_words = " ".join(_WS_RE.split(title)[:3])
    if len(first_words) <= 5:
        f.recommend("Place your primary keyword near the beginning of the title for better SEO.")

    separator = max(title.find("|"), title.find("-"), title.find(":"))
    if separator >= 0 and display_length(title[:separator].strip()) > 50:
        f.flag(
            WARNING,
            "The main keyword phrase before the separator is very long and may be truncated.",
        )

    if title == title.upper() and length > 10:
        f.flag(
            WARNING,
            "Title is in ALL CAPS. This can appear aggressive in search results.",
            "Use title case or sentence case for a professional appearance.",
        )

    if not f.issues:
        f.issue(f"Title length is good ({length} characters).")
    return f.verdict(title=title, length=length)


@rule("metaDescription")
def analyze_meta_description(ctx: AnalysisContext) -> Verdict:
    description = (ctx.doc.attr('meta[name="description"]', "content") or "").strip()
    if not description:
        f = Findings(FAIL)
        f.issue("No meta description found.")
        f.recommend(
            "Add a compelling meta description between 120-160 characters "
            "to improve click-through rates."
        )
        return f.verdict(description="", length=0)

    f = Findings()
    length = display_length(description)
    if length < 70:
        f.flag(
            WARNING,
            f"Meta description is too short ({length} characters). Aim for 120-160 characters.",
            "Expand your description to provide more context about the page content.",
        )
    elif length > 160:
        f.flag(
            WARNING,
            f"Meta description is too long ({length} characters). "
            "It may be truncated after 160 characters.",
            "Shorten to 160 characters to avoid truncation in search results.",
        )
    elif length >= 120:
        f.issue(f"Meta description length is optimal ({length} characters).")
    else:
        f.flag(
            WARNING,
            f"Meta description is acceptable ({length} characters) "
            "but could be longer (120-160 ideal).",
        )

    lowered = description.lower()
    if not any(word in lowered for word in ACTION_WORDS):
        f.recommend(
            "Consider adding a call-to-action word (e.g., discover, learn, explore) "
            "to boost click-through rates."
        )
    return f.verdict(description=description, length=length)


@rule("metaRobots")
def analyze_meta_robots(ctx: AnalysisContext) -> Verdict:
    f = Findings()
    if ctx.doc.select_one('meta[name="robots"]') is None:
        f.issue(
            "No meta robots tag found. Search engines will index and follow links by default."
        )
        return f.verdict(content=None)

    content = (ctx.doc.attr('meta[name="robots"]', "content") or "").lower().strip()
    f.issue(f'Meta robots: "{content}".')

    if "noindex" in content:
        f.flag(
            FAIL,
            "Page is set to noindex. Search engines will not index this page.",
            "Remove noindex if you want this page to appear in search results.",
        )
    if "nofollow" in content:
        f.flag(
            WARNING,
            "Page is set to nofollow. Search engines will not follow links on this page.",
            "Remove nofollow if you want search engines to discover linked pages.",
        )
    if "none" in content:
        f.flag(FAIL, "Meta robots set to 'none' (equivalent to noindex, nofollow).")
    return f.verdict(content=content)


@rule("canonicalUrl")
def analyze_canonical(ctx: AnalysisContext) -> Verdict:
    f = Findings()
    tags = ctx.doc.select('link[rel="canonical"]')
    canonical = None

    if not tags:
        f.flag(
            WARNING,
            "No canonical URL tag found.",
            "Add a canonical tag to prevent duplicate content issues "
            "and clarify the preferred URL.",
        )
    elif len(tags) > 1:
        f.flag(
            WARNING,
            f"Found {len(tags)} canonical tags. There should be exactly one.",
            "Remove duplicate canonical tags. Only one should exist per page.",
        )
    else:
        href = (attr_of(tags[0], "href") or "").strip()
        f.issue(f"Canonical URL: {href}")
        if not href:
            f.flag(
                WARNING,
                "Canonical tag has an empty href.",
                "Set the canonical href to the preferred URL for this page.",
            )
        else:
            resolved = resolve_url(href, ctx.target.href)
            if resolved is None:
                f.flag(WARNING, "Canonical URL is not a valid URL.")
            else:
                canonical = resolved.href
                page = ctx.target.href
                if canonical not in (page, page + "/", ctx.target.raw, ctx.target.raw + "/"):
                    f.issue("Canonical URL differs from the current page URL.")
    return f.verdict(canonical=canonical, count=len(tags))


@rule("hreflang")
def analyze_hreflang(ctx: AnalysisContext) -> Verdict:
    f = Findings()
    tags = ctx.doc.select('link[rel="alternate"][hreflang]')
    if not tags:
        f.issue(
            "No hreflang tags found. This is only needed for multilingual/multi-regional sites."
        )
        return f.verdict(count=0, langs=[])

    langs = []
    for el in tags:
        href = attr_of(el, "href")
        langs.append({"lang": attr_of(el, "hreflang"), "href": href[:100] if href else href})
    has_x_default = any(item["lang"] == "x-default" for item in langs)

    listed = ", ".join(item["lang"] or "" for item in langs)
    f.issue(f"Found {len(langs)} hreflang {plural(len(langs), 'tag')}: {listed}.")
    if not has_x_default:
        f.flag(WARNING, recommendation="Add an x-default hreflang tag as a fallback for unmatched languages.")
    return f.verdict(count=len(langs), langs=langs)


@rule("favicon")
def analyze_favicon(ctx: AnalysisContext) -> Verdict:
    f = Findings()
    icons = ctx.doc.select('link[rel="icon"], link[rel="shortcut icon"]')
    has_touch_icon = ctx.doc.count('link[rel="apple-touch-icon"]') > 0

    if not icons:
        f.flag(
            WARNING,
            "No favicon link tag found.",
            "Add a favicon for browser tabs and bookmarks branding.",
        )
    else:
        href = (attr_of(icons[0], "href") or "")[:100]
        f.issue(f"Favicon found: {href or '(no href)'}")

    if has_touch_icon:
        f.issue("Apple touch icon found.")
    else:
        f.recommend("Add an Apple touch icon for iOS home screen bookmarks.")
    return f.verdict(hasFavicon=bool(icons), hasAppleTouchIcon=has_touch_icon)


@rule("characterEncoding")
def analyze_char_encoding(ctx: AnalysisContext) -> Verdict:
    f = Findings()
    charset = ""
    if ctx.doc.select_one("meta[charset]") is not None:
        charset = (ctx.doc.attr("meta[charset]", "charset") or "").lower()
        f.issue(f"Character encoding declared: {charset}.")
    elif ctx.doc.select_one('meta[http-equiv="Content-Type"]') is not None:
        content = ctx.doc.attr('meta[http-equiv="Content-Type"]', "content") or ""
        match = _CHARSET_RE.search(content)
        charset = match.group(1).lower() if match else ""
        f.issue(f"Character encoding via http-equiv: {charset}.")

    if not charset:
        f.flag(
            WARNING,
            "No character encoding declaration found.",
            'Add <meta charset="utf-8"> in the <head> section.',
        )
    elif charset != "utf-8":
        f.flag(
            WARNING,
            f'Encoding is "{charset}" instead of recommended UTF-8.',
            "Use UTF-8 encoding for maximum compatibility across languages.",
        )
    return f.verdict(charset=charset)


@rule("doctype")
def analyze_doctype(ctx: AnalysisContext) -> Verdict:
    head = ctx.html.lstrip("\ufeff \t\n\r\f\v")[:100].lower()
    if head.startswith("<!doctype html"):
        f = Findings()
        f.issue("HTML5 DOCTYPE declaration found.")
    elif head.startswith("<!doctype"):
        f = Findings(WARNING)
        f.issue("DOCTYPE found but not HTML5 standard.")
        f.recommend("Use the standard HTML5 DOCTYPE: <!DOCTYPE html>.")
    else:
        f = Findings(FAIL)
        f.issue("No DOCTYPE declaration found.")
        f.recommend(
            "Add <!DOCTYPE html> at the very beginning of the document for proper rendering."
        )
    return f.verdict()


@rule("mobileResponsiveness")
def analyze_mobile(ctx: AnalysisContext) -> Verdict:
    f = Findings()
    viewport = ctx.doc.select('meta[name="viewport"]')
    if not viewport:
        f.flag(
            FAIL,
            "No viewport meta tag found.",
            'Add <meta name="viewport" content="width=device-width, initial-scale=1"> '
            "for mobile support.",
        )
    else:
        content = attr_of(viewport[0], "content") or ""
        f.issue(f'Viewport meta tag found: "{content}".')
        if "width=device-width" not in content:
            f.flag(
                WARNING,
                recommendation="Viewport should include width=device-width "
                "for proper mobile rendering.",
            )
        if "maximum-scale=1" in content or "user-scalable=no" in content:
            f.flag(
                WARNING,
                "Viewport disables or limits user zooming.",
                "Allow users to zoom for better accessibility. "
                "Remove maximum-scale=1 or user-scalable=no.",
            )

    if ctx.doc.count('link[rel="alternate"][media]') > 0:
        f.issue("Mobile-specific alternate link detected (separate mobile site).")
    return f.verdict(hasViewport=bool(viewport))
