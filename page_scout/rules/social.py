# File: page_scout/rules/social.py
"""Open Graph, Twitter Card and overall social metadata coverage."""

from __future__ import annotations

from typing import Dict

from page_scout.parser.html_parser import ParsedDocument, attr_of
from page_scout.rules.base import FAIL, WARNING, AnalysisContext, Findings, Verdict
from page_scout.rules.registry import rule
from page_scout.rules.tables import OG_REQUIRED, TWITTER_EXPECTED
from page_scout.utils import plural


def og_tags(doc: ParsedDocument) -> Dict[str, str]:
    found: Dict[str, str] = {}
    for el in doc.select("meta[property^='og:']"):
        prop = attr_of(el, "property")
        if prop:
            found[prop] = (attr_of(el, "content") or "").strip()
    return found


def twitter_tags(doc: ParsedDocument) -> Dict[str, str]:
    found: Dict[str, str] = {}
    for el in doc.select("meta[name^='twitter:'], meta[property^='twitter:']"):
        name = attr_of(el, "name") or attr_of(el, "property")
        if name:
            found[name] = (attr_of(el, "content") or "").strip()
    return found


@rule("openGraph")
def analyze_open_graph(ctx: AnalysisContext) -> Verdict:
    found = og_tags(ctx.doc)
    missing = [tag for tag in OG_REQUIRED if not found.get(tag)]
    f = Findings()

    if not found:
        f.flag(
            FAIL,
            "No Open Graph tags found.",
            "Add og:title, og:description, og:image, og:url, and og:type for social sharing.",
        )
    else:
        f.issue(f"Found {len(found)} Open Graph {plural(len(found), 'tag')}.")
        if missing:
            f.flag(
                WARNING,
                f"Missing: {', '.join(missing)}.",
                f"Add the missing OG tags: {', '.join(missing)}.",
            )
        if found.get("og:image"):
            f.issue(f"OG image: {found['og:image'][:100]}")
    return f.verdict(tags=found, missing=missing)


@rule("twitterCards")
def analyze_twitter_cards(ctx: AnalysisContext) -> Verdict:
    found = twitter_tags(ctx.doc)
    missing = [tag for tag in TWITTER_EXPECTED if not found.get(tag)]
    f = Findings()

    if not found:
        f.flag(
            WARNING,
            "No Twitter Card meta tags found.",
            "Add twitter:card, twitter:title, twitter:description, and twitter:image "
            "for better Twitter/X sharing.",
        )
    else:
        f.issue(f"Found {len(found)} Twitter Card {plural(len(found), 'tag')}.")
        if found.get("twitter:card"):
            f.issue(f"Card type: {found['twitter:card']}.")
        if missing:
            f.flag(
                WARNING,
                f"Missing: {', '.join(missing)}.",
                f"Add missing tags: {', '.join(missing)}.",
            )
    return f.verdict(tags=found, missing=missing)


@rule("socialMediaMetaTags")
def analyze_social_meta(ctx: AnalysisContext) -> Verdict:
    doc = ctx.doc
    has_og = bool(og_tags(doc))
    has_twitter = bool(twitter_tags(doc))
    article_count = doc.count("meta[property^='article:']")
    has_fb_app = doc.select_one('meta[property="fb:app_id"]') is not None
    platforms = [
        name
        for name, present in (
            ("Open Graph", has_og),
            ("Twitter/X", has_twitter),
            ("Article metadata", article_count > 0),
            ("Facebook app", has_fb_app),
        )
        if present
    ]

    f = Findings()
    if has_og and has_twitter:
        f.issue(f"Social metadata present: {', '.join(platforms)}.")
    elif has_og or has_twitter:
        f.flag(
            WARNING,
            f"Only partial social metadata found: {', '.join(platforms)}.",
            "Provide both Open Graph and Twitter Card tags so every network renders a rich preview.",
        )
    else:
        f.flag(
            FAIL,
            "No social media meta tags found.",
            "Add Open Graph and Twitter Card meta tags to control how shared links look.",
        )
    if article_count:
        f.issue(f"{article_count} article:* {plural(article_count, 'tag')} found.")
    return f.verdict(
        platforms=platforms,
        hasOpenGraph=has_og,
        hasTwitter=has_twitter,
        articleTags=article_count,
    )
