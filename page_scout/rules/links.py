# File: page_scout/rules/links.py
"""Link classification and URL-shape checks."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List

from page_scout.parser.html_parser import ParsedDocument, attr_of
from page_scout.rules.base import WARNING, AnalysisContext, Findings, Verdict
from page_scout.rules.registry import rule
from page_scout.utils import TargetUrl, is_same_site, js_round, plural, resolve_url

LINK_LIST_CAP = 50
_RELATIVE_PREFIXES = ("/", "#", "./")
_WS_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_EXTENSION_RE = re.compile(r"\.(html|php|asp|jsp)$", re.IGNORECASE)


@dataclass(frozen=True)
class Link:
    href: str
    text: str
    domain: str = ""
    rel: str = ""

    @property
    def has_text(self) -> bool:
        return bool(self.text)


@dataclass(frozen=True)
class LinkMap:
    internal: tuple[Link, ...]
    external: tuple[Link, ...]


def classify_links(doc: ParsedDocument, target: TargetUrl) -> LinkMap:
    """Split every ``a[href]`` into internal and external links, in document order.

    Hrefs resolve against the page origin. Internal means same host or a
    subdomain; external means another host with an http(s) scheme.
    """
    internal: List[Link] = []
    external: List[Link] = []
    for el in doc.select("a[href]"):
        href = attr_of(el, "href")
        if not href:
            continue
        text = el.get_text().strip()[:80]
        resolved = resolve_url(href, target.origin)
        if resolved is None:
            if href.startswith(_RELATIVE_PREFIXES):
                internal.append(Link(href=href, text=text))
            continue
        if is_same_site(resolved.hostname, target.hostname):
            internal.append(Link(href=resolved.path, text=text))
        else:
            external.append(
                Link(
                    href=resolved.href_with_fragment,
                    text=text,
                    domain=resolved.hostname,
                    rel=attr_of(el, "rel") or "",
                )
            )
    return LinkMap(internal=tuple(internal), external=tuple(external))


def _unique(links: tuple[Link, ...]) -> List[Link]:
    seen: set[str] = set()
    unique: List[Link] = []
    for link in links:
        if link.href not in seen:
            seen.add(link.href)
            unique.append(link)
    return unique[:LINK_LIST_CAP]


@rule("internalLinks")
def analyze_internal_links(ctx: AnalysisContext) -> Verdict:
    links = classify_links(ctx.doc, ctx.target).internal
    f = Findings()
    count = len(links)
    empty = sum(1 for link in links if not link.has_text)

    if count == 0:
        f.flag(
            WARNING,
            "No internal links found on the page.",
            "Add internal links to help Google discover and index your other pages.",
        )
    else:
        f.issue(f"Found {count} internal {plural(count, 'link')}.")
        if count < 3:
            f.flag(
                WARNING,
                recommendation="Consider adding more internal links "
                "to improve site navigation and SEO.",
            )

    if empty:
        verb = "link has" if empty == 1 else "links have"
        f.flag(
            WARNING,
            f"{empty} internal {verb} no anchor text.",
            "Add descriptive anchor text to all internal links for better SEO.",
        )

    listed: List[Dict[str, Any]] = [
        {"href": link.href, "text": link.text, "hasText": link.has_text} for link in _unique(links)
    ]
    return f.verdict(count=count, emptyAnchors=empty, links=listed)


@rule("externalLinks")
def analyze_external_links(ctx: AnalysisContext) -> Verdict:
    links = classify_links(ctx.doc, ctx.target).external
    f = Findings()
    count = len(links)
    nofollow = sum(1 for link in links if "nofollow" in link.rel)
    domains = len({link.domain for link in links})

    f.issue(
        f"Found {count} external {plural(count, 'link')} pointing to "
        f"{domains} unique {plural(domains, 'domain')}."
    )
    if count > 0 and nofollow == 0:
        f.issue('No external links use rel="nofollow".')
        f.recommend(
            'Consider using rel="nofollow" or rel="sponsored" for paid/untrusted links '
            "to manage link equity."
        )
    elif nofollow > 0:
        verb = "link uses" if nofollow == 1 else "links use"
        f.issue(f'{nofollow} external {verb} rel="nofollow".')

    if count > 100:
        f.flag(
            WARNING,
            recommendation="Very high number of external links. "
            "Ensure they are all relevant and necessary.",
        )

    listed = [
        {"href": link.href, "domain": link.domain, "rel": link.rel, "text": link.text}
        for link in _unique(links)
    ]
    return f.verdict(count=count, nofollowCount=nofollow, uniqueDomains=domains, links=listed)


@rule("urlStructure")
def analyze_url_structure(ctx: AnalysisContext) -> Verdict:
    path = ctx.target.path
    search = ctx.target.search
    f = Findings()
    f.issue(f"URL path: {path}")

    if len(path) > 75:
        f.flag(
            WARNING,
            f"URL path is long ({len(path)} characters).",
            "Keep URL paths concise and descriptive. Shorter URLs tend to perform better.",
        )
    if re.search(r"[A-Z]", path):
        f.flag(
            WARNING,
            "URL contains uppercase characters.",
            "Use lowercase-only URLs to avoid duplicate content issues.",
        )
    if "_" in path:
        f.flag(
            WARNING,
            "URL uses underscores. Google recommends hyphens instead.",
            "Replace underscores with hyphens in URLs.",
        )
    if re.search(r"[?&]", search) and len(search) > 50:
        f.flag(
            WARNING,
            "URL has a long query string which may not be SEO-friendly.",
            "Consider using clean URL paths instead of long query parameters.",
        )
    if _EXTENSION_RE.search(path):
        f.issue("URL contains a file extension. Modern URLs typically omit extensions.")

    if len(f.issues) <= 1:
        f.issue("URL structure looks clean and SEO-friendly.")
    return f.verdict(path=path)


@rule("keywordsInUrl")
def analyze_keywords_in_url(ctx: AnalysisContext) -> Verdict:
    f = Findings()
    title = ctx.doc.text("title").strip().lower()
    path = _NON_ALNUM_RE.sub(" ", ctx.target.path.lower()).strip()

    if not title or not path:
        f.issue("Cannot analyze keywords in URL (no title or root path).")
        return f.verdict(matchingWords=[], matchPercent=0)

    title_words = [w for w in _WS_RE.split(title) if len(w) > 3]
    path_words = [w for w in _WS_RE.split(path) if len(w) > 2]
    if not path_words:
        f.issue("This is the root URL. Keyword-in-URL analysis applies to inner pages.")
        return f.verdict(matchingWords=[], matchPercent=0)

    matching = [w for w in title_words if w in path_words]
    percent = js_round(len(matching) / len(title_words) * 100) if title_words else 0

    f.issue(
        f"{len(matching)} {plural(len(matching), 'keyword')} from the title "
        f"found in the URL ({percent}%)."
    )
    if matching:
        f.issue(f"Matching: {', '.join(matching)}.")
    elif title_words:
        f.flag(
            WARNING,
            recommendation="Include relevant keywords from your title in the URL slug "
            "for better SEO.",
        )
    return f.verdict(matchingWords=matching, matchPercent=percent)
