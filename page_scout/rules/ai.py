# File: page_scout/rules/ai.py
"""Signal-tiered checks: answer engines, generative engines, pSEO, AI crawlers, local SEO."""

from __future__ import annotations

import re
from typing import List

from page_scout.parser.html_parser import attr_of
from page_scout.parser.robots_parser import scan_ai_bots
from page_scout.rules.base import FAIL, PASS, WARNING, AnalysisContext, Findings, Verdict
from page_scout.rules.registry import rule
from page_scout.rules.signals import Signal, SignalTiers, evaluate_signals
from page_scout.rules.tables import AI_BOTS, LOCAL_KEYWORDS, LOCAL_SCHEMA_TYPES
from page_scout.utils import plural

AEO_TIERS = SignalTiers(ceilings=((2, WARNING),), above=PASS)
GEO_TIERS = SignalTiers(ceilings=((1, FAIL), (3, WARNING)), above=PASS)
PSEO_TIERS = SignalTiers(ceilings=(), above=PASS)
AI_VISIBILITY_TIERS = SignalTiers(ceilings=((4, WARNING),), above=PASS)
LOCAL_TIERS = SignalTiers(ceilings=((2, WARNING),), above=PASS)

QUESTION_HEADING_CAP = 10
AI_BLOCK_LIMIT = 3
MIN_VISIBLE_TEXT = 200

_FAQ_RE = re.compile(r"FAQPage", re.IGNORECASE)
_HOWTO_RE = re.compile(r"HowTo", re.IGNORECASE)
_QA_RE = re.compile(r'"QAPage"|"Question"', re.IGNORECASE)
_STAT_RE = re.compile(r"\d+(\.\d+)?%|\$[\d,.]+|\d{1,3}(,\d{3})+")
_TITLE_TEMPLATE_RE = re.compile(r"\s[-|]\s")
_PATTERN_PATH_RE = re.compile(r"/[\w-]+/[\w-]+/[\w-]+")
_BREADCRUMB_RE = re.compile(r"BreadcrumbList", re.IGNORECASE)
_NOAI_RE = re.compile(r"noai|noimageai", re.IGNORECASE)
_PHONE_RE = re.compile(r"(\+?\d{1,3}[-.\s]?)?\(?\d{2,4}\)?[-.\s]?\d{3,4}[-.\s]?\d{3,4}")
_GEO_SCHEMA_RE = re.compile(r"GeoCoordinates|latitude|longitude", re.IGNORECASE)
_HOURS_RE = re.compile(r"openingHours|OpeningHoursSpecification", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")


def _any_block(blocks: List[str], pattern: re.Pattern[str]) -> bool:
    return any(pattern.search(raw) for raw in blocks)


@rule("aeo")
def analyze_aeo(ctx: AnalysisContext) -> Verdict:
    doc = ctx.doc
    blocks = doc.json_ld_blocks()
    has_faq = _any_block(blocks, _FAQ_RE)

    questions = []
    for el in doc.select("h2, h3"):
        text = el.get_text().strip()
        if "?" in text and len(text) > 10:
            questions.append(text[:100])
    n_lists = sum(1 for el in doc.select("ol, ul") if len(el.find_all("li", recursive=False)) >= 3)
    tables = doc.count("table")
    dls = doc.count("dl")
    q = len(questions)

    signals = [
        Signal(
            "FAQPage schema",
            has_faq,
            "FAQPage structured data found; eligible for FAQ rich results.",
            "Add FAQ schema (FAQPage) to help your content appear in featured snippets.",
        ),
        Signal(
            "HowTo schema",
            _any_block(blocks, _HOWTO_RE),
            "HowTo structured data found; eligible for step-by-step rich results.",
        ),
        Signal("Q&A schema", _any_block(blocks, _QA_RE), "Q&A structured data found."),
        Signal(
            f"{q} question heading(s)",
            q > 0,
            f"{q} question-style {plural(q, 'heading')} found; good for featured snippets.",
            "Use question-format headings (e.g., 'What is...?', 'How to...?') "
            "followed by concise answers.",
        ),
        Signal(
            f"{n_lists} list(s)",
            n_lists > 0,
            f"{n_lists} structured {plural(n_lists, 'list')} with 3+ items; favored for list snippets.",
            "Add structured lists or tables for list/table snippet eligibility.",
        ),
        Signal(
            f"{tables} table(s)",
            tables > 0,
            f"{tables} data {plural(tables, 'table')} found; eligible for table snippets.",
        ),
        Signal("Definition list(s)", dls > 0, f"{dls} definition {plural(dls, 'list')} found."),
    ]

    f = Findings()
    outcome = evaluate_signals(signals, AEO_TIERS, f)
    if outcome.count == 0:
        f.issue("No answer-engine-friendly content patterns detected.")
    elif not has_faq and outcome.severity == PASS:
        f.recommend("Add FAQPage structured data to maximize featured snippet eligibility.")
    return f.verdict(
        signals=list(outcome.fired),
        questionHeadings=questions[:QUESTION_HEADING_CAP],
    )


def _canonical_host(canonical: str) -> str:
    parts = canonical.split("/")
    return parts[2] if len(parts) > 2 and parts[2] else "__none__"


@rule("geo")
def analyze_geo(ctx: AnalysisContext) -> Verdict:
    doc = ctx.doc
    has_author = doc.count('[rel="author"], .author, [itemprop="author"], meta[name="author"]') > 0
    has_published = (
        doc.count(
            'meta[property="article:published_time"], time[datetime], [itemprop="datePublished"]'
        )
        > 0
    )
    has_modified = (
        doc.count('meta[property="article:modified_time"], [itemprop="dateModified"]') > 0
    )

    own_host = _canonical_host(doc.attr("link[rel='canonical']", "href") or "")
    outbound = sum(
        1 for el in doc.select('a[href^="http"]') if own_host not in (attr_of(el, "href") or "")
    )
    stats = sum(1 for _ in _STAT_RE.finditer(doc.body_text()))
    h2_count = doc.count("h2")
    schema_count = len(doc.json_ld_blocks())
    first_p = doc.select_one("article p, main p, .content p, p")
    intro = first_p.get_text().strip() if first_p is not None else ""

    signals = [
        Signal(
            "Author attribution",
            has_author,
            "Author information found; builds content credibility for AI engines.",
            "Add author information (name, bio, credentials) to build E-E-A-T signals.",
        ),
        Signal(
            "Published date",
            has_published,
            "Publication date found; AI engines prefer fresh, dated content.",
            "Add a published date using article:published_time or datePublished schema.",
        ),
        Signal("Modified date", has_modified, "Last-modified date found."),
        Signal(
            f"{outbound} external references",
            outbound >= 3,
            f"{outbound} outbound citations/references; AI engines value well-sourced content.",
            "Cite authoritative external sources to strengthen content trustworthiness.",
        ),
        Signal(
            f"{stats} data points",
            stats >= 3,
            f"{stats} statistical data points found; quantitative content is favored by AI summarizers.",
            "Include statistics and concrete data points in the content.",
        ),
        Signal(
            f"{h2_count} topic sections",
            h2_count >= 4,
            f"{h2_count} H2 sections; comprehensive topic coverage helps AI engines understand depth.",
            "Expand content with more H2 subsections for deeper topic coverage.",
        ),
        Signal(
            "Rich structured data",
            schema_count >= 2,
            f"{schema_count} JSON-LD blocks; rich structured data improves AI extraction accuracy.",
            "Add multiple JSON-LD structured data blocks (Article, FAQPage, BreadcrumbList).",
        ),
        Signal(
            "Concise intro paragraph",
            50 <= len(intro) <= 300,
            "Concise introductory paragraph found; ideal for AI-generated summaries.",
        ),
    ]

    f = Findings()
    outcome = evaluate_signals(signals, GEO_TIERS, f)
    if outcome.severity == FAIL:
        f.issue("Very few GEO signals detected.")
    return f.verdict(signals=list(outcome.fired))


@rule("programmaticSeo")
def analyze_programmatic_seo(ctx: AnalysisContext) -> Verdict:
    doc = ctx.doc
    target = ctx.target
    title = doc.text("title").strip()
    has_params = len(target.search) > 1
    has_pattern_path = bool(_PATTERN_PATH_RE.search(target.path))
    has_pagination = doc.count('link[rel="next"]') > 0 or doc.count('link[rel="prev"]') > 0
    hreflang_count = doc.count('link[rel="alternate"][hreflang]')
    internal_links = doc.count('a[href^="/"], a[href^="./"]')
    canonical = doc.attr('link[rel="canonical"]', "href") or ""
    cross_canonical = bool(canonical) and canonical not in (target.href, target.href.rstrip("/"))
    has_breadcrumb = _any_block(doc.json_ld_blocks(), _BREADCRUMB_RE)

    signals = [
        Signal(
            "Title template pattern",
            bool(_TITLE_TEMPLATE_RE.search(title)),
            "Title uses a separator pattern (e.g., 'Keyword | Brand'), common in pSEO.",
        ),
        Signal("URL parameters", has_params, f"URL has query parameters: {target.search[:80]}"),
        Signal(
            "Nested URL structure",
            has_pattern_path,
            "Multi-level URL path detected, typical of programmatic page generation.",
        ),
        Signal(
            "Pagination links",
            has_pagination,
            'Pagination rel="next"/"prev" found; indicates paginated content series.',
        ),
        Signal(
            f"{hreflang_count} hreflang variants",
            hreflang_count > 2,
            f"{hreflang_count} hreflang tags; suggests multi-region programmatic pages.",
        ),
        Signal(
            "High internal link density",
            internal_links > 50,
            f"{internal_links} internal links; may be a hub/index page in a pSEO structure.",
        ),
        Signal(
            "Cross-canonical",
            cross_canonical,
            "Canonical URL points to a different page; may indicate variant/duplicate in a pSEO set.",
        ),
        Signal(
            "BreadcrumbList schema",
            has_breadcrumb,
            "BreadcrumbList structured data found; supports site hierarchy for pSEO.",
        ),
    ]

    f = Findings()
    outcome = evaluate_signals(signals, PSEO_TIERS, f)
    if outcome.count == 0:
        f.issue("No programmatic SEO patterns detected. This appears to be a manually crafted page.")
    else:
        f.issue(f"{outcome.count} pSEO {plural(outcome.count, 'signal')} detected.")

    if has_params and not canonical:
        f.flag(
            WARNING,
            recommendation="Add canonical tags to parameterized URLs "
            "to prevent duplicate content issues.",
        )
    if outcome.count and not has_breadcrumb:
        f.recommend("Add BreadcrumbList schema to improve navigation visibility in search results.")
    if outcome.count and hreflang_count == 0 and has_pattern_path:
        f.recommend("Consider adding hreflang tags if serving multiple language/region variants.")
    return f.verdict(signals=list(outcome.fired))


@rule("aiSearchVisibility")
def analyze_ai_search_visibility(ctx: AnalysisContext) -> Verdict:
    doc = ctx.doc
    scan = scan_ai_bots(ctx.ancillary.robots_txt, AI_BOTS)
    blocked = [bot.label for bot in scan.blocked]
    mentioned = [bot.label for bot in scan.mentioned]

    f = Findings()
    if blocked:
        f.issue(f"Blocked AI crawlers: {', '.join(blocked)}.")
    if mentioned:
        f.issue(f"AI crawlers referenced in robots.txt: {', '.join(mentioned)}.")
    if not blocked and not mentioned:
        f.issue("No AI-specific crawler rules in robots.txt; all AI bots can crawl by default.")

    noai = bool(_NOAI_RE.search(doc.attr('meta[name="robots"]', "content") or ""))
    if noai:
        f.issue("Meta robots contains noai/noimageai; restricts AI training use.")
    schema_count = len(doc.json_ld_blocks())
    text_length = len(_WS_RE.sub(" ", doc.text("body")).strip())
    if text_length < MIN_VISIBLE_TEXT:
        f.issue("Very little text content visible in HTML; AI crawlers may not execute JavaScript.")
    h1 = doc.select_one("h1")
    has_h1 = h1 is not None and bool(h1.get_text().strip())
    has_desc = bool(doc.attr('meta[name="description"]', "content"))

    signals = [
        Signal(
            "No AI crawler blocked",
            not blocked,
            "No AI crawler is blocked in robots.txt.",
            "Review the Disallow rules for AI crawlers in robots.txt.",
        ),
        Signal(
            "AI crawlers allowed",
            len(blocked) < AI_BLOCK_LIMIT,
            "Most AI crawlers are allowed to fetch the site.",
            "Unblock the AI crawlers you want citing your content (GPTBot, PerplexityBot, ClaudeBot).",
        ),
        Signal(
            "No noai directive",
            not noai,
            "No noai/noimageai restriction in meta robots.",
            "Remove noai/noimageai from meta robots if you want AI engines to use this page.",
        ),
        Signal(
            f"{schema_count} schema block(s)",
            schema_count > 0,
            f"{schema_count} JSON-LD structured data {plural(schema_count, 'block')}; "
            "helps AI engines extract accurate information.",
            "Add JSON-LD structured data so AI engines can extract accurate facts from your page.",
        ),
        Signal(
            "Content in HTML",
            text_length >= MIN_VISIBLE_TEXT,
            "Content is present in server-rendered HTML; accessible to AI crawlers.",
            "Ensure key content is in the initial HTML response, not loaded via client-side JS.",
        ),
        Signal(
            "Clear topic signals",
            has_h1 and has_desc,
            "H1 and meta description present; helps AI engines identify page topic.",
            "Add an H1 and a meta description so AI engines can identify the page topic.",
        ),
    ]
    outcome = evaluate_signals(signals, AI_VISIBILITY_TIERS, f)
    if outcome.count <= 1:
        f.recommend(
            "Improve AI search visibility by adding structured data "
            "and ensuring content is server-rendered."
        )
    return f.verdict(signals=list(outcome.fired), blockedBots=blocked, allowedBots=mentioned)


@rule("localSeo")
def analyze_local_seo(ctx: AnalysisContext) -> Verdict:
    doc = ctx.doc
    blocks = doc.json_ld_blocks()
    local_types = [t for raw in blocks for t in LOCAL_SCHEMA_TYPES if f'"{t}"' in raw]
    body_text = doc.text("body")
    has_phone = bool(_PHONE_RE.search(body_text)) or doc.count('a[href^="tel:"]') > 0
    has_address = doc.count('address, [itemprop="address"], [itemprop="streetAddress"]') > 0
    has_map = doc.count('iframe[src*="google.com/maps"], iframe[src*="maps.google"]') > 0
    has_geo = _any_block(blocks, _GEO_SCHEMA_RE) or (
        doc.count('meta[name="geo.position"], meta[name="ICBM"], meta[name="geo.region"]') > 0
    )
    has_hours = _any_block(blocks, _HOURS_RE)
    lowered = body_text.lower()
    keywords = [kw for kw in LOCAL_KEYWORDS if kw in lowered]

    signals = [
        Signal(
            "LocalBusiness schema",
            bool(local_types),
            f"Local business schema found: {', '.join(local_types)}.",
            "Add LocalBusiness structured data with name, address, phone, and opening hours.",
        ),
        Signal("Phone number", has_phone, "Phone number detected on page."),
        Signal(
            "Address element",
            has_address,
            "Address markup found on page.",
            "Add an <address> element or schema markup for your business address.",
        ),
        Signal("Google Maps embed", has_map, "Google Maps embed found; strong local signal."),
        Signal(
            "Geo coordinates",
            has_geo,
            "Geographic coordinates or geo meta tags found.",
            "Add GeoCoordinates to your LocalBusiness schema for map visibility.",
        ),
        Signal(
            "Opening hours",
            has_hours,
            "Opening hours structured data found.",
            "Add OpeningHoursSpecification to help search engines show business hours.",
        ),
        Signal(
            f"{len(keywords)} local keyword(s)",
            bool(keywords),
            f"Local keywords found: {', '.join(keywords)}.",
        ),
    ]

    f = Findings()
    outcome = evaluate_signals(signals, LOCAL_TIERS, f)
    if outcome.count == 0:
        f.issue("No local SEO signals detected. This may not be a local business page.")
    elif outcome.severity == PASS:
        f.issue(f"{outcome.count} local SEO signals detected; good local optimization.")
    return f.verdict(signals=list(outcome.fired), localSchemaTypes=local_types)
