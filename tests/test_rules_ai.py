# File: tests/test_rules_ai.py
"""AEO, GEO, pSEO, видимость для AI-краулеров и локальное SEO."""
import json

import pytest

from page_scout.crawler.models import AncillaryData
from page_scout.rules.ai import (
    AEO_TIERS,
    AI_VISIBILITY_TIERS,
    GEO_TIERS,
    LOCAL_TIERS,
    PSEO_TIERS,
    analyze_aeo,
    analyze_ai_search_visibility,
    analyze_geo,
    analyze_local_seo,
    analyze_programmatic_seo,
)
from page_scout.rules.base import FAIL, PASS, WARNING, Findings
from page_scout.rules.signals import Signal, evaluate_signals
from page_scout.rules.tables import AI_BOTS


def ld(data) -> str:
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


@pytest.mark.parametrize(
    "tiers,expected",
    [
        (AEO_TIERS, [WARNING, WARNING, WARNING, PASS, PASS, PASS]),
        (GEO_TIERS, [FAIL, FAIL, WARNING, WARNING, PASS, PASS]),
        (PSEO_TIERS, [PASS, PASS, PASS, PASS, PASS, PASS]),
        (AI_VISIBILITY_TIERS, [WARNING, WARNING, WARNING, WARNING, WARNING, PASS]),
        (LOCAL_TIERS, [WARNING, WARNING, WARNING, PASS, PASS, PASS]),
    ],
)
def test_signal_tiers(tiers, expected):
    assert [tiers.severity_for(n) for n in range(6)] == expected


def test_evaluate_signals_recommends_only_below_pass():
    signals = [Signal("a", True, "A fired"), Signal("b", False, "B fired", "Add B")]
    f = Findings()
    outcome = evaluate_signals(signals, AEO_TIERS, f)
    assert outcome.fired == ("a",)
    assert outcome.severity == WARNING
    assert f.issues == ["A fired"]
    assert f.recommendations == ["Add B"]

    passing = Findings()
    evaluate_signals(signals, PSEO_TIERS, passing)
    assert passing.recommendations == []

    forced = Findings()
    evaluate_signals(signals, PSEO_TIERS, forced, recommend_on_pass=True)
    assert forced.recommendations == ["Add B"]


def test_aeo_empty_page(ctx_for, html_page):
    verdict = analyze_aeo(ctx_for(html_page()))
    assert verdict.severity == WARNING
    assert verdict.issues == ("No answer-engine-friendly content patterns detected.",)
    assert verdict.extra == {"signals": [], "questionHeadings": []}
    assert len(verdict.recommendations) == 3


def test_aeo_rich_page(ctx_for, html_page):
    faq = ld({"@type": "FAQPage", "mainEntity": [{"@type": "Question", "name": "What?"}]})
    body = "<h2>What is a page audit?</h2><p>An answer.</p><ul><li>a</li><li>b</li><li>c</li></ul>"
    verdict = analyze_aeo(ctx_for(html_page(head=faq, body=body)))
    assert verdict.severity == PASS
    assert verdict.extra["signals"] == ["FAQPage schema", "Q&A schema", "1 question heading(s)", "1 list(s)"]
    assert verdict.extra["questionHeadings"] == ["What is a page audit?"]
    assert verdict.recommendations == ()


def test_aeo_pass_without_faq_suggests_it(ctx_for, html_page):
    body = (
        "<h3>How do audits work today?</h3>"
        "<ol><li>a</li><li>b</li><li>c</li></ol>"
        "<table><tr><td>1</td></tr></table>"
    )
    verdict = analyze_aeo(ctx_for(html_page(body=body)))
    assert verdict.severity == PASS
    assert verdict.recommendations == ("Add FAQPage structured data to maximize featured snippet eligibility.",)


def test_aeo_short_question_and_nested_lists_ignored(ctx_for, html_page):
    body = "<h2>Why?</h2><ul><li>a<ul><li>x</li><li>y</li><li>z</li></ul></li><li>b</li></ul>"
    verdict = analyze_aeo(ctx_for(html_page(body=body)))
    # вложенный список с тремя пунктами засчитывается, внешний с двумя нет
    assert verdict.extra["signals"] == ["1 list(s)"]


def test_geo_empty_page(ctx_for, html_page):
    verdict = analyze_geo(ctx_for(html_page()))
    assert verdict.severity == FAIL
    assert verdict.issues == ("Very few GEO signals detected.",)
    assert len(verdict.recommendations) == 6


def test_geo_two_signals(ctx_for, html_page):
    ctx = ctx_for(html_page(head='<meta name="author" content="Jane">', body='<time datetime="2024-01-01">Jan</time>'))
    verdict = analyze_geo(ctx)
    assert verdict.severity == WARNING
    assert verdict.extra["signals"] == ["Author attribution", "Published date"]
    assert len(verdict.recommendations) == 4


def test_geo_rich_page(ctx_for, html_page):
    head = '<link rel="canonical" href="https://example.com/post">' + ld({"@type": "Article"}) + ld({"@type": "BreadcrumbList"})
    intro = "Page audits check dozens of on-page factors and summarize them in one report."
    body = (
        f'<article><p class="author">Jane</p><p>{intro}</p>'
        '<p>Traffic grew 45% to $1,200 with 3,000 visits.</p>'
        '<a href="https://a.org/x">a</a><a href="https://b.org/y">b</a><a href="https://c.org/z">c</a>'
        '<a href="https://example.com/self">self</a>'
        "<h2>One</h2><h2>Two</h2><h2>Three</h2><h2>Four</h2></article>"
    )
    verdict = analyze_geo(ctx_for(html_page(head=head, body=body)))
    assert verdict.severity == PASS
    assert "3 external references" in verdict.extra["signals"]
    assert "3 data points" in verdict.extra["signals"]
    assert "Rich structured data" in verdict.extra["signals"]
    assert verdict.recommendations == ()


def test_programmatic_seo_signals(ctx_for, html_page):
    ctx = ctx_for(
        html_page(head="<title>Running Shoes | Brand</title>"),
        url="https://example.com/shoes/men/running?color=red",
    )
    verdict = analyze_programmatic_seo(ctx)
    assert verdict.severity == WARNING
    assert verdict.extra["signals"] == ["Title template pattern", "URL parameters", "Nested URL structure"]
    assert "URL has query parameters: ?color=red" in verdict.issues
    assert verdict.issues[-1] == "3 pSEO signals detected."
    assert len(verdict.recommendations) == 3


def test_programmatic_seo_plain_page(ctx_for, html_page):
    verdict = analyze_programmatic_seo(ctx_for(html_page(head="<title>Home</title>")))
    assert verdict.severity == PASS
    assert verdict.issues == ("No programmatic SEO patterns detected. This appears to be a manually crafted page.",)
    assert verdict.recommendations == ()


def test_ai_visibility_blocked(ctx_for, html_page):
    robots = (
        "User-agent: GPTBot\nDisallow: /\n\n"
        "User-agent: ClaudeBot\nDisallow: /\n\n"
        "User-agent: PerplexityBot\nDisallow: /\n"
    )
    ctx = ctx_for(
        html_page(head='<meta name="robots" content="noai">'),
        ancillary=AncillaryData(robots_txt=robots),
    )
    verdict = analyze_ai_search_visibility(ctx)
    assert verdict.severity == WARNING
    assert verdict.extra["blockedBots"] == ["ChatGPT/OpenAI", "ClaudeBot", "Perplexity"]
    assert verdict.extra["signals"] == []
    assert verdict.issues[0] == "Blocked AI crawlers: ChatGPT/OpenAI, ClaudeBot, Perplexity."
    assert "Meta robots contains noai/noimageai; restricts AI training use." in verdict.issues
    assert verdict.recommendations[-1].startswith("Improve AI search visibility")


def test_ai_visibility_open_site(ctx_for, html_page):
    head = '<meta name="description" content="A page about audits.">' + ld({"@type": "WebPage"})
    body = "<h1>Page audits</h1><p>" + "word " * 60 + "</p>"
    ctx = ctx_for(html_page(head=head, body=body), ancillary=AncillaryData(robots_txt="User-agent: CCBot\nAllow: /\n"))
    verdict = analyze_ai_search_visibility(ctx)
    assert verdict.severity == PASS
    assert len(verdict.extra["signals"]) == 6
    assert verdict.extra["allowedBots"] == ["Common Crawl"]
    assert verdict.recommendations == ()


def test_ai_visibility_every_bot_blocked_never_passes(ctx_for, html_page):
    robots = "\n\n".join(f"User-agent: {bot.name}\nDisallow: /" for bot in AI_BOTS)
    head = '<meta name="description" content="A page about audits.">' + ld({"@type": "WebPage"})
    body = "<h1>Page audits</h1><p>" + "word " * 60 + "</p>"
    ctx = ctx_for(html_page(head=head, body=body), ancillary=AncillaryData(robots_txt=robots))
    verdict = analyze_ai_search_visibility(ctx)
    assert verdict.severity == WARNING
    assert set(verdict.extra["blockedBots"]) == {bot.label for bot in AI_BOTS}
    assert len(verdict.extra["signals"]) == 4
    assert "Review the Disallow rules for AI crawlers in robots.txt." in verdict.recommendations


def test_ai_visibility_one_bot_blocked_can_pass(ctx_for, html_page):
    head = '<meta name="description" content="A page about audits.">' + ld({"@type": "WebPage"})
    body = "<h1>Page audits</h1><p>" + "word " * 60 + "</p>"
    robots = "User-agent: CCBot\nDisallow: /\n"
    verdict = analyze_ai_search_visibility(ctx_for(html_page(head=head, body=body), ancillary=AncillaryData(robots_txt=robots)))
    assert verdict.severity == PASS
    assert verdict.extra["blockedBots"] == ["Common Crawl"]
    assert "No AI crawler blocked" not in verdict.extra["signals"]


def test_local_seo_empty_page(ctx_for, html_page):
    verdict = analyze_local_seo(ctx_for(html_page()))
    assert verdict.severity == WARNING
    assert verdict.issues == ("No local SEO signals detected. This may not be a local business page.",)
    assert len(verdict.recommendations) == 4


def test_local_seo_business_page(ctx_for, html_page):
    head = ld({"@type": "Restaurant", "geo": {"@type": "GeoCoordinates"}, "openingHours": "Mo-Fr 09:00-17:00"})
    body = "<address>1 Main St</address><p>Call +1 555 123 4567</p>"
    verdict = analyze_local_seo(ctx_for(html_page(head=head, body=body)))
    assert verdict.severity == PASS
    assert verdict.extra["localSchemaTypes"] == ["Restaurant"]
    assert verdict.extra["signals"] == [
        "LocalBusiness schema",
        "Phone number",
        "Address element",
        "Geo coordinates",
        "Opening hours",
    ]
    assert verdict.issues[-1] == "5 local SEO signals detected; good local optimization."
