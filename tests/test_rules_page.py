# File: tests/test_rules_page.py
"""Правила по разметке страницы: заголовки, мета-теги, ссылки, изображения, соцсети, JSON-LD."""
import pytest

from page_scout.rules.base import FAIL, PASS, WARNING
from page_scout.rules.content import (
    analyze_accessibility,
    analyze_content,
    analyze_deprecated_tags,
    analyze_h1,
    analyze_heading_hierarchy,
)
from page_scout.rules.links import (
    LINK_LIST_CAP,
    analyze_external_links,
    analyze_internal_links,
    analyze_keywords_in_url,
    analyze_url_structure,
)
from page_scout.rules.media import analyze_images, analyze_lazy_loading, analyze_modern_image_formats, analyze_social_image_size
from page_scout.rules.meta import (
    analyze_canonical,
    analyze_char_encoding,
    analyze_doctype,
    analyze_meta_description,
    analyze_meta_robots,
    analyze_mobile,
    analyze_title,
)
from page_scout.rules.schema import analyze_schema, describe_block
from page_scout.rules.social import analyze_open_graph, analyze_social_meta


def test_title_length_counts_emoji_as_two(ctx_for, html_page):
    title = "x" * 59 + "\U0001f680"
    verdict = analyze_title(ctx_for(html_page(head=f"<title>{title}</title>")))
    assert verdict.extra["length"] == 61
    assert verdict.severity == WARNING


@pytest.mark.parametrize(
    "length,severity",
    [(0, FAIL), (29, WARNING), (30, PASS), (60, PASS), (61, WARNING)],
)
def test_title_length_boundaries(ctx_for, html_page, length, severity):
    verdict = analyze_title(ctx_for(html_page(head=f"<title>{'x' * length}</title>")))
    assert verdict.severity == severity
    assert verdict.extra["length"] == length
    if severity == PASS:
        assert verdict.issues == (f"Title length is good ({length} characters).",)


def test_title_all_caps(ctx_for, html_page):
    verdict = analyze_title(ctx_for(html_page(head="<title>THE BEST HIKING BOOTS FOR EVERY SEASON</title>")))
    assert verdict.severity == WARNING
    assert "Title is in ALL CAPS. This can appear aggressive in search results." in verdict.issues


@pytest.mark.parametrize(
    "body,severity,count",
    [
        ("", FAIL, 0),
        ("<h1>Welcome to our hiking store</h1>", PASS, 1),
        ("<h1>First heading</h1><h1>Second heading</h1>", WARNING, 2),
    ],
)
def test_h1_count(ctx_for, html_page, body, severity, count):
    verdict = analyze_h1(ctx_for(html_page(body=body)))
    assert verdict.severity == severity
    assert verdict.extra["count"] == count


def test_heading_skip_is_reported(ctx_for, html_page):
    verdict = analyze_heading_hierarchy(ctx_for(html_page(body="<h1>Top</h1><h3>Deep</h3>")))
    assert verdict.severity == WARNING
    assert verdict.issues == ("Heading level skipped: <h1> followed by <h3>.",)


def test_heading_hierarchy_clean(ctx_for, html_page):
    verdict = analyze_heading_hierarchy(
        ctx_for(html_page(body="<h1>A</h1><h2>B</h2><h2>C</h2><h3>D</h3>"))
    )
    assert verdict.severity == PASS
    assert verdict.issues == ("Heading hierarchy is properly structured.",)
    assert verdict.extra["structure"] == {"h1": 1, "h2": 2, "h3": 1}


def test_heading_first_not_h1(ctx_for, html_page):
    verdict = analyze_heading_hierarchy(ctx_for(html_page(body="<h2>B</h2><h3>C</h3>")))
    assert verdict.severity == WARNING
    assert verdict.issues[0].startswith("First heading is an <h2>")


@pytest.mark.parametrize("length,severity", [(69, WARNING), (119, WARNING), (120, PASS), (160, PASS), (161, WARNING)])
def test_meta_description_length(ctx_for, html_page, length, severity):
    head = f'<meta name="description" content="{"d" * length}">'
    assert analyze_meta_description(ctx_for(html_page(head=head))).severity == severity


def test_meta_description_missing(ctx_for, html_page):
    verdict = analyze_meta_description(ctx_for(html_page()))
    assert verdict.severity == FAIL
    assert verdict.issues == ("No meta description found.",)


def test_meta_robots_noindex(ctx_for, html_page):
    verdict = analyze_meta_robots(ctx_for(html_page(head='<meta name="robots" content="NOINDEX, nofollow">')))
    assert verdict.severity == FAIL
    assert verdict.extra["content"] == "noindex, nofollow"
    assert len(verdict.recommendations) == 2


def test_meta_robots_absent_is_pass(ctx_for, html_page):
    verdict = analyze_meta_robots(ctx_for(html_page()))
    assert verdict.severity == PASS
    assert verdict.extra["content"] is None


def test_canonical_variants(ctx_for, html_page):
    same = analyze_canonical(ctx_for(html_page(head='<link rel="canonical" href="https://example.com/">')))
    assert same.severity == PASS
    assert same.extra["canonical"] == "https://example.com/"
    assert same.issues == ("Canonical URL: https://example.com/",)

    other = analyze_canonical(ctx_for(html_page(head='<link rel="canonical" href="/elsewhere">')))
    assert other.severity == PASS
    assert "Canonical URL differs from the current page URL." in other.issues

    double = analyze_canonical(
        ctx_for(html_page(head='<link rel="canonical" href="/a"><link rel="canonical" href="/b">'))
    )
    assert double.severity == WARNING
    assert double.extra["count"] == 2


def test_doctype_and_encoding(ctx_for, html_page):
    assert analyze_doctype(ctx_for("\ufeff  " + html_page())).severity == PASS
    assert analyze_doctype(ctx_for("<html><body>x</body></html>")).severity == FAIL

    assert analyze_char_encoding(ctx_for(html_page())).extra["charset"] == "utf-8"
    latin = '<html><head><meta http-equiv="Content-Type" content="text/html; charset=ISO-8859-1"></head></html>'
    verdict = analyze_char_encoding(ctx_for(latin))
    assert verdict.severity == WARNING
    assert verdict.extra["charset"] == "iso-8859-1"


def test_viewport_zoom_disabled(ctx_for, html_page):
    head = '<meta name="viewport" content="width=device-width, user-scalable=no">'
    verdict = analyze_mobile(ctx_for(html_page(head=head)))
    assert verdict.severity == WARNING
    assert "Viewport disables or limits user zooming." in verdict.issues
    assert analyze_mobile(ctx_for(html_page())).severity == FAIL


def test_internal_links_classification(ctx_for, html_page):
    body = (
        '<a href="/about">About</a>'
        '<a href="https://blog.example.com/post">Blog</a>'
        '<a href="#top">Top</a>'
        '<a href="/about"><img src="x.png" alt=""></a>'
        '<a href="mailto:hi@example.com">Mail</a>'
        '<a href="">Empty</a>'
        '<a href="https://other.org/x" rel="nofollow sponsored">Other</a>'
    )
    ctx = ctx_for(html_page(body=body))
    internal = analyze_internal_links(ctx)
    assert internal.extra["count"] == 4
    assert internal.extra["emptyAnchors"] == 1
    assert [link["href"] for link in internal.extra["links"]] == ["/about", "/post", "/"]
    assert internal.severity == WARNING
    assert "1 internal link has no anchor text." in internal.issues

    external = analyze_external_links(ctx)
    assert external.severity == PASS
    assert external.issues == (
        "Found 1 external link pointing to 1 unique domain.",
        '1 external link uses rel="nofollow".',
    )
    assert external.extra["links"][0]["domain"] == "other.org"


def test_link_targets_are_serialized_like_a_browser(ctx_for, html_page):
    body = (
        '<a href="/caf\u00e9 menu">Menu</a>'
        '<a href="/caf%C3%A9%20menu">Same menu</a>'
        '<a href="https://other.org/a#intro">Intro</a>'
        '<a href="https://other.org/a#usage">Usage</a>'
    )
    ctx = ctx_for(html_page(body=body))
    internal = analyze_internal_links(ctx)
    assert [link["href"] for link in internal.extra["links"]] == ["/caf%C3%A9%20menu"]
    external = analyze_external_links(ctx)
    assert [link["href"] for link in external.extra["links"]] == [
        "https://other.org/a#intro",
        "https://other.org/a#usage",
    ]


def test_link_list_is_deduplicated_and_capped(ctx_for, html_page):
    body = "".join(f'<a href="/p{i}">Page {i}</a><a href="/p{i}">Again</a>' for i in range(LINK_LIST_CAP + 10))
    verdict = analyze_internal_links(ctx_for(html_page(body=body)))
    assert verdict.extra["count"] == 2 * (LINK_LIST_CAP + 10)
    assert len(verdict.extra["links"]) == LINK_LIST_CAP
    assert verdict.severity == PASS


def test_no_internal_links(ctx_for, html_page):
    verdict = analyze_internal_links(ctx_for(html_page(body="<p>nothing</p>")))
    assert verdict.severity == WARNING
    assert verdict.issues == ("No internal links found on the page.",)


def test_url_structure(ctx_for, html_page):
    verdict = analyze_url_structure(ctx_for(html_page(), url="https://example.com/My_Page.html"))
    assert verdict.severity == WARNING
    assert "URL contains uppercase characters." in verdict.issues
    assert "URL uses underscores. Google recommends hyphens instead." in verdict.issues
    assert "URL contains a file extension. Modern URLs typically omit extensions." in verdict.issues

    clean = analyze_url_structure(ctx_for(html_page(), url="https://example.com/hiking-boots"))
    assert clean.severity == PASS
    assert clean.issues[-1] == "URL structure looks clean and SEO-friendly."


def test_keywords_in_url(ctx_for, html_page):
    ctx = ctx_for(html_page(head="<title>Best Hiking Boots Review</title>"), url="https://example.com/best-hiking-boots")
    verdict = analyze_keywords_in_url(ctx)
    assert verdict.severity == PASS
    assert verdict.extra == {"matchingWords": ["best", "hiking", "boots"], "matchPercent": 75}
    assert verdict.issues == (
        "3 keywords from the title found in the URL (75%).",
        "Matching: best, hiking, boots.",
    )

    root = analyze_keywords_in_url(ctx_for(html_page(head="<title>Home</title>")))
    assert root.issues == ("Cannot analyze keywords in URL (no title or root path).",)


def test_content_keywords_and_ngrams(ctx_for, html_page):
    verdict = analyze_content(ctx_for(html_page(body="<p>Python guide python guide python guide.</p>")))
    assert verdict.severity == WARNING
    assert verdict.extra["wordCount"] == 6
    assert verdict.extra["keywords"] == [{"word": "python", "count": 3}, {"word": "guide", "count": 3}]
    assert verdict.extra["twoWordPhrases"] == [
        {"phrase": "python guide", "count": 3},
        {"phrase": "guide python", "count": 2},
    ]
    assert verdict.extra["fourWordPhrases"] == [{"phrase": "python guide python guide", "count": 2}]
    assert "Average sentence length: 6 words." in verdict.issues


def test_content_ignores_scripts(ctx_for, html_page):
    verdict = analyze_content(ctx_for(html_page(body="<script>var a = 1;</script><p>one two</p><style>p{}</style>")))
    assert verdict.extra["wordCount"] == 2


def test_accessibility(ctx_for, html_page):
    body = '<img src="a.png"><form><input type="text" name="q"></form>'
    verdict = analyze_accessibility(ctx_for(html_page(body=body, lang="")))
    assert verdict.severity == FAIL
    assert "No lang attribute on <html> element." in verdict.issues
    assert "1 image missing alt attribute." in verdict.issues
    assert "1 form input found but no <label> elements." in verdict.issues


def test_deprecated_tags(ctx_for, html_page):
    warn = analyze_deprecated_tags(ctx_for(html_page(body="<center>hi</center><font>x</font>")))
    assert warn.severity == WARNING
    assert warn.extra == {"tags": {"center": 1, "font": 1}, "total": 2}

    fail = analyze_deprecated_tags(ctx_for(html_page(body="<font>x</font>" * 10)))
    assert fail.severity == FAIL

    clean = analyze_deprecated_tags(ctx_for(html_page(body="<p>modern</p>")))
    assert clean.issues == ("No deprecated HTML tags found.",)


def test_images(ctx_for, html_page):
    body = '<img src="a.jpg"><img src="b.WEBP?v=2" alt="B"><img src="c.bmp" alt="">'
    verdict = analyze_images(ctx_for(html_page(body=body)))
    assert verdict.severity == FAIL
    assert verdict.extra["missingAlt"] == 1
    assert verdict.extra["emptyAlt"] == 1
    assert verdict.extra["outdatedFormats"] == 1
    assert verdict.extra["modernFormats"] == 1


def test_lazy_loading_many_images(ctx_for, html_page):
    verdict = analyze_lazy_loading(ctx_for(html_page(body='<img src="a.png" alt="">' * 6)))
    assert verdict.severity == WARNING
    lazy = analyze_lazy_loading(ctx_for(html_page(body='<img src="a.png" loading="lazy" data-src="b.png">')))
    assert lazy.extra == {"total": 1, "lazyCount": 2, "nativeLazy": 1}


def test_modern_image_formats_picture(ctx_for, html_page):
    body = (
        '<picture><source type="image/avif" srcset="a.avif"><img src="a.jpg" alt=""></picture>'
        '<img src="b.png" alt="">'
    )
    verdict = analyze_modern_image_formats(ctx_for(html_page(body=body)))
    assert verdict.severity == PASS
    assert verdict.extra == {"total": 2, "modernCount": 1, "modernPercent": 50}

    none = analyze_modern_image_formats(ctx_for(html_page(body='<img src="b.png" alt="">')))
    assert none.severity == WARNING


def test_social_image_size(ctx_for, html_page):
    head = (
        '<meta property="og:image" content="https://example.com/og.png">'
        '<meta property="og:image:width" content="800">'
        '<meta property="og:image:height" content="600">'
    )
    verdict = analyze_social_image_size(ctx_for(html_page(head=head)))
    assert verdict.severity == WARNING
    assert "OG image dimensions declared: 800x600." in verdict.issues
    assert analyze_social_image_size(ctx_for(html_page())).severity == WARNING


def test_open_graph_and_social_coverage(ctx_for, html_page):
    assert analyze_open_graph(ctx_for(html_page())).severity == FAIL
    ctx = ctx_for(html_page(head='<meta property="og:title" content="T">'))
    verdict = analyze_open_graph(ctx)
    assert verdict.severity == WARNING
    assert "Missing: og:description, og:image, og:url, og:type." in verdict.issues

    social = analyze_social_meta(ctx)
    assert social.severity == WARNING
    assert social.issues[0] == "Only partial social metadata found: Open Graph."
    assert analyze_social_meta(ctx_for(html_page())).severity == FAIL


def test_schema_blocks(ctx_for, html_page):
    head = (
        '<script type="application/ld+json">{"@type": ["Organization", "Brand"]}</script>'
        '<script type="application/ld+json">{broken</script>'
    )
    verdict = analyze_schema(ctx_for(html_page(head=head)))
    assert verdict.severity == WARNING
    assert verdict.issues == (
        "Found 2 JSON-LD blocks: Organization/Brand.",
        "1 schema block has invalid JSON.",
    )
    assert verdict.extra["schemas"][1] == {"type": "Invalid JSON", "valid": False}


@pytest.mark.parametrize(
    "raw,expected",
    [
        ('{"@type": "Article"}', "Article"),
        ('{"@graph": [{"@type": "WebPage"}]}', "Graph"),
        ('[{"@type": "Article"}]', "Unknown"),
        ("", "Invalid JSON"),
        ("null", "Invalid JSON"),
        ('{"@type": "Product", "price": NaN}', "Invalid JSON"),
        ("[Infinity]", "Invalid JSON"),
        ("-Infinity", "Invalid JSON"),
        ("42", "Unknown"),
    ],
)
def test_describe_block(raw, expected):
    described = describe_block(raw)
    assert described["type"] == expected
    assert described["valid"] is (expected != "Invalid JSON")


def test_null_schema_block_is_invalid(ctx_for, html_page):
    head = '<script type="application/ld+json">null</script>'
    verdict = analyze_schema(ctx_for(html_page(head=head)))
    assert verdict.severity == WARNING
    assert verdict.extra["schemas"] == [{"type": "Invalid JSON", "valid": False}]
    assert verdict.issues == ("Found 1 JSON-LD block: none valid.", "1 schema block has invalid JSON.")
