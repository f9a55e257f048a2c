# File: page_scout/rules/crawl.py
"""Crawlability checks fed by the ancillary probes: HTTPS, robots.txt, sitemap, llms.txt."""

from __future__ import annotations

from typing import List

from page_scout.parser.llms_parser import parse_llms_txt
from page_scout.parser.robots_parser import (
    has_disallow_all,
    has_sitemap_directive,
    mentions_sitemap,
    sitemap_urls,
)
from page_scout.rules.base import FAIL, WARNING, AnalysisContext, Findings, Verdict
from page_scout.rules.registry import rule
from page_scout.utils import plural


def _utf8_size(text: str | None) -> int:
    return len(text.encode("utf-8")) if text else 0


@rule("sslHttps")
def analyze_ssl(ctx: AnalysisContext) -> Verdict:
    is_https = ctx.target.scheme == "https"
    f = Findings()
    if is_https:
        f.issue("Site uses HTTPS. Connection is secure.")
    else:
        f.flag(
            FAIL,
            "Site uses HTTP (not secure).",
            "Migrate to HTTPS. It is a confirmed ranking factor and essential for user trust.",
        )
    return f.verdict(isHttps=is_https)


@rule("httpsRedirect")
def analyze_https_redirect(ctx: AnalysisContext) -> Verdict:
    probe = ctx.ancillary.https_redirect
    f = Findings()
    if not probe.checked:
        reason = f": {probe.error}" if probe.error else ""
        f.flag(
            WARNING,
            f"Could not verify the HTTP to HTTPS redirect{reason}.",
            "Make sure every http:// request is permanently redirected to https://.",
        )
    elif probe.redirects_to_https:
        f.issue("HTTP requests are redirected to HTTPS.")
        if probe.final_url:
            f.issue(f"Final URL: {probe.final_url}")
    else:
        f.flag(
            FAIL,
            "The HTTP version of the page does not redirect to HTTPS.",
            "Add a permanent (301) redirect from HTTP to HTTPS for every URL.",
        )
    return f.verdict(
        checked=probe.checked,
        redirectsToHttps=probe.redirects_to_https,
        finalUrl=probe.final_url,
        statusCode=probe.status,
    )


@rule("robotsTxt")
def analyze_robots_txt(ctx: AnalysisContext) -> Verdict:
    robots = ctx.ancillary.robots_txt
    robots_url = f"{ctx.target.origin}/robots.txt"
    f = Findings()

    if not robots:
        f.flag(
            WARNING,
            "No robots.txt file found or it is not properly formatted.",
            "Create a robots.txt file to guide search engine crawlers.",
        )
        return f.verdict(exists=False, robotsTxtUrl=robots_url)

    f.issue("robots.txt file found and accessible.")
    if has_disallow_all(robots):
        f.flag(
            FAIL,
            "robots.txt blocks all crawling with 'Disallow: /'. Search engines cannot index your site.",
            "Remove or modify the 'Disallow: /' rule to allow search engines to crawl your content.",
        )
    if has_sitemap_directive(robots):
        f.issue("Sitemap reference found in robots.txt.")
    else:
        f.recommend("Add a Sitemap directive to robots.txt pointing to your sitemap.xml.")
    return f.verdict(exists=True, robotsTxtUrl=robots_url)


@rule("sitemapDetection")
def analyze_sitemap(ctx: AnalysisContext) -> Verdict:
    robots = ctx.ancillary.robots_txt or ""
    probe = ctx.ancillary.sitemap
    sitemap_url = probe.found_at or f"{ctx.target.origin}/sitemap.xml"
    in_robots = mentions_sitemap(robots)

    urls: List[str] = sitemap_urls(robots)
    if probe.exists and sitemap_url not in urls:
        urls.insert(0, sitemap_url)

    f = Findings()
    if probe.exists:
        f.issue(f"XML sitemap found at {sitemap_url}.")
    elif in_robots:
        f.flag(WARNING, "Sitemap referenced in robots.txt but not found at /sitemap.xml.")
    else:
        f.flag(
            WARNING,
            "No XML sitemap detected.",
            "Create a sitemap.xml to help search engines discover all your pages.",
        )
    if in_robots and probe.exists:
        f.issue("Sitemap is also referenced in robots.txt.")

    return f.verdict(
        sitemapExists=probe.exists,
        sitemapInRobots=in_robots,
        sitemapUrl=sitemap_url,
        sitemapUrls=urls,
        foundAt=probe.found_at,
        testedUrls=list(probe.tested_urls),
    )


@rule("llmsTxt")
def analyze_llms_txt(ctx: AnalysisContext) -> Verdict:
    files = ctx.ancillary.llms
    llms_exists = files.llms_txt is not None
    full_exists = files.llms_full_txt is not None
    doc = parse_llms_txt(files.llms_txt)
    f = Findings()

    if not llms_exists and not full_exists:
        f.flag(FAIL, "No /llms.txt file found.")
        f.issue("No /llms-full.txt file found.")
        f.recommend("Create a /llms.txt file to help LLMs understand your site.")
        f.recommend("Include a title (#), description (>), sections (##), and markdown links.")
        f.recommend("Optionally create /llms-full.txt with extended content.")
    elif not llms_exists:
        f.flag(
            WARNING,
            "/llms.txt not found, but /llms-full.txt exists.",
            "Create a /llms.txt file as the primary entry point for LLMs.",
        )
    else:
        if doc.is_complete:
            f.issue(
                f'llms.txt found: "{doc.title}" with {doc.section_count} '
                f"{plural(doc.section_count, 'section')} and {doc.link_count} "
                f"{plural(doc.link_count, 'link')}."
            )
        else:
            f.issue("llms.txt found but incomplete.")
        if not doc.title:
            f.flag(
                WARNING,
                "llms.txt is missing a title (# heading).",
                "Add a # Title as the first heading in your llms.txt.",
            )
        if not doc.description:
            f.flag(
                WARNING,
                "llms.txt is missing a description (> blockquote).",
                "Add a > description blockquote after the title.",
            )
        if not doc.sections:
            f.flag(
                WARNING,
                "llms.txt has no sections (## headings).",
                "Add ## sections to organize your content links.",
            )
        if not doc.link_count:
            f.flag(
                WARNING,
                "llms.txt has no markdown links.",
                "Add links in the format: - [Title](URL): description",
            )
        if full_exists:
            f.issue("/llms-full.txt also found.")
        else:
            f.recommend("Optionally create /llms-full.txt with extended content.")

    return f.verdict(
        llmsExists=llms_exists,
        llmsFullExists=full_exists,
        title=doc.title,
        description=doc.description,
        sections=[section.to_dict() for section in doc.sections],
        linkCount=doc.link_count,
        sectionCount=doc.section_count,
        llmsTxtSize=_utf8_size(files.llms_txt),
        llmsFullTxtSize=_utf8_size(files.llms_full_txt),
    )
