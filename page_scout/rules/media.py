# File: page_scout/rules/media.py
"""Image and social-image checks."""

from __future__ import annotations

from typing import Any, Dict

from bs4 import Tag

from page_scout.parser.html_parser import attr_of
from page_scout.rules.base import FAIL, WARNING, AnalysisContext, Findings, Verdict
from page_scout.rules.registry import rule
from page_scout.rules.tables import MODERN_IMAGE_EXTS, MODERN_IMAGE_MIME, OUTDATED_IMAGE_EXTS
from page_scout.utils import js_round, leading_int, plural


def image_ext(src: str) -> str:
    """Расширение файла из src без query-строки ("a.WEBP?x" -> "webp")."""
    return src.split("?")[0].split(".")[-1].lower()


def _describe(el: Tag) -> Dict[str, Any]:
    src = attr_of(el, "src") or ""
    return {
        "src": src[:120],
        "alt": attr_of(el, "alt"),
        "loading": attr_of(el, "loading"),
        "ext": image_ext(src),
    }


@rule("imageOptimization")
def analyze_images(ctx: AnalysisContext) -> Verdict:
    images = [_describe(el) for el in ctx.doc.select("img")]
    f = Findings()
    total = len(images)
    if total == 0:
        f.issue("No images found on the page.")
        return f.verdict(total=0, missingAlt=0, missingAltImages=[])

    missing = [img["src"] for img in images if img["alt"] is None]
    empty_alt = sum(1 for img in images if img["alt"] is not None and not img["alt"].strip())
    outdated = sum(1 for img in images if img["ext"] in OUTDATED_IMAGE_EXTS)
    modern = sum(1 for img in images if img["ext"] in MODERN_IMAGE_EXTS)

    f.issue(f"Found {total} {plural(total, 'image')}.")
    if missing:
        verb = "image is" if len(missing) == 1 else "images are"
        f.flag(
            FAIL,
            f"{len(missing)} {verb} missing alt text entirely.",
            "Add descriptive alt text to every image for SEO and accessibility.",
        )
    if empty_alt:
        verb = "image has" if empty_alt == 1 else "images have"
        f.issue(f'{empty_alt} {verb} empty alt="" (decorative).')
    if not missing and not empty_alt:
        f.issue("All images have alt text.")
    if outdated:
        verb = "image uses" if outdated == 1 else "images use"
        f.flag(
            WARNING,
            f"{outdated} {verb} outdated format (BMP/TIFF).",
            "Convert images to modern formats like WebP or AVIF for better performance.",
        )
    if modern:
        verb = "image uses" if modern == 1 else "images use"
        f.issue(f"{modern} {verb} modern format (WebP/AVIF).")

    return f.verdict(
        total=total,
        missingAlt=len(missing),
        missingAltImages=missing,
        emptyAlt=empty_alt,
        outdatedFormats=outdated,
        modernFormats=modern,
    )


@rule("lazyLoading")
def analyze_lazy_loading(ctx: AnalysisContext) -> Verdict:
    images = ctx.doc.select("img")
    f = Findings()
    total = len(images)
    if total == 0:
        f.issue("No images found.")
        return f.verdict(total=0, lazyCount=0, nativeLazy=0)

    lazy = native = 0
    for el in images:
        if attr_of(el, "loading") == "lazy":
            native += 1
            lazy += 1
        if attr_of(el, "data-src") or attr_of(el, "data-lazy"):
            lazy += 1

    f.issue(f"{total} {plural(total, 'image')} found, {lazy} {'uses' if lazy == 1 else 'use'} lazy loading.")
    if total > 5 and lazy == 0:
        f.flag(
            WARNING,
            recommendation='Add loading="lazy" to below-the-fold images '
            "to improve page speed and Core Web Vitals.",
        )
    elif lazy > 0:
        f.issue(f'{native} {"uses" if native == 1 else "use"} native loading="lazy".')
    return f.verdict(total=total, lazyCount=lazy, nativeLazy=native)


def _is_modern(el: Tag) -> bool:
    if image_ext(attr_of(el, "src") or "") in MODERN_IMAGE_EXTS:
        return True
    srcset = (attr_of(el, "srcset") or "").lower()
    if ".webp" in srcset or ".avif" in srcset:
        return True
    picture = el.find_parent("picture")
    if picture is None:
        return False
    for source in picture.find_all("source"):
        if (attr_of(source, "type") or "").lower() in MODERN_IMAGE_MIME:
            return True
    return False


@rule("modernImageFormats")
def analyze_modern_image_formats(ctx: AnalysisContext) -> Verdict:
    images = ctx.doc.select("img")
    f = Findings()
    total = len(images)
    if total == 0:
        f.issue("No images found.")
        return f.verdict(total=0, modernCount=0, modernPercent=0)

    modern = sum(1 for el in images if _is_modern(el))
    percent = js_round(modern / total * 100)
    f.issue(f"{modern} of {total} {plural(total, 'image')} served as WebP/AVIF ({percent}%).")

    if modern == 0:
        f.flag(
            WARNING,
            "No images use modern formats (WebP/AVIF).",
            "Serve WebP or AVIF versions, for example via <picture> with "
            '<source type="image/webp">, to cut image weight.',
        )
    elif modern * 2 < total:
        f.flag(
            WARNING,
            "Less than half of the images use modern formats.",
            "Convert the remaining JPEG/PNG images to WebP or AVIF.",
        )
    return f.verdict(total=total, modernCount=modern, modernPercent=percent)


@rule("socialImageSize")
def analyze_social_image_size(ctx: AnalysisContext) -> Verdict:
    doc = ctx.doc
    og_image = (doc.attr('meta[property="og:image"]', "content") or "").strip()
    og_width = (doc.attr('meta[property="og:image:width"]', "content") or "").strip()
    og_height = (doc.attr('meta[property="og:image:height"]', "content") or "").strip()
    twitter_image = (
        doc.attr('meta[name="twitter:image"], meta[property="twitter:image"]', "content") or ""
    ).strip()

    f = Findings()
    if not og_image and not twitter_image:
        f.flag(
            WARNING,
            "No social sharing images found (og:image or twitter:image).",
            "Add og:image and twitter:image tags with properly sized images "
            "(1200x630 recommended).",
        )
        return f.verdict(ogImage=False, twitterImage=False)

    if og_image:
        f.issue(f"OG image: {og_image[:100]}")
        if og_width and og_height:
            f.issue(f"OG image dimensions declared: {og_width}x{og_height}.")
            width, height = leading_int(og_width), leading_int(og_height)
            too_small = (width is not None and width < 1200) or (height is not None and height < 630)
            if too_small:
                f.flag(
                    WARNING,
                    recommendation="OG image should be at least 1200x630 pixels "
                    "for optimal display on social platforms.",
                )
        else:
            f.recommend(
                "Add og:image:width and og:image:height tags so platforms can render images faster."
            )

    if twitter_image:
        f.issue(f"Twitter image: {twitter_image[:100]}")
    elif og_image:
        f.recommend("Add a dedicated twitter:image tag, or Twitter/X will fall back to og:image.")
    return f.verdict(ogImage=bool(og_image), twitterImage=bool(twitter_image))
