# File: page_scout/rules/tables.py
"""Static lookup tables shared by rules. Everything here is immutable."""

from __future__ import annotations

from types import MappingProxyType
from typing import NamedTuple

STOP_WORDS = frozenset(
    """
    a an the and or but in on at to for of with by
    is it its this that was are be has had have do does
    did will would could should may might can not no so
    if from as all been were we they he she you i me
    my your our their his her us am about more up out
    also just than then into over what when which who how
    each other some them these those own such only very
    same any both after before between through during here
    there where why new now way because make like back
    get go see come know take being de en la el les
    des le du un une et est que qui dans pour par sur
    pas plus ce se son au avec ne je il nous vous ils
    """.split()
)

ACTION_WORDS = (
    "discover", "learn", "find", "get", "try", "explore",
    "start", "buy", "shop", "read", "see", "check",
)

OG_REQUIRED = ("og:title", "og:description", "og:image", "og:url", "og:type")
TWITTER_EXPECTED = ("twitter:card", "twitter:title", "twitter:description", "twitter:image")

OUTDATED_IMAGE_EXTS = frozenset({"bmp", "tiff", "tif"})
MODERN_IMAGE_EXTS = frozenset({"webp", "avif"})
MODERN_IMAGE_MIME = frozenset({"image/webp", "image/avif"})

# HTML elements removed from the living standard
DEPRECATED_TAGS = (
    "acronym", "applet", "basefont", "bgsound", "big", "blink", "center",
    "dir", "font", "frame", "frameset", "isindex", "keygen", "listing",
    "marquee", "menuitem", "multicol", "nextid", "nobr", "noembed",
    "noframes", "plaintext", "spacer", "strike", "tt", "xmp",
)

# Substring -> provider; first hit wins, so specific hosts precede generic ones.
CDN_DOMAINS: tuple[tuple[str, str], ...] = (
    ("cdnjs.cloudflare.com", "Cloudflare cdnjs"),
    ("cloudflare", "Cloudflare"),
    ("cloudfront.net", "Amazon CloudFront"),
    ("akamaihd.net", "Akamai"),
    ("akamaized.net", "Akamai"),
    ("akamai", "Akamai"),
    ("fastly.net", "Fastly"),
    ("fastly", "Fastly"),
    ("cdn.jsdelivr.net", "jsDelivr"),
    ("jsdelivr", "jsDelivr"),
    ("unpkg.com", "unpkg"),
    ("googleapis.com", "Google Hosted Libraries"),
    ("gstatic.com", "Google Static"),
    ("bootstrapcdn.com", "BootstrapCDN"),
    ("stackpath", "StackPath"),
    ("b-cdn.net", "Bunny CDN"),
    ("azureedge.net", "Azure CDN"),
    ("edgecastcdn.net", "Edgecast"),
    ("kxcdn.com", "KeyCDN"),
    ("imgix.net", "imgix"),
    ("cloudinary.com", "Cloudinary"),
    ("shopify.com/cdn", "Shopify CDN"),
    ("cdn.shopify.com", "Shopify CDN"),
    ("wp.com", "WordPress.com CDN"),
    ("vercel-insights", "Vercel"),
    ("netlify", "Netlify"),
)

# Response header -> provider (header presence is enough)
CDN_HEADERS: tuple[tuple[str, str], ...] = (
    ("cf-ray", "Cloudflare"),
    ("x-amz-cf-id", "Amazon CloudFront"),
    ("x-fastly-request-id", "Fastly"),
    ("x-akamai-transformed", "Akamai"),
    ("x-cdn", "CDN"),
    ("x-vercel-id", "Vercel"),
    ("x-nf-request-id", "Netlify"),
    ("x-azure-ref", "Azure CDN"),
    ("x-served-by", "Fastly"),
)

COMPRESSION_ENCODINGS = ("br", "gzip", "deflate", "zstd")


class AiBot(NamedTuple):
    name: str
    label: str


AI_BOTS: tuple[AiBot, ...] = (
    AiBot("GPTBot", "ChatGPT/OpenAI"),
    AiBot("ChatGPT-User", "ChatGPT Browse"),
    AiBot("Google-Extended", "Google AI (Bard/Gemini)"),
    AiBot("Amazonbot", "Amazon Alexa"),
    AiBot("anthropic-ai", "Anthropic Claude"),
    AiBot("ClaudeBot", "ClaudeBot"),
    AiBot("PerplexityBot", "Perplexity"),
    AiBot("Bytespider", "ByteDance"),
    AiBot("CCBot", "Common Crawl"),
)

LOCAL_SCHEMA_TYPES = (
    "LocalBusiness", "Restaurant", "Store", "Hotel", "MedicalBusiness",
    "LegalService", "FinancialService", "RealEstateAgent", "Dentist", "Physician",
    "AutoDealer", "BarOrPub", "CafeOrCoffeeShop", "Bakery",
)

LOCAL_KEYWORDS = (
    "near me", "local", "directions", "visit us", "our location",
    "hours of operation", "open today", "get directions", "contact us",
)

LIGHTHOUSE_METRICS = MappingProxyType(
    {
        "first-contentful-paint": ("First Contentful Paint (FCP)", "fcp"),
        "largest-contentful-paint": ("Largest Contentful Paint (LCP)", "lcp"),
        "total-blocking-time": ("Total Blocking Time (TBT)", "tbt"),
        "cumulative-layout-shift": ("Cumulative Layout Shift (CLS)", "cls"),
        "speed-index": ("Speed Index", "si"),
        "interactive": ("Time to Interactive (TTI)", "tti"),
    }
)

LIGHTHOUSE_OPPORTUNITIES = (
    "render-blocking-resources",
    "uses-optimized-images",
    "uses-responsive-images",
    "unminified-css",
    "unminified-javascript",
    "unused-css-rules",
    "unused-javascript",
    "uses-text-compression",
    "uses-rel-preconnect",
    "efficient-animated-content",
    "offscreen-images",
)

PERF_ERROR_MESSAGES = MappingProxyType(
    {
        "rate_limited": "Google PageSpeed API rate limit reached. Please wait a moment and try again.",
        "timeout": (
            "Google PageSpeed API request timed out. "
            "The target page may be too slow or the API is overloaded."
        ),
        "api_not_enabled": (
            "PageSpeed Insights API is not enabled. Please enable it in Google Cloud Console."
        ),
        "disabled": "PageSpeed Insights lookup is disabled in the analyzer configuration.",
    }
)
PERF_ERROR_DEFAULT = (
    "Could not retrieve Google PageSpeed Insights data. "
    "The API may be temporarily unavailable."
)
