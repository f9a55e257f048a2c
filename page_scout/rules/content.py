# File: page_scout/rules/content.py
"""Heading structure, body content, accessibility and obsolete markup checks."""

from __future__ import annotations

import re
from collections import Counter
from typing import Dict, List, Sequence

from page_scout.rules.base import FAIL, WARNING, AnalysisContext, Findings, Verdict
from page_scout.rules.registry import rule
from page_scout.rules.tables import DEPRECATED_TAGS, STOP_WORDS
from page_scout.utils import display_length, js_round, plural

_WS_RE = re.compile(r"\s+")
_SENTENCE_RE = re.compile(r"[.!?]+")
_TOKEN_JUNK_RE = re.compile(r"[^a-z0-9\u00C0-\u024F'-]")

KEYWORD_LIMIT = 20
NGRAM_LIMITS = {2: 15, 3: 15, 4: 10}
DEPRECATED_FAIL_AT = 10


@rule("h1")
def analyze_h1(ctx: AnalysisContext) -> Verdict:
    texts = [el.get_text().strip() for el in ctx.doc.select("h1")]
    count = len(texts)
    f = Findings()

    if count == 0:
        f.flag(
            FAIL,
            "No H1 tag found on the page.",
            "Add exactly one H1 tag containing your primary keyword. "
            "The H1 is essential for content hierarchy.",
        )
    elif count == 1:
        f.issue("Page has exactly one H1 tag. This is correct.")
        if display_length(texts[0]) < 10:
            f.flag(
                WARNING,
                recommendation="Your H1 is quite short. "
                "Consider making it more descriptive with your target keyword.",
            )
        if display_length(texts[0]) > 70:
            f.flag(
                WARNING,
                recommendation="Your H1 is quite long. "
                "Keep it concise and focused on your primary keyword.",
            )
    else:
        f.flag(
            WARNING,
            f"Found {count} H1 tags. Best practice is to have exactly one H1 per page.",
            "Consolidate to a single H1 tag. Use H2-H6 for subheadings instead.",
        )
    return f.verdict(count=count, h1Texts=texts)


@rule("headingHierarchy")
def analyze_heading_hierarchy(ctx: AnalysisContext) -> Verdict:
    headings = []
    for el in ctx.doc.select("h1, h2, h3, h4, h5, h6"):
        tag = el.name.lower()
        headings.append({"tag": tag, "level": int(tag[1]), "text": el.get_text().strip()[:100]})

    if not headings:
        f = Findings(FAIL)
        f.issue("No heading tags found on the page.")
        f.recommend(
            "Add a proper heading structure starting with an H1, "
            "followed by H2s for sections, and H3s for subsections."
        )
        return f.verdict(headings=[], structure={})

    f = Findings()
    first = headings[0]
    if first["level"] != 1:
        f.flag(
            WARNING,
            f"First heading is an <{first['tag']}> instead of <h1>. The page should start with an H1.",
        )

    skipped = False
    for prev, curr in zip(headings, headings[1:]):
        if curr["level"] > prev["level"] + 1:
            skipped = True
            f.issue(f"Heading level skipped: <{prev['tag']}> followed by <{curr['tag']}>.")
    if skipped:
        f.flag(
            WARNING,
            recommendation="Maintain a logical heading hierarchy without skipping levels "
            "(e.g., H1 -> H2 -> H3, not H1 -> H3).",
        )

    structure = dict(Counter(h["tag"] for h in headings))
    if not f.issues:
        f.issue("Heading hierarchy is properly structured.")
    return f.verdict(headings=headings, structure=structure)


def tokenize(text: str) -> List[str]:
    """Слова видимого текста: пробелы схлопываются, разбиение по пробелам."""
    collapsed = _WS_RE.sub(" ", text).strip()
    return collapsed.split(" ") if collapsed else []


def extract_ngrams(words: Sequence[str], n: int, limit: int) -> List[Dict[str, object]]:
    """n-граммы, встретившиеся не менее двух раз, по убыванию частоты."""
    counts: Counter[str] = Counter(
        " ".join(words[i : i + n]) for i in range(len(words) - n + 1)
    )
    frequent = [(gram, count) for gram, count in counts.items() if count >= 2]
    frequent.sort(key=lambda item: item[1], reverse=True)
    return [{"phrase": gram, "count": count} for gram, count in frequent[:limit]]


@rule("contentAnalysis")
def analyze_content(ctx: AnalysisContext) -> Verdict:
    text = _WS_RE.sub(" ", ctx.doc.body_text()).strip()
    words = tokenize(text)
    word_count = len(words)
    f = Findings()

    f.issue(f"Word count: {word_count}.")
    if word_count < 300:
        f.flag(
            WARNING,
            "Content is thin (under 300 words).",
            "Aim for at least 300+ words of quality content for better rankings.",
        )
    elif word_count < 600:
        f.issue("Content length is acceptable but could be more comprehensive.")
    else:
        f.issue("Content length is good for SEO.")

    sentences = [s for s in _SENTENCE_RE.split(text) if len(s.strip()) > 10]
    if sentences:
        avg = js_round(word_count / len(sentences))
        f.issue(f"Average sentence length: {avg} words.")
        if avg > 25:
            f.recommend(
                "Sentences are quite long on average. Shorter sentences improve readability."
            )

    paragraphs = ctx.doc.count("p")
    f.issue(f"{paragraphs} {plural(paragraphs, 'paragraph')} found.")

    context_words = [
        cleaned for cleaned in (_TOKEN_JUNK_RE.sub("", w.lower()) for w in words) if len(cleaned) > 1
    ]
    keyword_counts = Counter(w for w in context_words if w not in STOP_WORDS)
    keywords = [(w, c) for w, c in keyword_counts.items() if c >= 2]
    keywords.sort(key=lambda item: item[1], reverse=True)

    return f.verdict(
        wordCount=word_count,
        paragraphs=paragraphs,
        keywords=[{"word": w, "count": c} for w, c in keywords[:KEYWORD_LIMIT]],
        twoWordPhrases=extract_ngrams(context_words, 2, NGRAM_LIMITS[2]),
        threeWordPhrases=extract_ngrams(context_words, 3, NGRAM_LIMITS[3]),
        fourWordPhrases=extract_ngrams(context_words, 4, NGRAM_LIMITS[4]),
    )


@rule("accessibility")
def analyze_accessibility(ctx: AnalysisContext) -> Verdict:
    doc = ctx.doc
    f = Findings()

    lang = doc.attr("html", "lang")
    if not lang:
        f.flag(
            WARNING,
            "No lang attribute on <html> element.",
            'Add a lang attribute (e.g., <html lang="en">) for screen readers and SEO.',
        )
    else:
        f.issue(f'Page language: "{lang}".')

    no_alt = doc.count("img:not([alt])")
    if no_alt:
        f.flag(
            FAIL,
            f"{no_alt} {plural(no_alt, 'image')} missing alt attribute.",
            "Add alt attributes to all images for screen readers.",
        )
    else:
        f.issue("All images have alt attributes.")

    roles = doc.count("[role]")
    labels = doc.count("[aria-label], [aria-labelledby]")
    f.issue(f"ARIA: {roles} {plural(roles, 'role')}, {labels} {plural(labels, 'label')} found.")

    inputs = doc.count("input:not([type='hidden']):not([type='submit']):not([type='button'])")
    if inputs and doc.count("label") == 0:
        f.flag(
            WARNING,
            f"{inputs} form {plural(inputs, 'input')} found but no <label> elements.",
            "Associate labels with form inputs for accessibility.",
        )

    skip_links = doc.count('a[href="#main"], a[href="#content"], a.skip-link, a.skip-to-content')
    if not skip_links:
        f.recommend("Consider adding a skip navigation link for keyboard users.")
    return f.verdict(lang=lang, imagesWithoutAlt=no_alt, ariaRoles=roles, ariaLabels=labels)


@rule("deprecatedHtmlTags")
def analyze_deprecated_tags(ctx: AnalysisContext) -> Verdict:
    found: Dict[str, int] = {}
    for tag in DEPRECATED_TAGS:
        count = len(ctx.doc.soup.find_all(tag))
        if count:
            found[tag] = count
    total = sum(found.values())
    f = Findings()

    if not found:
        f.issue("No deprecated HTML tags found.")
        return f.verdict(tags={}, total=0)

    listed = ", ".join(f"<{tag}> x{count}" for tag, count in found.items())
    f.flag(
        FAIL if total >= DEPRECATED_FAIL_AT else WARNING,
        f"Deprecated HTML {plural(len(found), 'tag')} found: {listed}.",
        "Replace obsolete elements with semantic HTML and CSS "
        "(e.g., <font>/<center> with CSS, <strike> with <s> or <del>).",
    )
    if total >= DEPRECATED_FAIL_AT:
        f.issue(f"{total} deprecated elements in total; browsers may render them inconsistently.")
    return f.verdict(tags=found, total=total)
