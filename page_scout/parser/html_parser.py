# === FILE: page_scout/parser/html_parser.py ===
"""HTML parsing utilities for PageScout.

:func:`parse_html` wraps BeautifulSoup (lxml tree builder, soupsieve CSS
selectors) into a :class:`ParsedDocument` that every rule queries.

The wrapper exists so rules never touch BeautifulSoup specifics:

* ``select`` / ``select_one`` / ``count``: CSS selector queries in
  document order.
* ``text``: concatenated text of *all* matches.
* ``attr``: attribute of the *first* match, ``None`` when absent.
* ``body_text``: visible body text computed on a copy of ``<body>``, so
  stripping scripts never mutates the shared tree.

All attribute values are plain strings (multi-valued attribute splitting is
disabled), which keeps ``[rel="stylesheet"]`` style selectors exact.
"""
from __future__ import annotations

import copy
from collections.abc import Sequence

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from page_scout.logger import logger

__all__: Sequence[str] = ("ParsedDocument", "parse_html", "attr_of")

_INVISIBLE = ("script", "style", "noscript")


def attr_of(el: Tag, name: str) -> str | None:
    """Attribute value as a string, ``None`` when missing."""
    value = el.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


class ParsedDocument:
    """Selector-queryable view over one HTML document."""

    __slots__ = ("raw", "soup")

    def __init__(self, raw: str, soup: BeautifulSoup) -> None:
        self.raw = raw
        self.soup = soup

    # Queries ---------------------------------------------------------------
    def select(self, selector: str) -> list[Tag]:
        return list(self.soup.select(selector))

    def select_one(self, selector: str) -> Tag | None:
        return self.soup.select_one(selector)

    def count(self, selector: str) -> int:
        return len(self.soup.select(selector))

    def text(self, selector: str) -> str:
        return "".join(el.get_text() for el in self.soup.select(selector))

    def attr(self, selector: str, name: str) -> str | None:
        el = self.soup.select_one(selector)
        return attr_of(el, name) if el is not None else None

    # Derived views ---------------------------------------------------------
    def body_text(self, strip: Sequence[str] = _INVISIBLE) -> str:
        """Text of ``<body>`` without *strip* elements; empty when no body."""
        body = self.soup.body
        if body is None:
            return ""
        clone = copy.copy(body)
        for el in clone.find_all(list(strip)):
            el.decompose()
        return clone.get_text()

    def json_ld_blocks(self) -> list[str]:
        return [
            el.get_text()
            for el in self.soup.select('script[type="application/ld+json"]')
        ]


def parse_html(html: str) -> ParsedDocument:
    """Parse *html* into a :class:`ParsedDocument`.

    lxml is tried first; markup it rejects is re-parsed with the stdlib
    ``html.parser`` builder so even binary garbage yields a document.
    """
    markup = html or ""
    # NUL never reaches the tree in browsers either
    cleaned = markup.replace("\x00", "")
    try:
        soup = BeautifulSoup(cleaned, "lxml", multi_valued_attributes=None)
    except ParserRejectedMarkup as exc:
        logger.warning("lxml rejected markup (%s); falling back to html.parser", exc)
        soup = BeautifulSoup(cleaned, "html.parser", multi_valued_attributes=None)
    return ParsedDocument(markup, soup)
