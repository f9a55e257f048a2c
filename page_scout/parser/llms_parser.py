# File: page_scout/parser/llms_parser.py
"""page_scout.parser.llms_parser: Однопроходный парсер llms.txt (markdown-диалект).

Формат::

    # Title
    > Short description
    ## Section
    - [Link title](https://example.com/page): optional description
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

__all__ = ["LlmsLink", "LlmsSection", "LlmsDoc", "parse_llms_txt"]

_TITLE_RE = re.compile(r"^#\s+")
_SUBHEAD_RE = re.compile(r"^##")
_SECTION_RE = re.compile(r"^##\s+")
_DESC_RE = re.compile(r"^>\s*")
_LINK_RE = re.compile(r"^-\s*\[([^\]]+)\]\(([^)]+)\)(?::\s*(.*))?$")


@dataclass(frozen=True)
class LlmsLink:
    title: str
    url: str
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "url": self.url, "description": self.description}


@dataclass(frozen=True)
class LlmsSection:
    title: str
    links: Tuple[LlmsLink, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "links": [link.to_dict() for link in self.links]}


@dataclass(frozen=True)
class LlmsDoc:
    """Результат разбора: заголовок, описание, секции и общее число ссылок."""

    title: Optional[str] = None
    description: Optional[str] = None
    sections: Tuple[LlmsSection, ...] = field(default_factory=tuple)
    link_count: int = 0

    @property
    def section_count(self) -> int:
        return len(self.sections)

    @property
    def is_complete(self) -> bool:
        return bool(self.title and self.description and self.sections and self.link_count)


def parse_llms_txt(content: Optional[str]) -> LlmsDoc:
    """Разбирает текст llms.txt.

    Заголовок и описание берутся только первые; ссылка увеличивает общий
    счётчик всегда, а в секцию попадает лишь если секция уже открыта.
    """
    if not content:
        return LlmsDoc()

    title: Optional[str] = None
    description: Optional[str] = None
    sections: List[Tuple[str, List[LlmsLink]]] = []
    current: Optional[List[LlmsLink]] = None
    link_count = 0

    for line in content.split("\n"):
        trimmed = line.strip()

        if not title and _TITLE_RE.match(trimmed) and not _SUBHEAD_RE.match(trimmed):
            title = _TITLE_RE.sub("", trimmed, count=1).strip()
            continue

        if not description and _DESC_RE.match(trimmed):
            description = _DESC_RE.sub("", trimmed, count=1).strip()
            continue

        if _SECTION_RE.match(trimmed):
            current = []
            sections.append((_SECTION_RE.sub("", trimmed, count=1).strip(), current))
            continue

        match = _LINK_RE.match(trimmed)
        if match:
            link_count += 1
            if current is not None:
                current.append(
                    LlmsLink(title=match.group(1), url=match.group(2), description=match.group(3) or None)
                )

    return LlmsDoc(
        title=title,
        description=description,
        sections=tuple(LlmsSection(name, tuple(links)) for name, links in sections),
        link_count=link_count,
    )
