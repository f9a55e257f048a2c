# File: page_scout/parser/robots_parser.py
"""page_scout.parser.robots_parser: Разбор robots.txt для правил robotsTxt, sitemapDetection и aiSearchVisibility."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Sequence, Tuple

if TYPE_CHECKING:
    from page_scout.rules.tables import AiBot

__all__ = [
    "AiBotScan",
    "has_disallow_all",
    "has_sitemap_directive",
    "mentions_sitemap",
    "sitemap_urls",
    "scan_ai_bots",
]

_SITEMAP_DIRECTIVE_RE = re.compile(r"sitemap:", re.IGNORECASE)
_SITEMAP_LINE_RE = re.compile(r"^sitemap:\s*(.+)", re.IGNORECASE)
_AGENT_LINE_RE = re.compile(r"^user-agent:\s*(.+)")
_DISALLOW_ROOT_RE = re.compile(r"^disallow:\s*/\s*$")


@dataclass(frozen=True)
class AiBotScan:
    """Результат сканирования: заблокированные и явно упомянутые AI-боты.

    ``blocked`` может содержать одного бота дважды: построчный проход и
    регулярный проход считаются независимо.
    """

    blocked: Tuple[AiBot, ...] = ()
    mentioned: Tuple[AiBot, ...] = ()


def _lines(text: str) -> List[str]:
    return text.split("\n")


def has_disallow_all(text: str) -> bool:
    """Есть ли строка ровно ``Disallow: /`` (без учёта регистра и пробелов по краям)."""
    return any(line.strip().lower() == "disallow: /" for line in _lines(text))


def has_sitemap_directive(text: str) -> bool:
    """Есть ли строка, начинающаяся с ``Sitemap:``."""
    return any(line.strip().lower().startswith("sitemap:") for line in _lines(text))


def mentions_sitemap(text: str) -> bool:
    return bool(_SITEMAP_DIRECTIVE_RE.search(text))


def sitemap_urls(text: str) -> List[str]:
    """Адреса из строк ``Sitemap: ...`` в порядке появления."""
    urls: List[str] = []
    for line in _lines(text):
        match = _SITEMAP_LINE_RE.match(line)
        if match:
            url = match.group(1).strip()
            if url:
                urls.append(url)
    return urls


def _scan_agent_blocks(text: str, bots: Sequence[AiBot]) -> List[AiBot]:
    # `*` никогда не засчитывается конкретному боту
    blocked: List[AiBot] = []
    current_agent = ""
    for line in _lines(text.lower()):
        agent = _AGENT_LINE_RE.match(line)
        if agent:
            current_agent = agent.group(1).strip()
        if _DISALLOW_ROOT_RE.match(line):
            for bot in bots:
                if current_agent == bot.name.lower():
                    blocked.append(bot)
    return blocked


def scan_ai_bots(text: str | None, bots: Sequence[AiBot]) -> AiBotScan:
    """Двухпроходное сканирование robots.txt по списку AI-ботов *bots*.

    Первый проход идёт по строкам и отслеживает текущий User-agent.
    Второй проход ищет каждого бота регулярным выражением: упомянутый бот
    с ``Disallow: /`` где-то ниже добавляется в заблокированные, если
    первый проход его не нашёл; упомянутый без такого правила считается
    явно разрешённым.
    """
    if not text:
        return AiBotScan()

    blocked = _scan_agent_blocks(text, bots)
    mentioned: List[AiBot] = []
    for bot in bots:
        name = re.escape(bot.name)
        if not re.search(rf"user-agent:\s*{name}", text, re.IGNORECASE):
            continue
        block_re = re.compile(rf"user-agent:\s*{name}[\s\S]*?disallow:\s*/", re.IGNORECASE | re.MULTILINE)
        if block_re.search(text):
            if bot not in blocked:
                blocked.append(bot)
        else:
            mentioned.append(bot)
    return AiBotScan(blocked=tuple(blocked), mentioned=tuple(mentioned))
