# File: page_scout/utils.py
"""page_scout.utils: Утилиты для нормализации URL и мелких вычислений, общих для правил."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Sequence
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from page_scout.errors import InvalidUrlError
from page_scout.logger import logger

__all__: Sequence[str] = (
    "TargetUrl",
    "normalize_input_url",
    "parse_url",
    "resolve_url",
    "toggle_www",
    "is_same_site",
    "js_round",
    "leading_int",
    "display_length",
    "plural",
)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_BAD_HOST_CHARS = frozenset(" \t\r\n<>\\^`{|}\"%")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
# символы, которые браузер оставляет как есть в пути, запросе и фрагменте
_PATH_SAFE = "/%:@!$&'()*+,;=[]\\^|~"
_QUERY_SAFE = _PATH_SAFE.replace("'", "") + "?`{}"
_FRAGMENT_SAFE = _PATH_SAFE + "?#{}"


@dataclass(slots=True, frozen=True)
class TargetUrl:
    """Разобранный адрес страницы (аналог WHATWG URL для нужд правил)."""

    raw: str
    scheme: str
    hostname: str
    port: int | None
    path: str
    query: str
    fragment: str = ""

    @property
    def netloc(self) -> str:
        return f"{self.hostname}:{self.port}" if self.port is not None else self.hostname

    @property
    def origin(self) -> str:
        return f"{self.scheme}://{self.netloc}"

    @property
    def search(self) -> str:
        return f"?{self.query}" if self.query else ""

    @property
    def href(self) -> str:
        return urlunsplit((self.scheme, self.netloc, self.path, self.query, ""))

    @property
    def href_with_fragment(self) -> str:
        return f"{self.href}#{self.fragment}" if self.fragment else self.href

    def with_scheme(self, scheme: str) -> "TargetUrl":
        port = self.port
        if (self.scheme, port) in (("https", 443), ("http", 80)):
            port = None
        return TargetUrl(
            raw=self.raw,
            scheme=scheme,
            hostname=self.hostname,
            port=port,
            path=self.path,
            query=self.query,
            fragment=self.fragment,
        )


def parse_url(url: str) -> TargetUrl | None:
    """Разбирает абсолютный http(s)-адрес; None, если адрес невалиден."""
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None
    scheme = parts.scheme.lower()
    hostname = (parts.hostname or "").lower()
    if scheme not in ("http", "https") or not hostname:
        return None
    if any(ch in _BAD_HOST_CHARS for ch in hostname) or hostname.startswith("."):
        return None
    if (scheme, port) in (("https", 443), ("http", 80)):
        port = None
    return TargetUrl(
        raw=url,
        scheme=scheme,
        hostname=hostname,
        port=port,
        path=quote(parts.path or "/", safe=_PATH_SAFE),
        query=quote(parts.query, safe=_QUERY_SAFE),
        fragment=quote(parts.fragment, safe=_FRAGMENT_SAFE),
    )


def normalize_input_url(raw: str | None) -> TargetUrl:
    """Обрезает пробелы, добавляет https:// при отсутствии схемы и проверяет адрес.

    Raises:
        InvalidUrlError: пустой ввод ("URL is required") или адрес без хоста.
    """
    if raw is None or not str(raw).strip():
        raise InvalidUrlError("URL is required")
    candidate = str(raw).strip()
    if not _SCHEME_RE.match(candidate):
        candidate = "https://" + candidate
    target = parse_url(candidate)
    if target is None:
        raise InvalidUrlError("Invalid URL format")
    logger.debug("Normalized input %r -> %s", raw, target.href)
    return target


def resolve_url(href: str, base: str) -> TargetUrl | None:
    """Разрешает href относительно base и разбирает результат (только http/https)."""
    try:
        joined = urljoin(base, href.strip())
    except ValueError:
        return None
    return parse_url(joined)


def toggle_www(hostname: str) -> str:
    """example.com <-> www.example.com"""
    if hostname.startswith("www."):
        return hostname[4:]
    return "www." + hostname


def is_same_site(hostname: str, base_hostname: str) -> bool:
    """Тот же хост или его поддомен."""
    return hostname == base_hostname or hostname.endswith("." + base_hostname)


def js_round(value: float) -> int:
    """Округление половин вверх, как Math.round."""
    return int(math.floor(value + 0.5))


def display_length(text: str) -> int:
    """Длина в единицах UTF-16: эмодзи и другие астральные символы считаются за два."""
    return len(text.encode("utf-16-le")) // 2


def leading_int(value: str | None) -> int | None:
    """Целое из начала строки ("1200px" -> 1200), иначе None."""
    if not value:
        return None
    match = _LEADING_INT_RE.match(value)
    return int(match.group(1)) if match else None


def plural(count: int, singular: str, many: str | None = None) -> str:
    return singular if count == 1 else (many if many is not None else singular + "s")
