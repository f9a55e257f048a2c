# File: page_scout/rules/base.py
"""Verdict model and the per-request context every rule receives."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

from page_scout.crawler.models import AncillaryData, FetchResult
from page_scout.parser.html_parser import ParsedDocument
from page_scout.utils import TargetUrl

PASS = "pass"
WARNING = "warning"
FAIL = "fail"
SEVERITIES: Tuple[str, ...] = (PASS, WARNING, FAIL)
_RANK = {PASS: 0, WARNING: 1, FAIL: 2}

__all__ = [
    "PASS",
    "WARNING",
    "FAIL",
    "SEVERITIES",
    "Verdict",
    "Findings",
    "AnalysisContext",
    "worst",
]


def worst(current: str, new: str) -> str:
    """Более строгая из двух оценок (fail > warning > pass)."""
    return new if _RANK[new] > _RANK[current] else current


@dataclass(frozen=True)
class Verdict:
    severity: str
    issues: Tuple[str, ...]
    recommendations: Tuple[str, ...] = ()
    extra: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.severity in SEVERITIES and len(self.issues) > 0

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"severity": self.severity}
        out.update(self.extra)
        out["issues"] = list(self.issues)
        out["recommendations"] = list(self.recommendations)
        return out


class Findings:
    """Накопитель для одного правила: оценка только ужесточается."""

    __slots__ = ("severity", "issues", "recommendations")

    def __init__(self, severity: str = PASS) -> None:
        self.severity = severity
        self.issues: List[str] = []
        self.recommendations: List[str] = []

    def issue(self, text: str) -> None:
        self.issues.append(text)

    def recommend(self, text: str) -> None:
        self.recommendations.append(text)

    def escalate(self, severity: str) -> None:
        self.severity = worst(self.severity, severity)

    def flag(self, severity: str, issue: str | None = None, recommendation: str | None = None) -> None:
        self.escalate(severity)
        if issue:
            self.issues.append(issue)
        if recommendation:
            self.recommendations.append(recommendation)

    def verdict(self, **extra: Any) -> Verdict:
        return Verdict(
            severity=self.severity,
            issues=tuple(self.issues),
            recommendations=tuple(self.recommendations),
            extra=extra,
        )


@dataclass(frozen=True)
class AnalysisContext:
    """Всё, что правило может читать: дерево, адрес, ответ и вспомогательные данные."""

    doc: ParsedDocument
    target: TargetUrl
    page: FetchResult
    ancillary: AncillaryData = field(default_factory=AncillaryData)

    @property
    def html(self) -> str:
        return self.doc.raw

    @property
    def headers(self) -> Mapping[str, str]:
        return self.page.headers

    @property
    def load_time_ms(self) -> int:
        return self.page.elapsed_ms

    @property
    def content_length(self) -> int:
        return self.page.byte_length
