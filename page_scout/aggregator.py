# File: page_scout/aggregator.py
"""page_scout.aggregator: Сборка вердиктов всех правил в единый отчёт."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from page_scout.rules.base import FAIL, PASS, SEVERITIES, WARNING, Verdict
from page_scout.rules.registry import CHECK_NAMES
from page_scout.utils import js_round

SEVERITY_POINTS: Mapping[str, int] = {PASS: 100, WARNING: 50, FAIL: 0}


def overall_score(results: Mapping[str, Verdict]) -> int:
    """Средний балл по правилам (pass=100, warning=50, fail=0), округление половин вверх."""
    if not results:
        return 0
    total = sum(SEVERITY_POINTS.get(v.severity, 0) for v in results.values())
    return js_round(total / len(results))


def severity_counts(results: Mapping[str, Verdict]) -> Dict[str, int]:
    counts = {severity: 0 for severity in SEVERITIES}
    for verdict in results.values():
        counts[verdict.severity] = counts.get(verdict.severity, 0) + 1
    return counts


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(slots=True)
class AnalysisReport:
    """Отчёт по одной странице: метаданные запроса и вердикты в порядке CHECK_NAMES."""

    url: str
    load_time_ms: int
    content_length: int
    results: Dict[str, Verdict] = field(default_factory=dict)
    analyzed_at: str = field(default_factory=_iso_now)

    @property
    def overall_score(self) -> int:
        return overall_score(self.results)

    @property
    def counts(self) -> Dict[str, int]:
        return severity_counts(self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "analyzedAt": self.analyzed_at,
            "loadTimeMs": self.load_time_ms,
            "contentLength": self.content_length,
            "overallScore": self.overall_score,
            "counts": self.counts,
            "results": {name: verdict.to_dict() for name, verdict in self.results.items()},
        }

    def json(self, *, pretty: bool = False) -> str:
        """JSON-представление отчёта."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def aggregate_results(
    url: str,
    results: Mapping[str, Verdict],
    *,
    load_time_ms: int,
    content_length: int,
) -> AnalysisReport:
    """Собирает AnalysisReport; ключи упорядочиваются по CHECK_NAMES.

    Raises:
        ValueError: если не хватает хотя бы одного правила.
    """
    missing = [name for name in CHECK_NAMES if name not in results]
    if missing:
        raise ValueError(f"Missing verdicts for: {', '.join(missing)}")
    ordered = {name: results[name] for name in CHECK_NAMES}
    return AnalysisReport(
        url=url,
        load_time_ms=load_time_ms,
        content_length=content_length,
        results=ordered,
    )


__all__ = ["AnalysisReport", "aggregate_results", "overall_score", "severity_counts"]
