# File: page_scout/rules/signals.py
"""Signal-count tiering shared by the AEO, GEO, pSEO, AI-visibility and local-SEO rules.

A rule lists boolean detectors; the severity depends only on how many of
them fired, looked up in an ascending table of count ceilings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from page_scout.rules.base import PASS, Findings

__all__ = ["Signal", "SignalTiers", "SignalOutcome", "evaluate_signals"]


@dataclass(frozen=True)
class Signal:
    name: str
    fired: bool
    issue: str
    recommendation: Optional[str] = None


@dataclass(frozen=True)
class SignalTiers:
    """``ceilings`` is ((max_count_inclusive, severity), ...) ascending; ``above`` covers the rest."""

    ceilings: Tuple[Tuple[int, str], ...]
    above: str

    def severity_for(self, count: int) -> str:
        for ceiling, severity in self.ceilings:
            if count <= ceiling:
                return severity
        return self.above


@dataclass(frozen=True)
class SignalOutcome:
    fired: Tuple[str, ...]
    missing: Tuple[Signal, ...]
    severity: str

    @property
    def count(self) -> int:
        return len(self.fired)


def evaluate_signals(
    signals: Iterable[Signal],
    tiers: SignalTiers,
    findings: Findings,
    *,
    recommend_on_pass: bool = False,
) -> SignalOutcome:
    """Feed fired issues / missing recommendations into *findings* and tier the count.

    Recommendations for missing signals are added only when the tier is
    below pass, unless *recommend_on_pass* is set.
    """
    fired: List[str] = []
    missing: List[Signal] = []
    for signal in signals:
        if signal.fired:
            fired.append(signal.name)
            findings.issue(signal.issue)
        else:
            missing.append(signal)

    severity = tiers.severity_for(len(fired))
    findings.escalate(severity)
    if severity != PASS or recommend_on_pass:
        for signal in missing:
            if signal.recommendation:
                findings.recommend(signal.recommendation)
    return SignalOutcome(fired=tuple(fired), missing=tuple(missing), severity=severity)
