# File: page_scout/rules/__init__.py
"""page_scout.rules: Все правила анализа; импорт модулей регистрирует их в реестре."""

from page_scout.rules import (  # noqa: F401
    ai,
    content,
    crawl,
    links,
    media,
    meta,
    performance,
    schema,
    social,
    technical,
)
from page_scout.rules.base import FAIL, PASS, WARNING, AnalysisContext, Verdict
from page_scout.rules.registry import CHECK_NAMES, run_rules

__all__ = ["PASS", "WARNING", "FAIL", "AnalysisContext", "Verdict", "CHECK_NAMES", "run_rules"]
