# File: page_scout/rules/registry.py
"""Реестр правил и их запуск.

Порядок ключей в отчёте фиксирован ``CHECK_NAMES``. Каждое правило
вызывается через обёртку: исключение или некорректный вердикт превращается
в ``fail`` с пояснением, остальные правила продолжают работу.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Mapping

from page_scout.logger import logger
from page_scout.rules.base import FAIL, AnalysisContext, Verdict

RuleFn = Callable[[AnalysisContext], Verdict]

CHECK_NAMES: tuple[str, ...] = (
    "title",
    "metaDescription",
    "h1",
    "headingHierarchy",
    "metaRobots",
    "sslHttps",
    "httpsRedirect",
    "canonicalUrl",
    "mobileResponsiveness",
    "pageSpeed",
    "imageOptimization",
    "internalLinks",
    "externalLinks",
    "schemaMarkup",
    "openGraph",
    "twitterCards",
    "socialImageSize",
    "socialMediaMetaTags",
    "contentAnalysis",
    "urlStructure",
    "keywordsInUrl",
    "robotsTxt",
    "sitemapDetection",
    "llmsTxt",
    "accessibility",
    "hreflang",
    "favicon",
    "lazyLoading",
    "doctype",
    "characterEncoding",
    "deprecatedHtmlTags",
    "googleAnalytics",
    "jsErrors",
    "consoleErrors",
    "htmlCompression",
    "htmlPageSize",
    "cdnUsage",
    "modernImageFormats",
    "googlePageSpeed",
    "jsExecutionTime",
    "aeo",
    "geo",
    "programmaticSeo",
    "aiSearchVisibility",
    "localSeo",
)

_KNOWN = frozenset(CHECK_NAMES)
_REGISTRY: Dict[str, RuleFn] = {}

__all__ = ["CHECK_NAMES", "RuleFn", "rule", "registered_rules", "run_rule", "run_rules"]


def rule(name: str) -> Callable[[RuleFn], RuleFn]:
    """Регистрирует функцию как правило ``name``."""

    def decorator(fn: RuleFn) -> RuleFn:
        if name not in _KNOWN:
            raise ValueError(f"Unknown check name: {name}")
        if name in _REGISTRY and _REGISTRY[name] is not fn:
            raise ValueError(f"Check {name} is already registered")
        _REGISTRY[name] = fn
        return fn

    return decorator


def registered_rules() -> Mapping[str, RuleFn]:
    # modules register themselves on import
    import page_scout.rules  # noqa: F401

    return dict(_REGISTRY)


def _internal_failure(message: str) -> Verdict:
    return Verdict(
        severity=FAIL,
        issues=(message,),
        recommendations=("Re-run the analysis; if the problem persists the page markup may be unusual.",),
    )


def run_rule(name: str, fn: RuleFn, ctx: AnalysisContext) -> Verdict:
    try:
        verdict = fn(ctx)
    except Exception:
        logger.exception("Check %s crashed", name)
        return _internal_failure("This check could not be completed due to an internal error.")
    if not isinstance(verdict, Verdict) or not verdict.is_valid:
        logger.error("Check %s returned an invalid verdict: %r", name, verdict)
        return _internal_failure("This check produced no usable result.")
    return verdict


def run_rules(ctx: AnalysisContext, workers: int = 1) -> Dict[str, Verdict]:
    """Запускает все правила; результат всегда содержит все ключи CHECK_NAMES."""
    rules = registered_rules()

    def _one(name: str) -> Verdict:
        fn = rules.get(name)
        if fn is None:
            logger.error("No rule registered for %s", name)
            return _internal_failure("This check is not available.")
        return run_rule(name, fn, ctx)

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="page-scout-rule") as pool:
            verdicts: List[Verdict] = list(pool.map(_one, CHECK_NAMES))
    else:
        verdicts = [_one(name) for name in CHECK_NAMES]

    return dict(zip(CHECK_NAMES, verdicts))
