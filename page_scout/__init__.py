# page_scout/__init__.py
"""
PageScout package initializer.
Defines package version and exposes the library entry points.
"""
__version__ = "0.1.0"

from page_scout.aggregator import AnalysisReport  # noqa: E402
from page_scout.engine import Engine  # noqa: E402
from page_scout.scanner import start_analysis  # noqa: E402

__all__ = ["__version__", "AnalysisReport", "Engine", "start_analysis"]
