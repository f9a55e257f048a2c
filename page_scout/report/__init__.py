# File: page_scout/report/__init__.py
"""page_scout.report: Вывод отчётов анализа."""

from __future__ import annotations

from .json_report import render_json

__all__ = ["render_json"]
