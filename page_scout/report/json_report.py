# page_scout/report/json_report.py

"""
Сохранение AnalysisReport в JSON-файл.
"""
from __future__ import annotations

from pathlib import Path

from page_scout.aggregator import AnalysisReport


def render_json(report: AnalysisReport, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект AnalysisReport
    :param output_path: путь к JSON-файлу (родительские папки создаются)
    :param pretty: отступ 2 пробела
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(report.json(pretty=pretty), encoding="utf-8")
    return output
