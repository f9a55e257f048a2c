# File: tests/test_report.py
import json

from page_scout.aggregator import AnalysisReport
from page_scout.report import render_json
from page_scout.rules.base import PASS, WARNING, Verdict


def make_report() -> AnalysisReport:
    return AnalysisReport(
        url="https://example.com/",
        load_time_ms=5,
        content_length=10,
        results={
            "title": Verdict(severity=PASS, issues=("Заголовок в порядке",)),
            "h1": Verdict(severity=WARNING, issues=("x",), extra={"count": 2}),
        },
    )


def test_render_json_creates_parents(tmp_path):
    path = render_json(make_report(), tmp_path / "nested" / "dir" / "report.json")
    assert path.exists()
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["overallScore"] == 75
    assert data["results"]["h1"] == {"severity": WARNING, "count": 2, "issues": ["x"], "recommendations": []}


def test_render_json_compact_keeps_unicode(tmp_path):
    path = render_json(make_report(), tmp_path / "report.json", pretty=False)
    text = path.read_text(encoding="utf-8")
    assert "\n" not in text
    assert "Заголовок в порядке" in text
