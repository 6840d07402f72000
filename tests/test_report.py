from __future__ import annotations

from datetime import datetime

from rich.console import Console

from pagedoc.core.report import grade_color, print_report
from pagedoc.core.scanner import diagnose_snapshot
from pagedoc.models.types import DiagnosisResult, Report


def _render(result: DiagnosisResult) -> str:
    console = Console(record=True, width=120)
    print_report(result, console=console)
    return console.export_text()


def test_clean_report() -> None:
    result = diagnose_snapshot({"navigation": {"loadEventEnd": 1250}}, url="https://example.com")
    text = _render(result)
    assert "Grade: A" in text
    assert "(100/100)" in text
    assert "Clean Bill of Health!" in text
    assert "1.25s" in text


def test_report_lists_issues_and_warnings() -> None:
    result = diagnose_snapshot({
        "navigation": {"requestStart": 0, "responseStart": 900, "loadEventEnd": 4200},
        "resources": [{"name": "https://example.com/a.jpg", "type": "image", "size": 3_145_728, "humanSize": "3.00MB"}],
        "pageMetrics": {"longTasks": [{"duration": 700}], "frameworks": ["Vue"], "title": "Shop"},
    }, url="https://example.com")
    result.errors.append("network log unavailable: boom")
    text = _render(result)
    assert "Grade: F" in text
    assert "Server is struggling to reply" in text
    assert "Massive Image Detected" in text
    assert "Rx:" in text
    assert "3.00 MB" in text
    assert "Vue" in text
    assert "Collection warnings: 1" in text
    assert "Clean Bill of Health!" not in text


def test_report_without_analysis() -> None:
    result = DiagnosisResult(url="https://example.com", started_at=datetime.now())
    text = _render(result)
    assert "Grade: ?" in text


def test_grade_color() -> None:
    assert grade_color(95) == "green"
    assert grade_color(75) == "yellow"
    assert grade_color(10) == "red"
    assert Report(0).issues == []
