from __future__ import annotations

from datetime import datetime

from pagedoc.models.types import (
    DiagnosisResult,
    Impact,
    Issue,
    LongTask,
    NavigationTiming,
    PageMetrics,
    Report,
    ResourceEntry,
    ResourceType,
    grade_for,
)


def test_navigation_from_camel_and_snake_case() -> None:
    camel = NavigationTiming.from_dict({"requestStart": 10, "responseStart": 90, "loadEventEnd": 1500})
    snake = NavigationTiming.from_dict({"request_start": 10, "response_start": 90, "load_event_end": 1500})
    assert camel == snake
    assert camel.ttfb == 80


def test_navigation_missing_and_malformed_fields_become_zero() -> None:
    nav = NavigationTiming.from_dict({"requestStart": None, "responseStart": "oops"})
    assert nav == NavigationTiming(0.0, 0.0, 0.0)
    assert NavigationTiming.from_dict(None).ttfb == 0


def test_resource_type_coercion() -> None:
    assert ResourceType.coerce("IMAGE") == ResourceType.IMAGE
    assert ResourceType.coerce("stylesheet") == ResourceType.STYLESHEET
    assert ResourceType.coerce("document") == ResourceType.OTHER
    assert ResourceType.coerce(None) == ResourceType.OTHER


def test_resource_entry_from_dict() -> None:
    entry = ResourceEntry.from_dict({"name": "a.jpg", "type": "image", "size": 600000, "humanSize": "586KB"})
    assert entry == ResourceEntry("a.jpg", 600000, ResourceType.IMAGE, 0.0, "586KB")
    assert entry.to_dict()["humanSize"] == "586KB"


def test_page_metrics_defaults_and_dedup() -> None:
    metrics = PageMetrics.from_dict({
        "longTasks": [{"duration": 120, "startTime": 5}, {"duration": 80}],
        "frameworks": ["React", "React", "Vue"],
    })
    assert metrics.long_tasks == [LongTask(120, 5), LongTask(80, 0)]
    assert metrics.frameworks == ["React", "Vue"]
    assert metrics.dom_nodes == 0
    assert metrics.total_blocking_time == 200
    assert PageMetrics.from_dict({"blockingTime": 0}).long_tasks == []


def test_impact_rank() -> None:
    assert Impact.HIGH.rank > Impact.MEDIUM.rank > Impact.LOW.rank
    assert Impact("MEDIUM").rank == 2


def test_report_wire_shape() -> None:
    issue = Issue("slow-ttfb", "t", Impact.HIGH, "~0.70s", "e", "f", "TTFB: 700ms")
    assert Report(80, [issue]).to_dict() == {
        "score": 80,
        "issues": [{
            "id": "slow-ttfb",
            "title": "t",
            "impact": "HIGH",
            "save": "~0.70s",
            "explanation": "e",
            "fix": "f",
            "technical": "TTFB: 700ms",
        }],
    }


def test_grade_boundaries() -> None:
    assert grade_for(100) == "A"
    assert grade_for(90) == "A"
    assert grade_for(89) == "B"
    assert grade_for(80) == "B"
    assert grade_for(79) == "C"
    assert grade_for(60) == "C"
    assert grade_for(59) == "F"
    assert grade_for(None) == "?"


def test_diagnosis_result_stats() -> None:
    result = DiagnosisResult(
        url="https://example.com",
        report=Report(75, []),
        navigation=NavigationTiming(load_event_end=2400),
        resources=[ResourceEntry("a", 1000), ResourceEntry("b", 2500)],
        page_metrics=PageMetrics(long_tasks=[LongTask(600)], frameworks=["Angular"], dom_nodes=900),
        started_at=datetime(2024, 1, 1, 12, 0, 0),
    )
    data = result.to_dict()
    assert data["score"] == 75
    assert data["grade"] == "C"
    assert data["stats"]["total_bytes"] == 3500
    assert data["stats"]["total_blocking_ms"] == 600
    assert data["stats"]["frameworks"] == ["Angular"]
    assert data["completed_at"] is None


def test_framework_labels_are_stringified_before_dedup() -> None:
    metrics = PageMetrics.from_dict({"frameworks": ["React", 3, "3", "React"]})
    assert metrics.frameworks == ["React", "3"]


def test_framework_set_is_sorted() -> None:
    assert PageMetrics.from_dict({"frameworks": {"Vue", "React"}}).frameworks == ["React", "Vue"]
