from __future__ import annotations

from pagedoc.core.rules import (
    DEFAULT_RULES,
    AnalysisInputs,
    HeavyJavaScriptRule,
    LargeDomRule,
    OversizedImageRule,
    RenderBlockingStylesRule,
    SlowServerResponseRule,
)
from pagedoc.models.types import (
    Impact,
    LongTask,
    NavigationTiming,
    PageMetrics,
    ResourceEntry,
    ResourceType,
)


def test_slow_ttfb_texts() -> None:
    inputs = AnalysisInputs(navigation=NavigationTiming(request_start=100, response_start=1334))
    [issue] = SlowServerResponseRule().evaluate(inputs)
    assert issue.id == "slow-ttfb"
    assert issue.title == "Server is struggling to reply"
    assert issue.save == "~1.23s"
    assert "1.23 seconds" in issue.explanation
    assert issue.technical == "TTFB: 1234ms"


def test_heavy_js_mentions_task_count() -> None:
    metrics = PageMetrics(long_tasks=[LongTask(300), LongTask(250.4), LongTask(60)])
    [issue] = HeavyJavaScriptRule().evaluate(AnalysisInputs(page_metrics=metrics))
    assert issue.impact == Impact.HIGH
    assert issue.save == "~0.61s"
    assert issue.technical == "Total Blocking Time: 610ms across 3 tasks."


def test_heavy_js_silent_at_threshold() -> None:
    metrics = PageMetrics(long_tasks=[LongTask(250), LongTask(250)])
    assert HeavyJavaScriptRule().evaluate(AnalysisInputs(page_metrics=metrics)) == []


def test_oversized_image_per_resource() -> None:
    resources = [
        ResourceEntry("https://example.com/images/very-large-hero-banner.jpg", 1_200_000, ResourceType.IMAGE, 40, "1.14MB"),
        ResourceEntry("https://example.com/small.png", 10_000, ResourceType.IMAGE, 5, "10KB"),
        ResourceEntry("https://example.com/huge.js", 2_000_000, ResourceType.SCRIPT, 80, "1.91MB"),
    ]
    [issue] = OversizedImageRule().evaluate(AnalysisInputs(resources=resources))
    assert issue.id == "img-https://example.com/images/very-large-hero-banner.jpg"
    assert issue.save == "Bandwidth & Load Time"
    assert "1.14MB" in issue.explanation
    assert issue.technical == "File: ...arge-hero-banner.jpg\nSize: 1.14MB"


def test_render_blocking_styles_aggregates_files() -> None:
    resources = [
        ResourceEntry("styles/main.css", 1000, ResourceType.STYLESHEET, 150),
        ResourceEntry("https://x.io/a/fast.css", 1000, ResourceType.STYLESHEET, 20),
        ResourceEntry("https://x.io/a/very-long-theme.css", 1000, ResourceType.STYLESHEET, 220),
    ]
    [issue] = RenderBlockingStylesRule().evaluate(AnalysisInputs(resources=resources))
    assert issue.id == "render-blocking-css"
    assert "these 2 style files" in issue.explanation
    assert issue.technical == "Blocking files: styles/main.css, -long-theme.css"


def test_render_blocking_styles_silent_without_slow_css() -> None:
    resources = [ResourceEntry("a.css", 1000, ResourceType.STYLESHEET, 100)]
    assert RenderBlockingStylesRule().evaluate(AnalysisInputs(resources=resources)) == []


def test_large_dom_lists_frameworks() -> None:
    metrics = PageMetrics(dom_nodes=4000, frameworks=["React", "Vue"])
    [issue] = LargeDomRule().evaluate(AnalysisInputs(page_metrics=metrics))
    assert issue.impact == Impact.LOW
    assert "4000" in issue.explanation
    assert issue.technical.endswith("Detected frameworks: React, Vue.")


def test_default_rule_ids_are_unique() -> None:
    ids = [rule.id for rule in DEFAULT_RULES]
    assert len(ids) == len(set(ids))


def test_slow_ttfb_rounds_ties_up() -> None:
    inputs = AnalysisInputs(navigation=NavigationTiming(request_start=0, response_start=1125))
    [issue] = SlowServerResponseRule().evaluate(inputs)
    assert issue.save == "~1.13s"
    assert "1.13 seconds" in issue.explanation
    assert issue.technical == "TTFB: 1125ms"

    inputs = AnalysisInputs(navigation=NavigationTiming(request_start=0, response_start=700.5))
    [issue] = SlowServerResponseRule().evaluate(inputs)
    assert issue.technical == "TTFB: 701ms"


def test_heavy_js_rounds_ties_up() -> None:
    metrics = PageMetrics(long_tasks=[LongTask(600), LongTask(525)])
    [issue] = HeavyJavaScriptRule().evaluate(AnalysisInputs(page_metrics=metrics))
    assert issue.save == "~1.13s"
    assert issue.technical == "Total Blocking Time: 1125ms across 2 tasks."

    metrics = PageMetrics(long_tasks=[LongTask(600.5)])
    [issue] = HeavyJavaScriptRule().evaluate(AnalysisInputs(page_metrics=metrics))
    assert issue.technical == "Total Blocking Time: 601ms across 1 tasks."
