"""Issue analyzer: raw page telemetry in, scored and ranked diagnosis out.

Pure and stateless. Inputs may be model instances, wire-format dicts
(camelCase, as the collectors and the API produce them) or None; they are
coerced once here so the rules only ever see fully populated records.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from pagedoc import config
from pagedoc.core.rules import DEFAULT_RULES, AnalysisInputs, Rule
from pagedoc.models.types import (
    Issue,
    NavigationTiming,
    PageMetrics,
    Report,
    ResourceEntry,
)
from pagedoc.utils.logger import get_logger

logger = get_logger(__name__)


def analyze_performance(
    nav_entry: NavigationTiming | Mapping | None,
    resources: Iterable[ResourceEntry | Mapping] | None,
    dom_data: PageMetrics | Mapping | None,
    rules: Iterable[Rule] | None = None,
) -> Report:
    """Run every rule over the inputs and return the scored, sorted report."""
    inputs = AnalysisInputs(
        navigation=_coerce_navigation(nav_entry),
        resources=_coerce_resources(resources),
        page_metrics=_coerce_page_metrics(dom_data),
    )

    issues: list[Issue] = []
    for rule in (DEFAULT_RULES if rules is None else rules):
        issues.extend(rule.evaluate(inputs))

    score = compute_score(inputs.navigation, inputs.page_metrics, len(issues))
    logger.debug("analysis produced %d issue(s), score %d", len(issues), score)
    return Report(score=score, issues=sort_issues(issues))


def compute_score(navigation: NavigationTiming, page_metrics: PageMetrics, issue_count: int) -> int:
    """Fixed deductions against the raw inputs plus a flat cost per emitted issue."""
    score = 100
    if navigation.ttfb > config.SLOW_TTFB_MS:
        score -= config.TTFB_PENALTY
    if page_metrics.total_blocking_time > config.SCORE_BLOCKING_MS:
        score -= config.BLOCKING_PENALTY
    if navigation.load_event_end > config.SLOW_LOAD_MS:
        score -= config.SLOW_LOAD_PENALTY
    score -= issue_count * config.PER_ISSUE_PENALTY
    return int(round(max(0, min(100, score))))


def sort_issues(issues: Iterable[Issue]) -> list[Issue]:
    # sorted() is stable, so equal impacts keep rule order
    return sorted(issues, key=lambda issue: issue.impact.rank, reverse=True)


def _coerce_navigation(value) -> NavigationTiming:
    if isinstance(value, NavigationTiming):
        return value
    return NavigationTiming.from_dict(value)


def _coerce_resources(values) -> list[ResourceEntry]:
    return [
        r if isinstance(r, ResourceEntry) else ResourceEntry.from_dict(r)
        for r in (values or [])
    ]


def _coerce_page_metrics(value) -> PageMetrics:
    if isinstance(value, PageMetrics):
        return value
    return PageMetrics.from_dict(value)
