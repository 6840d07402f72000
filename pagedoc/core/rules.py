"""Diagnosis rules: each one turns raw page telemetry into plain-English issues.

A rule is a predicate over the analysis inputs plus a fixed impact tier and
templated advice. Rules never look at each other's output, so new ones can
be appended to DEFAULT_RULES without touching scoring or sorting.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from pagedoc import config
from pagedoc.models.types import (
    Impact,
    Issue,
    NavigationTiming,
    PageMetrics,
    ResourceEntry,
    ResourceType,
)


@dataclass
class AnalysisInputs:
    navigation: NavigationTiming = field(default_factory=NavigationTiming)
    resources: list[ResourceEntry] = field(default_factory=list)
    page_metrics: PageMetrics = field(default_factory=PageMetrics)


class Rule:
    """Base class for a diagnosis rule."""

    id: str = ""
    impact: Impact = Impact.LOW

    def evaluate(self, inputs: AnalysisInputs) -> list[Issue]:
        raise NotImplementedError

    def _issue(self, title, save, explanation, fix, technical, issue_id=None) -> Issue:
        return Issue(
            id=issue_id or self.id,
            title=title,
            impact=self.impact,
            save=save,
            explanation=explanation,
            fix=fix,
            technical=technical,
        )


class SlowServerResponseRule(Rule):
    id = "slow-ttfb"
    impact = Impact.HIGH

    def evaluate(self, inputs: AnalysisInputs) -> list[Issue]:
        ttfb = inputs.navigation.ttfb
        if ttfb <= config.SLOW_TTFB_MS:
            return []
        seconds = _fixed(ttfb / 1000, 2)
        return [self._issue(
            "Server is struggling to reply",
            f"~{seconds}s",
            f"Your server takes {seconds} seconds just to think about the request before sending any data.",
            "Check your database queries, server-side code efficiency, or upgrade your hosting plan.",
            f"TTFB: {_fixed(ttfb)}ms",
        )]


class HeavyJavaScriptRule(Rule):
    id = "heavy-js"
    impact = Impact.HIGH

    def evaluate(self, inputs: AnalysisInputs) -> list[Issue]:
        tasks = inputs.page_metrics.long_tasks
        total = inputs.page_metrics.total_blocking_time
        if total <= config.HEAVY_JS_BLOCKING_MS:
            return []
        return [self._issue(
            "JavaScript is locking up the browser",
            f"~{_fixed(total / 1000, 2)}s",
            "Scripts are working so hard that the user cannot scroll or click for significant periods.",
            "Break up long tasks, remove unused code, or defer non-essential third-party scripts.",
            f"Total Blocking Time: {_fixed(total)}ms across {len(tasks)} tasks.",
        )]


class OversizedImageRule(Rule):
    """One issue per oversized image, keyed by the full resource name.

    A URL fetched more than once (preload plus real request) gets a
    ``#<n>`` suffix on its repeats so ids stay unique within a report.
    """

    id = "img"
    impact = Impact.MEDIUM

    def evaluate(self, inputs: AnalysisInputs) -> list[Issue]:
        issues = []
        seen: dict[str, int] = {}
        for img in inputs.resources:
            if img.type != ResourceType.IMAGE or img.size <= config.LARGE_IMAGE_BYTES:
                continue
            seen[img.name] = seen.get(img.name, 0) + 1
            repeat = f"#{seen[img.name]}" if seen[img.name] > 1 else ""
            issues.append(self._issue(
                "Massive Image Detected",
                "Bandwidth & Load Time",
                f"An image file is {img.human_size}. That's larger than the entire code of some websites.",
                "Convert to WebP/AVIF, resize to actual display dimensions, and compress.",
                f"File: ...{_tail(img.name, config.IMAGE_NAME_TAIL)}\nSize: {img.human_size}",
                issue_id=f"img-{img.name}{repeat}",
            ))
        return issues


class RenderBlockingStylesRule(Rule):
    id = "render-blocking-css"
    impact = Impact.HIGH

    def evaluate(self, inputs: AnalysisInputs) -> list[Issue]:
        blocking = [
            r for r in inputs.resources
            if r.type == ResourceType.STYLESHEET and r.time > config.BLOCKING_STYLESHEET_MS
        ]
        if not blocking:
            return []
        names = ", ".join(_tail(r.name, config.STYLESHEET_NAME_TAIL) for r in blocking)
        return [self._issue(
            "Styles are delaying the first paint",
            "Visual Perception",
            f"The browser pauses drawing the page until it finishes downloading these {len(blocking)} style files.",
            "Inline critical CSS and defer the rest, or reduce CSS file size.",
            f"Blocking files: {names}",
        )]


class LargeDomRule(Rule):
    id = "large-dom"
    impact = Impact.LOW

    def evaluate(self, inputs: AnalysisInputs) -> list[Issue]:
        nodes = inputs.page_metrics.dom_nodes
        if nodes <= config.LARGE_DOM_NODES:
            return []
        frameworks = inputs.page_metrics.frameworks
        stack = f" Detected frameworks: {', '.join(frameworks)}." if frameworks else ""
        return [self._issue(
            "The page is built from too many pieces",
            "Smoother Interactions",
            f"The page contains {nodes} elements. Every style change and layout has to walk all of them.",
            "Paginate or virtualize long lists, and remove hidden or duplicated markup.",
            f"DOM nodes: {nodes} (recommended under {config.LARGE_DOM_NODES}).{stack}",
        )]


DEFAULT_RULES: tuple[Rule, ...] = (
    SlowServerResponseRule(),
    HeavyJavaScriptRule(),
    OversizedImageRule(),
    RenderBlockingStylesRule(),
    LargeDomRule(),
)


def _tail(name: str, length: int) -> str:
    return name[-length:]


def _fixed(value: float, places: int = 0) -> str:
    """Format with ties rounded away from zero, like JavaScript's toFixed/Math.round."""
    if not math.isfinite(value):
        return str(value)
    exponent = Decimal(1).scaleb(-places)
    try:
        return str(Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # beyond decimal precision ties cannot occur
        return f"{value:.{places}f}"
