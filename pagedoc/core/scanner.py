"""Main scanner: loads a page once and gathers everything the analyzer needs.

Collects three independent snapshots (navigation timing, the network log,
page context metrics), substitutes degraded defaults for any collector that
fails, then runs the analyzer exactly once and returns a DiagnosisResult.
"""

from __future__ import annotations

import asyncio
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, TypeVar

from playwright.async_api import Error as PlaywrightError, Page, async_playwright

from pagedoc.config import Settings
from pagedoc.core.analyzer import analyze_performance
from pagedoc.core.errors import NavigationError, PageDocError
from pagedoc.detectors.navigation import NavigationTimingCollector
from pagedoc.detectors.network import NetworkCollector
from pagedoc.detectors.page_context import PageContextCollector
from pagedoc.models.types import DiagnosisResult, NavigationTiming, PageMetrics, ResourceEntry
from pagedoc.utils.logger import get_logger
from pagedoc.utils.smart_wait import settle, wait_for_load_complete

logger = get_logger(__name__)

ProgressCallback = Callable[[str, dict], None]
T = TypeVar("T")

VIEWPORTS = {
    "desktop": {"width": 1920, "height": 1080},
    "mobile": {"width": 375, "height": 812},
}


class PageDocScanner:
    """Single-shot diagnosis of one URL in a fresh browser context."""

    def __init__(
        self,
        url: str,
        viewport: str = "desktop",
        headful: bool | None = None,
        settle_ms: int | None = None,
        on_progress: ProgressCallback | None = None,
        settings: Settings | None = None,
    ):
        self.url = url
        self.viewport = viewport if viewport in VIEWPORTS else "desktop"
        self._settings = settings or Settings.from_env()
        self._headful = self._settings.headful if headful is None else headful
        self._settle_ms = self._settings.settle_ms if settle_ms is None else settle_ms
        self._on_progress = on_progress
        self._navigation = NavigationTimingCollector()
        self._page_context = PageContextCollector()
        self.result = DiagnosisResult(url=url, viewport=self.viewport)

    async def diagnose(self) -> DiagnosisResult:
        self.result.started_at = datetime.now()

        with tempfile.TemporaryDirectory(prefix="pagedoc-") as tmp:
            network = NetworkCollector(Path(tmp) / "network.har")

            async with async_playwright() as pw:
                try:
                    browser = await pw.chromium.launch(headless=not self._headful)
                except PlaywrightError as e:
                    raise PageDocError(f"Could not start Chromium: {str(e)[:300]}") from e

                try:
                    ctx = await browser.new_context(
                        viewport=VIEWPORTS[self.viewport],
                        user_agent=_user_agent(self.viewport),
                        **network.context_options(),
                    )
                    await self._page_context.install(ctx)
                    page = await ctx.new_page()

                    await self._load(page)
                    await self.collect_page(page)

                    # HAR is only written once the context closes
                    await ctx.close()
                finally:
                    await browser.close()

            self.result.resources = await self._collect(
                "network log", asyncio.to_thread(network.collect), []
            )

        return self.finalize()

    async def collect_page(self, page: Page):
        """Gather navigation timing and page context metrics from a loaded page."""
        self._emit("collecting", {"url": self.url})
        self.result.navigation = await self._collect(
            "navigation timing", self._navigation.collect(page), NavigationTiming()
        )
        self.result.page_metrics = await self._collect(
            "page metrics", self._page_context.collect(page), PageMetrics()
        )

    def finalize(self) -> DiagnosisResult:
        """Run the analyzer over whatever was collected."""
        self._emit("analyzing", {
            "resources": len(self.result.resources),
            "long_tasks": len(self.result.page_metrics.long_tasks),
        })
        self.result.report = analyze_performance(
            self.result.navigation, self.result.resources, self.result.page_metrics
        )
        self.result.completed_at = datetime.now()
        self._emit("diagnosis_complete", {
            "score": self.result.report.score,
            "issues": len(self.result.report.issues),
            "grade": self.result.grade,
        })
        logger.info(
            "diagnosed %s: score %d, %d issue(s)",
            self.url, self.result.report.score, len(self.result.report.issues),
        )
        return self.result

    async def _load(self, page: Page):
        self._emit("navigating", {"url": self.url, "viewport": self.viewport})
        try:
            await page.goto(self.url, wait_until="load", timeout=self._settings.nav_timeout_ms)
        except PlaywrightError as e:
            raise NavigationError(self.url, str(e)[:300]) from e

        if not await wait_for_load_complete(page, timeout_ms=self._settings.nav_timeout_ms):
            logger.warning("load event never completed on %s, collecting anyway", self.url)
        await settle(page, self._settle_ms)

    async def _collect(self, label: str, pending: Awaitable[T], fallback: T) -> T:
        try:
            return await asyncio.wait_for(pending, timeout=self._settings.collect_timeout_s)
        except Exception as e:
            error_msg = f"{label} unavailable: {str(e)[:200] or type(e).__name__}"
            logger.warning(error_msg)
            self.result.errors.append(error_msg)
            self._emit("collector_failed", {"collector": label, "error": error_msg})
            return fallback

    def _emit(self, event_type: str, data: dict):
        if self._on_progress:
            self._on_progress(event_type, data)


def _user_agent(viewport: str) -> str:
    if viewport == "mobile":
        return "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
    return "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"


def diagnose_snapshot(snapshot: dict, url: str = "") -> DiagnosisResult:
    """Analyze a saved ``{navigation, resources, pageMetrics}`` snapshot without a browser."""
    result = DiagnosisResult(url=url or snapshot.get("url", ""))
    result.navigation = NavigationTiming.from_dict(snapshot.get("navigation"))
    result.resources = [ResourceEntry.from_dict(r) for r in snapshot.get("resources") or []]
    result.page_metrics = PageMetrics.from_dict(snapshot.get("pageMetrics") or snapshot.get("page_metrics"))
    result.report = analyze_performance(result.navigation, result.resources, result.page_metrics)
    result.completed_at = datetime.now()
    return result
