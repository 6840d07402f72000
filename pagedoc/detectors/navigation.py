"""Navigation timing collector: request, response and load marks of the main document."""

from __future__ import annotations

from playwright.async_api import Page

from pagedoc.models.types import NavigationTiming

_NAVIGATION_TIMING_JS = """() => {
    const entries = performance.getEntriesByType('navigation');
    if (!entries.length) return null;
    const nav = entries[0];
    return {
        requestStart: nav.requestStart,
        responseStart: nav.responseStart,
        loadEventEnd: nav.loadEventEnd,
    };
}"""


class NavigationTimingCollector:

    async def collect(self, page: Page) -> NavigationTiming:
        """Read the first navigation entry; a page without one reports all-zero marks."""
        timing = await page.evaluate(_NAVIGATION_TIMING_JS)
        if not timing:
            return NavigationTiming()
        return NavigationTiming.from_dict(timing)
