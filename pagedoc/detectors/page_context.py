"""Page context collector: long tasks, detected UI frameworks, DOM size, title.

The long-task observer has to be running before the page's own scripts, so
it is registered as an init script on the browser context. If it is missing
when the snapshot is taken (e.g. the context was created elsewhere), it is
injected on demand; long tasks that already happened are then recovered from
the observer's buffered entries where the browser supports it.
"""

from __future__ import annotations

from playwright.async_api import BrowserContext, Page

from pagedoc.models.types import PageMetrics

_OBSERVER_JS = """(() => {
    if (window.__pagedoc) return;
    const data = { longTasks: [] };
    window.__pagedoc = data;
    try {
        const observer = new PerformanceObserver((list) => {
            for (const entry of list.getEntries()) {
                data.longTasks.push({
                    duration: entry.duration,
                    startTime: entry.startTime,
                });
            }
        });
        observer.observe({ type: 'longtask', buffered: true });
    } catch (e) {
        data.unsupported = true;
    }
})();"""

_PING_JS = "() => !!window.__pagedoc"

_SNAPSHOT_JS = """() => {
    const data = window.__pagedoc || { longTasks: [] };
    const frameworks = [];
    if (document.querySelector('[data-reactroot], [id="root"]')) frameworks.push('React');
    if (document.querySelector('app-root, [ng-version]')) frameworks.push('Angular');
    if (document.querySelector('[data-v-app]')) frameworks.push('Vue');
    return {
        longTasks: data.longTasks.slice(),
        frameworks: frameworks,
        domNodes: document.getElementsByTagName('*').length,
        title: document.title,
    };
}"""


class PageContextCollector:

    async def install(self, context: BrowserContext):
        """Start observing long tasks on every page the context opens."""
        await context.add_init_script(script=_OBSERVER_JS)

    async def ensure_observer(self, page: Page) -> bool:
        """Inject the observer if the page does not answer the ping.

        Returns True when the observer had to be injected late.
        """
        if await page.evaluate(_PING_JS):
            return False
        await page.evaluate(_OBSERVER_JS)
        return True

    async def collect(self, page: Page) -> PageMetrics:
        await self.ensure_observer(page)
        snapshot = await page.evaluate(_SNAPSHOT_JS)
        return PageMetrics.from_dict(snapshot)
