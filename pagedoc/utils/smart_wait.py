"""Condition-based waiting for a finished page load.

Waits for the navigation entry to report a load event end, then lets the
page idle for a settle period so late long tasks still get observed. Falls
back to a short fixed wait if the load condition never becomes true.
"""

from __future__ import annotations

from playwright.async_api import Error as PlaywrightError, Page


_LOAD_COMPLETE_JS = """() => {
    const entries = performance.getEntriesByType('navigation');
    return entries.length > 0 && entries[0].loadEventEnd > 0;
}"""


async def wait_for_load_complete(page: Page, timeout_ms: int = 10000, poll_ms: int = 250) -> bool:
    """Wait until loadEventEnd is set. Returns False if it never was."""
    try:
        await page.wait_for_function(_LOAD_COMPLETE_JS, timeout=timeout_ms, polling=poll_ms)
        return True
    except PlaywrightError:
        await page.wait_for_timeout(min(1500, timeout_ms))
        return False


async def settle(page: Page, settle_ms: int):
    """Give post-load scripts time to run so their long tasks are recorded."""
    if settle_ms > 0:
        await page.wait_for_timeout(settle_ms)
