"""Waiting helpers for pages that keep rendering after load."""

from __future__ import annotations

import logging

from playwright.async_api import Error as PlaywrightError, Page, TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)

_IDLE_SCRIPT = """
    () => {
        const w = window;
        if (!w.__newtoxMutationIdle) {
            w.__newtoxMutationIdle = { last: Date.now() };
            const observer = new MutationObserver(() => {
                w.__newtoxMutationIdle.last = Date.now();
            });
            observer.observe(document.documentElement, { subtree: true, childList: true, characterData: true });
        }
        return Date.now() - w.__newtoxMutationIdle.last > 400;
    }
"""


async def wait_for_page_quiet(page: Page, timeout_ms: int) -> None:
    """Best-effort wait for the DOM to stop changing before taking a snapshot."""
    try:
        await page.wait_for_load_state("domcontentloaded", timeout=timeout_ms)
    except PlaywrightTimeoutError:
        logger.debug("domcontentloaded not reached within %sms", timeout_ms)
    except PlaywrightError:
        pass

    try:
        await page.wait_for_function(_IDLE_SCRIPT, timeout=timeout_ms)
    except PlaywrightTimeoutError:
        logger.debug("Page still mutating after %sms; snapshotting anyway", timeout_ms)
    except PlaywrightError:
        pass


async def page_html(page: Page) -> str:
    """Serialized DOM of ``page``; empty when the page is gone."""
    try:
        return await page.content()
    except PlaywrightError as exc:
        logger.warning("Could not read page content: %s", exc)
        return ""
