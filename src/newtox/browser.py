"""Run analysis and injection against a live Playwright page."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from playwright.async_api import BrowserContext, Error as PlaywrightError, Page, Playwright

from .config import RETRY_DELAY_MS
from .dom import ORIGINAL_ATTR, OVERLAY_CLASS
from .heuristics import ITEM_CONTAINER_HINTS
from .injection import LABEL_TEXT, MARKER_STYLE, OVERLAY_CSS, STYLE_ID
from .models import AnalyzeResult, ApplyResult, InjectionMode, Rewrite
from .robustness import page_html, wait_for_page_quiet
from .session import PageSession, analyze_with_retry

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1440, "height": 900}

_CLEAR_SCRIPT = r"""
({ overlayClass, originalAttr }) => {
  let touched = 0;
  document.querySelectorAll(`.${overlayClass}`).forEach((node) => { node.remove(); touched += 1; });
  document.querySelectorAll(`[${originalAttr}]`).forEach((el) => {
    const savedMarkup = `${originalAttr}-html`;
    if (el.hasAttribute(savedMarkup)) {
      el.innerHTML = el.getAttribute(savedMarkup);
      el.removeAttribute(savedMarkup);
    } else {
      el.textContent = el.getAttribute(originalAttr);
    }
    ['title', 'aria-label'].forEach((attr) => {
      const saved = `${originalAttr}-${attr}`;
      if (el.hasAttribute(saved)) {
        el.setAttribute(attr, el.getAttribute(saved));
        el.removeAttribute(saved);
      }
    });
    const savedStyle = `${originalAttr}-style`;
    if (el.hasAttribute(savedStyle)) {
      el.setAttribute('style', el.getAttribute(savedStyle));
      el.removeAttribute(savedStyle);
    } else {
      el.removeAttribute('style');
    }
    el.removeAttribute(originalAttr);
    touched += 1;
  });
  return touched;
}
"""

_INJECT_SCRIPT = r"""
({ pairs, mode, overlayClass, originalAttr, styleId, css, label, marker, itemHints }) => {
  const normalize = (text) => (text || '').replace(/\s+/g, ' ').trim();

  if (!document.getElementById(styleId)) {
    const style = document.createElement('style');
    style.id = styleId;
    style.textContent = css;
    (document.head || document.documentElement).appendChild(style);
  }

  const resolved = [];
  pairs.forEach((pair) => {
    if (!normalize(pair.alternative)) return;
    let el = null;
    try { el = document.querySelector(pair.selector); } catch (err) { el = null; }
    if (!el || !el.parentNode) return;
    const expected = normalize(pair.original).toLowerCase();
    const haystack = [el.textContent, el.getAttribute('aria-label'), el.getAttribute('title')]
      .map((value) => normalize(value).toLowerCase());
    if (!expected || !haystack.some((value) => value.includes(expected))) return;
    resolved.push({ el, pair });
  });

  const insertTarget = (el) => {
    if (el.tagName !== 'A') return el;
    const parent = el.parentElement;
    if (!parent) return el;
    const classes = parent.className && parent.className.toString ? parent.className.toString().toLowerCase() : '';
    if (itemHints.some((hint) => classes.includes(hint)) || parent.getAttribute('role') === 'article' || parent.tagName === 'ARTICLE') {
      return parent;
    }
    return el;
  };

  let applied = 0;
  const replaced = [];
  resolved.forEach(({ el, pair }) => {
    if (!document.contains(el)) return;
    if (mode === 'replacement') {
      if (replaced.some((other) => other.contains(el) || el.contains(other))) return;
      if (normalize(pair.alternative) === normalize(pair.original)) return;
      if (!el.hasAttribute(originalAttr)) {
        el.setAttribute(originalAttr, el.textContent);
        el.setAttribute(`${originalAttr}-html`, el.innerHTML);
        ['title', 'aria-label'].forEach((attr) => {
          if (el.getAttribute(attr)) el.setAttribute(`${originalAttr}-${attr}`, el.getAttribute(attr));
        });
        if (el.getAttribute('style')) el.setAttribute(`${originalAttr}-style`, el.getAttribute('style'));
      }
      el.textContent = pair.alternative;
      if (el.tagName === 'A') {
        ['title', 'aria-label'].forEach((attr) => {
          if (el.getAttribute(attr)) el.setAttribute(attr, pair.alternative);
        });
      }
      const base = el.getAttribute(`${originalAttr}-style`);
      el.setAttribute('style', base ? `${base.replace(/[;\s]+$/, '')}; ${marker}` : marker);
      replaced.push(el);
      applied += 1;
      return;
    }
    const target = insertTarget(el);
    if (!target.parentNode) return;
    const block = document.createElement('div');
    block.className = overlayClass;
    const labelNode = document.createElement('div');
    labelNode.className = 'newtox-alt-label';
    labelNode.textContent = label;
    const textNode = document.createElement('div');
    textNode.className = 'newtox-alt-text';
    textNode.textContent = pair.alternative;
    block.appendChild(labelNode);
    block.appendChild(textNode);
    target.insertAdjacentElement('afterend', block);
    applied += 1;
  });
  return applied;
}
"""


class BrowserHost:
    """Bridge the Python pipeline to a page: snapshot HTML in, DOM edits out."""

    def __init__(
        self,
        page: Page,
        session: Optional[PageSession] = None,
        *,
        timeout_ms: int = 8000,
        retry_delay_ms: int = RETRY_DELAY_MS,
    ) -> None:
        self.page = page
        self.session = session or PageSession()
        self.timeout_ms = timeout_ms
        self.retry_delay_ms = retry_delay_ms

    async def goto(self, url: str) -> None:
        await self.page.goto(url, wait_until="domcontentloaded", timeout=max(self.timeout_ms, 15000))
        self.session.load("")

    async def analyze(self, max_candidates: Optional[int] = None) -> AnalyzeResult:
        """Return headline candidates, scanning a second time if the first pass is empty."""
        await wait_for_page_quiet(self.page, self.timeout_ms)
        self.session.refresh(await page_html(self.page))
        candidates, retried = await analyze_with_retry(
            self.session,
            refresh=lambda: page_html(self.page),
            delay_ms=self.retry_delay_ms,
            max_candidates=max_candidates,
        )
        logger.info("Analyze found %s headlines%s", len(candidates), " after retry" if retried else "")
        return AnalyzeResult.from_candidates(candidates, retried=retried)

    async def apply(self, rewrites: Sequence[Rewrite], mode: InjectionMode = InjectionMode.OVERLAY) -> ApplyResult:
        mode = InjectionMode(mode)
        self.session.refresh(await page_html(self.page))
        pairs = self.session.plan(rewrites)
        payload: Dict[str, Any] = {
            "pairs": [
                {"selector": pair.element.selector, "original": pair.original, "alternative": pair.alternative}
                for pair in pairs
            ],
            "mode": mode.value,
            "overlayClass": OVERLAY_CLASS,
            "originalAttr": ORIGINAL_ATTR,
            "styleId": STYLE_ID,
            "css": OVERLAY_CSS,
            "label": LABEL_TEXT,
            "marker": MARKER_STYLE,
            "itemHints": list(ITEM_CONTAINER_HINTS),
        }
        try:
            await self.page.evaluate(_CLEAR_SCRIPT, {"overlayClass": OVERLAY_CLASS, "originalAttr": ORIGINAL_ATTR})
            count = await self.page.evaluate(_INJECT_SCRIPT, payload) if pairs else 0
        except PlaywrightError as exc:
            logger.warning("Injection into page failed: %s", exc)
            count = 0
        return ApplyResult(status="injected", count=int(count or 0), requested=len(rewrites), mode=mode)

    async def restore(self) -> int:
        try:
            restored = await self.page.evaluate(
                _CLEAR_SCRIPT, {"overlayClass": OVERLAY_CLASS, "originalAttr": ORIGINAL_ATTR}
            )
        except PlaywrightError as exc:
            logger.warning("Restoring page failed: %s", exc)
            return 0
        return int(restored or 0)


async def launch_context(playwright: Playwright, browser: str, headless: bool) -> BrowserContext:
    name = (browser or "chromium").lower()
    if name == "chrome":
        instance = await playwright.chromium.launch(headless=headless, channel="chrome")
    else:
        browser_type = getattr(playwright, name, None) or playwright.chromium
        instance = await browser_type.launch(headless=headless)
    return await instance.new_context(viewport=VIEWPORT)
