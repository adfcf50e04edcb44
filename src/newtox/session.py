"""Per-page coordinator owning extraction passes and annotations."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

from .config import RETRY_DELAY_MS
from .dom import inside_overlay, iter_elements, make_ref, parse_html, resolve, text_content
from .extractor import CandidateExtractor
from .injection import InjectionEngine
from .models import Candidate, InjectionMode, InjectionPair, Rewrite
from .text import normalize

logger = logging.getLogger(__name__)


class PageSession:
    """State for one page view: the document, the last two passes and the engine.

    Create one per page and call :meth:`load` on navigation; nothing is shared
    between sessions.
    """

    def __init__(self, html: str = "", extractor: Optional[CandidateExtractor] = None) -> None:
        self.extractor = extractor or CandidateExtractor()
        self.document: BeautifulSoup = parse_html(html)
        self.engine = InjectionEngine(self.document)
        self.last_candidates: List[Candidate] = []
        self.prior_candidates: List[Candidate] = []

    def load(self, html: str) -> None:
        """Swap in a fresh document snapshot and forget earlier passes."""
        self.document = parse_html(html)
        self.engine = InjectionEngine(self.document)
        self.last_candidates = []
        self.prior_candidates = []

    def refresh(self, html: str) -> None:
        """Replace the document but keep candidate history for stale-id matching."""
        self.document = parse_html(html)
        self.engine = InjectionEngine(self.document)

    def html(self) -> str:
        return str(self.document)

    def analyze(self, max_candidates: Optional[int] = None) -> List[Candidate]:
        candidates = self.extractor.collect(self.document, max_candidates)
        self._remember(candidates)
        return candidates

    def plan(self, rewrites: Sequence[Rewrite]) -> List[InjectionPair]:
        """Undo earlier annotations, re-extract, and pair each rewrite with a live element."""
        self.engine.clear()
        fresh = self.extractor.collect(self.document)
        stale = self.last_candidates
        pairs = match_rewrites(self.document, rewrites, fresh, stale)
        self._remember(fresh)
        return pairs

    def apply(self, rewrites: Sequence[Rewrite], mode: InjectionMode = InjectionMode.OVERLAY) -> int:
        pairs = self.plan(rewrites)
        if not pairs:
            return 0
        return self.engine.inject(pairs, mode)

    def restore(self) -> int:
        return self.engine.clear()

    def _remember(self, candidates: List[Candidate]) -> None:
        self.prior_candidates = self.last_candidates
        self.last_candidates = candidates


async def analyze_with_retry(
    session: PageSession,
    refresh: Optional[Callable[[], Awaitable[str]]] = None,
    delay_ms: int = RETRY_DELAY_MS,
    max_candidates: Optional[int] = None,
) -> Tuple[List[Candidate], bool]:
    """Analyze, and if nothing turns up wait once for late-rendered headlines.

    Returns the candidates and whether the retry was used. ``refresh`` supplies
    a new HTML snapshot for the second pass; without it the same document is
    scanned again.
    """
    candidates = session.analyze(max_candidates)
    if candidates:
        return candidates, False

    logger.info("No headlines found; retrying once in %sms", delay_ms)
    await asyncio.sleep(delay_ms / 1000.0)
    if refresh is not None:
        session.refresh(await refresh())
    return session.analyze(max_candidates), True


def match_rewrites(
    document: BeautifulSoup,
    rewrites: Sequence[Rewrite],
    fresh: Sequence[Candidate],
    stale: Sequence[Candidate] = (),
) -> List[InjectionPair]:
    """Pair rewrites with elements: text first, then ids, then a document re-scan."""
    pairs: List[InjectionPair] = []
    for rewrite in rewrites:
        if not normalize(rewrite.original) or not normalize(rewrite.alternative):
            continue
        target = _find_by_text(fresh, rewrite.original) or _find_by_id(fresh, rewrite.id)
        if target is None:
            target = _find_by_text(stale, rewrite.original) or _find_by_id(stale, rewrite.id)

        element_ref = target.element if target is not None else None
        if element_ref is None or _detached(document, target):
            element = rescan_for_text(document, (target.original if target else rewrite.original))
            if element is None:
                logger.debug("Dropping rewrite with no live element: %r", rewrite.original)
                continue
            element_ref = make_ref(element, text_content(element))

        original = target.original if target is not None else rewrite.original
        pairs.append(InjectionPair(original=original, alternative=rewrite.alternative, element=element_ref))
    return pairs


def rescan_for_text(document: BeautifulSoup, original: str) -> Optional[Tag]:
    """Find the deepest element whose text equals, or contains, ``original``."""
    target = normalize(original)
    if not target:
        return None
    lowered = target.lower()
    exact: Optional[Tag] = None
    containing: Optional[Tag] = None
    for element in iter_elements(document):
        if element.name in ("script", "style") or inside_overlay(element):
            continue
        text = text_content(element)
        if text == target:
            exact = element
        elif len(text) > 10 and len(target) > 10 and lowered in text.lower():
            containing = element
    # Descendants follow their ancestors in document order, so later hits sit deeper.
    return exact or containing


def _find_by_text(candidates: Sequence[Candidate], original: str) -> Optional[Candidate]:
    wanted = normalize(original)
    for candidate in candidates:
        if normalize(candidate.original) == wanted:
            return candidate
    lowered = wanted.lower()
    for candidate in candidates:
        if normalize(candidate.original).lower() == lowered:
            return candidate
    return None


def _find_by_id(candidates: Sequence[Candidate], candidate_id: Optional[int]) -> Optional[Candidate]:
    if candidate_id is None:
        return None
    for candidate in candidates:
        if candidate.id == candidate_id:
            return candidate
    return None


def _detached(document: BeautifulSoup, candidate: Candidate) -> bool:
    element = resolve(document, candidate.element)
    if element is None:
        return True
    expected = normalize(candidate.original).lower()
    return expected not in text_content(element).lower() and expected not in normalize(
        element.get("aria-label") or element.get("title")
    ).lower()
