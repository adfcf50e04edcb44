"""Headline candidate extraction over a parsed HTML document."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag

from .dom import closest, direct_text, first_child_element, inside_overlay, make_ref, text_content
from .exclusion import should_exclude
from .heuristics import (
    ARTICLE_URL_MARKERS,
    CONTENT_CONTAINERS,
    CONTENT_LANDMARKS,
    DEFAULT_RULES,
    EMPHASIS_TAGS,
    FALLBACK_META,
    HEADING_TAGS,
    ExclusionRules,
    ExtractionProfile,
    get_profile,
)
from .models import Candidate
from .text import looks_like_symbols, normalize, strip_publisher_prefix

logger = logging.getLogger(__name__)


@dataclass
class _Match:
    element: Optional[Tag]
    text: str
    order: int
    priority: int
    source: str
    context: str


class CandidateExtractor:
    """Scan a document for headline-looking elements and rank them."""

    def __init__(self, profile: ExtractionProfile | str | None = None, rules: ExclusionRules = DEFAULT_RULES) -> None:
        self.profile = profile if isinstance(profile, ExtractionProfile) else get_profile(profile)
        self.rules = rules

    def collect(self, document: BeautifulSoup, max_candidates: Optional[int] = None) -> List[Candidate]:
        """Return ranked candidates; an empty list means no headlines were found."""
        limit = max_candidates if max_candidates is not None else self.profile.max_candidates
        try:
            matches = self._scan(document)
            if not matches:
                matches = self._fallbacks(document)
        except Exception as exc:  # noqa: BLE001 - extraction must never break the host
            logger.warning("Headline extraction failed: %s", exc)
            return []

        candidates: List[Candidate] = []
        for match in matches[: max(0, limit)]:
            candidates.append(
                Candidate(
                    id=len(candidates),
                    original=match.text,
                    context=match.context,
                    source=match.source,
                    element=make_ref(match.element, match.text) if match.element is not None else None,
                    priority=match.priority,
                )
            )
        logger.debug("Extracted %s headline candidates (profile=%s)", len(candidates), self.profile.name)
        return candidates

    def _scan(self, document: BeautifulSoup) -> List[_Match]:
        seen: Dict[str, bool] = {}
        visited: Dict[int, bool] = {}
        matches: List[_Match] = []

        for selector in self.profile.selectors:
            for element in document.select(selector):
                if id(element) in visited:
                    continue
                visited[id(element)] = True
                if inside_overlay(element):
                    continue

                text = self._accept(element, best_text(element))
                if not text:
                    continue
                key = text.lower()
                if key in seen:
                    continue
                seen[key] = True

                matches.append(
                    _Match(
                        element=element,
                        text=text,
                        order=len(matches),
                        priority=priority_for(element),
                        source=describe_source(element),
                        context=article_context(document, element),
                    )
                )

        if self.profile.tie_break == "length":
            matches.sort(key=lambda item: (-item.priority, -len(item.text), item.order))
        else:
            matches.sort(key=lambda item: (-item.priority, item.order))
        return matches

    def _accept(self, element: Optional[Tag], raw: str) -> str:
        text = normalize(raw)
        if self.profile.strip_prefix:
            text = strip_publisher_prefix(text)
        if len(text) < self.profile.min_length:
            return ""
        if self.profile.max_length is not None and len(text) > self.profile.max_length:
            return ""
        if looks_like_symbols(text):
            return ""
        if should_exclude(element, text, self.rules):
            return ""
        return text

    def _fallbacks(self, document: BeautifulSoup) -> List[_Match]:
        sources = []
        if document.title is not None:
            sources.append((document.title, document.title.get_text(), "document-title"))
        for selector, label in FALLBACK_META:
            meta = document.select_one(selector)
            if meta is not None:
                sources.append((meta, meta.get("content") or "", label))

        seen: Dict[str, bool] = {}
        matches: List[_Match] = []
        for element, raw, label in sources:
            text = self._accept(None, raw)
            if not text or text.lower() in seen:
                continue
            seen[text.lower()] = True
            # Meta tags have no visible text, so annotations target <title>.
            target = document.title if document.title is not None else element
            matches.append(_Match(element=target, text=text, order=len(matches), priority=0, source=label, context=""))
        return matches


def best_text(element: Tag) -> str:
    """Pick the most headline-like text for ``element``."""
    for tag in EMPHASIS_TAGS:
        emphasis = element.find(tag)
        if emphasis is not None:
            text = text_content(emphasis)
            if len(text) >= 8:
                return text

    text = text_content(element) or normalize(element.get("aria-label")) or normalize(element.get("title"))

    if len(text) < 8 and element.name == "a":
        text = direct_text(element) or text
        if len(text) < 8:
            child = first_child_element(element)
            if child is not None:
                text = text_content(child) or text

    if len(text) < 8 and element.name in HEADING_TAGS:
        link = element.find("a")
        if link is not None:
            text = text_content(link) or text

    return text


def priority_for(element: Tag) -> int:
    in_content = closest(element, CONTENT_LANDMARKS) is not None or closest(element, CONTENT_CONTAINERS) is not None
    priority = 1 if in_content else 0
    if element.name == "a":
        href = element.get("href") or ""
        if any(marker in href for marker in ARTICLE_URL_MARKERS):
            priority = 2
        elif "http" in href and "#" not in href and "javascript:" not in href:
            priority = max(priority, 1)
    return priority


def article_context(document: BeautifulSoup, element: Tag) -> str:
    article = closest(element, "article") or document.find("article")
    if article is None:
        return ""
    paragraphs = [text_content(paragraph) for paragraph in article.find_all("p")]
    return " ".join(text for text in paragraphs if text)


def describe_source(element: Tag) -> str:
    tag = element.name or "element"
    section = closest(element, "section, article, main")
    if section is not None:
        if section.get("id"):
            return f"{tag} (#{section['id']})"
        classes = section.get("class") or []
        if classes:
            return f"{tag} (.{'.'.join(classes)})"
    return tag
