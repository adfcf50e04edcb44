"""Classify candidate text as page chrome (navigation, legal, branding) or content."""

from __future__ import annotations

from typing import Optional

from bs4 import Tag

from .dom import closest
from .heuristics import DEFAULT_RULES, ExclusionRules
from .text import normalize


def should_exclude(element: Optional[Tag], text: str, rules: ExclusionRules = DEFAULT_RULES) -> bool:
    """Return True when ``text`` found at ``element`` looks like UI chrome.

    ``element`` is None for document-level fallbacks (``<title>``, meta tags),
    in which case only the phrase rules apply. This is a heuristic: short real
    headlines inside a header may be dropped and odd chrome may slip through.
    """
    trimmed = normalize(text)
    lowered = trimmed.lower()

    if trimmed in rules.exact_phrases:
        return True
    if lowered in {word.lower() for word in rules.chrome_words}:
        return True
    if any(phrase in lowered for phrase in rules.always_contains):
        return True

    if element is None:
        return False

    if any(word.lower() in lowered for word in rules.chrome_words):
        if closest(element, rules.strict_landmarks) is not None:
            return True

    if len(trimmed) < rules.short_text_limit and closest(element, rules.loose_landmarks) is not None:
        return True

    return False
