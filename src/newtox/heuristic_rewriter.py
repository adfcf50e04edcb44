"""Offline rewriter that strips common clickbait markers when no model is available."""

from __future__ import annotations

import re
from typing import List

from .models import RewriteRequest
from .text import normalize

CLICKBAIT_PHRASES = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"won'?t believe",
        r"shocking",
        r"you need to see",
        r"what happens next",
        r"one weird trick",
        r"literally everyone",
        r"goes viral",
        r"will change your life",
        r"breaks the internet",
    )
]

CLICKBAIT_WORDS = (
    "unbelievable",
    "jaw-dropping",
    "mind-blowing",
    "insane",
    "crazy",
    "stunning",
    "epic",
    "ultimate",
    "secret",
    "exclusive",
    "must-see",
    "viral",
    "쏟아냈다",
)

_WORD_PATTERNS = [re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE) for word in CLICKBAIT_WORDS]
_REPEATED_MARKS = re.compile(r"[!?]{2,}")
_LEADING_JUNK = re.compile(r"^[^A-Za-z0-9가-힣]+")


def clean_clickbait(title: str) -> str:
    """Remove teaser phrases and hype words; return the title unchanged if nothing is left."""
    cleaned = normalize(title)
    for pattern in CLICKBAIT_PHRASES:
        cleaned = pattern.sub("", cleaned)
    for pattern in _WORD_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    cleaned = _REPEATED_MARKS.sub("", cleaned)
    cleaned = normalize(_LEADING_JUNK.sub("", cleaned))
    if not cleaned:
        return title.strip()
    return cleaned[0].upper() + cleaned[1:]


def first_sentence(text: str) -> str:
    cleaned = normalize(text)
    match = re.search(r"([^.!?]{15,}?[.!?])\s", cleaned)
    return match.group(1).strip() if match else cleaned[:160].strip()


class HeuristicRewriter:
    """Rule-based stand-in for the rewrite service; keeps titles and order intact."""

    name = "heuristic"

    def __init__(self, use_context: bool = False) -> None:
        self.use_context = use_context

    async def rewrite(self, request: RewriteRequest) -> List[str]:
        sentence = first_sentence(request.context) if (self.use_context and request.context) else ""
        results: List[str] = []
        for title in request.titles:
            cleaned = clean_clickbait(title)
            if sentence and len(cleaned) < 12:
                cleaned = sentence
            results.append(cleaned)
        return results
