"""String cleanup helpers shared by extraction and matching."""

from __future__ import annotations

import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")

# "<publisher> 12월 3일 14:05" as rendered by Korean portal headline lists.
_PUBLISHER_PREFIX = re.compile(r"^\S+(?:\s+\S+)?\s+\d{1,2}월\s*\d{1,2}일\s+\d{1,2}:\d{2}\s*")

_WORD_CHAR = re.compile(r"[\w가-힣]")


def normalize(text: Optional[str]) -> str:
    """Collapse whitespace runs to single spaces and trim the ends."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def strip_publisher_prefix(text: str) -> str:
    stripped = _PUBLISHER_PREFIX.sub("", text, count=1)
    return stripped.strip() or text


def looks_like_symbols(text: str) -> bool:
    """Return True when the text carries no letters, digits or Hangul."""
    return bool(text) and not _WORD_CHAR.search(text)
