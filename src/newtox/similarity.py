"""Fuzzy scoring of a player's guess against the original headline."""

from __future__ import annotations

from typing import List

CORRECT_THRESHOLD = 70

EDIT_WEIGHT = 50
WORD_WEIGHT = 50
POSITION_WEIGHT = 20


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance with unit insert/delete/substitute costs."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous: List[int] = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current[j] = min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost)
        previous = current
    return previous[-1]


def score(guess: str, original: str) -> int:
    """Score ``guess`` against ``original`` on a 0-100 scale.

    Combines three sub-scores so paraphrases are not punished as hard as plain
    edit distance would: whole-string edit distance (up to 50), word-set
    Jaccard overlap (up to 50) and same-index character agreement (up to 20).
    The sum is clamped to 100; an exact case-insensitive match is always 100.
    """
    a = (guess or "").strip().lower()
    b = (original or "").strip().lower()
    if a == b:
        return 100

    longest = max(len(a), len(b))
    edit_part = (1 - levenshtein(a, b) / longest) * EDIT_WEIGHT

    words_a = set(a.split())
    words_b = set(b.split())
    union = words_a | words_b
    word_part = (len(words_a & words_b) / len(union)) * WORD_WEIGHT if union else 0.0

    shortest = min(len(a), len(b))
    if shortest:
        same = sum(1 for idx in range(shortest) if a[idx] == b[idx])
        position_part = (same / shortest) * POSITION_WEIGHT
    else:
        position_part = 0.0

    total = round(edit_part + word_part + position_part)
    return max(0, min(100, int(total)))


def is_correct(value: int) -> bool:
    return value >= CORRECT_THRESHOLD
