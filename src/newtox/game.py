"""Guess-the-original game played over replaced headlines."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .models import GameState, GuessResult, Rewrite
from .preferences import PreferenceStore
from .similarity import is_correct, score

logger = logging.getLogger(__name__)


class GameSession:
    """Keeps score for one UI session; only the on/off preference outlives it."""

    def __init__(self, preferences: Optional[PreferenceStore] = None) -> None:
        self.preferences = preferences or PreferenceStore()
        self.state = GameState()

    @property
    def enabled(self) -> bool:
        return self.preferences.game_mode_enabled

    def toggle(self, enabled: bool) -> None:
        self.preferences.set_game_mode(enabled)
        if enabled:
            self.state = GameState(active_rewrites=list(self.state.active_rewrites))

    def start(self, rewrites: Sequence[Rewrite]) -> None:
        """Reset the scoreboard for a freshly analyzed page."""
        self.state = GameState(active_rewrites=list(rewrites))

    def guess(self, index: int, text: str) -> GuessResult:
        rewrite = self._rewrite_at(index)
        if index in self.state.revealed:
            raise ValueError(f"Headline {index} was already answered")
        value = score(text, rewrite.original)
        correct = is_correct(value)
        self.state.attempts += 1
        self.state.score += value
        if correct:
            self.state.correct_count += 1
        self.state.revealed.add(index)
        logger.debug("Guess for #%s scored %s (correct=%s)", index, value, correct)
        return GuessResult(index=index, score=value, correct=correct, original=rewrite.original)

    def reveal(self, index: int) -> str:
        rewrite = self._rewrite_at(index)
        if index not in self.state.revealed:
            self.state.attempts += 1
            self.state.revealed.add(index)
        return rewrite.original

    def _rewrite_at(self, index: int) -> Rewrite:
        if index < 0 or index >= len(self.state.active_rewrites):
            raise IndexError(f"No active headline at position {index}")
        return self.state.active_rewrites[index]
