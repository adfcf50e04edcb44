"""Durable user preference: whether game mode is switched on."""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PreferenceStore:
    def __init__(self, path: Path | None = None) -> None:
        self.game_mode_enabled = False
        self._path: Path | None = None
        if path is not None:
            self.configure(path)

    def configure(self, path: Path) -> None:
        self._path = path
        if path.exists():
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                self.game_mode_enabled = bool(data.get("game_mode_enabled", False))
            except (OSError, ValueError, AttributeError) as exc:
                logger.warning("Ignoring unreadable preferences at %s: %s", path, exc)
                self.game_mode_enabled = False

    def set_game_mode(self, enabled: bool) -> None:
        self.game_mode_enabled = bool(enabled)
        self._persist()

    def _persist(self) -> None:
        if not self._path:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            payload = {"game_mode_enabled": self.game_mode_enabled}
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not save preferences to %s: %s", self._path, exc)
