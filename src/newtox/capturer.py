"""Store annotated pages and run metadata on disk."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from playwright.async_api import Error as PlaywrightError, Page

from .models import RewriteOutcome


def _metadata(name: str, url: Optional[str], outcome: Optional[RewriteOutcome], extra: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "name": name,
        "url": url,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "rewrite_source": outcome.source if outcome else None,
        "warning": outcome.warning if outcome else None,
        "rewrites": [item.model_dump() for item in outcome.rewrites] if outcome else [],
        "extra": dict(extra or {}),
    }


def save_document(
    html: str,
    out_dir: Path,
    name: str,
    outcome: Optional[RewriteOutcome] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Path:
    """Write annotated HTML plus a JSON sidecar; returns the HTML path."""
    out_dir.mkdir(parents=True, exist_ok=True)
    html_path = out_dir / f"{name}.html"
    html_path.write_text(html, encoding="utf-8")
    metadata = _metadata(name, None, outcome, extra)
    (out_dir / f"{name}.json").write_text(json.dumps(metadata, indent=2, ensure_ascii=False), encoding="utf-8")
    return html_path


async def capture_page(
    page: Page,
    out_dir: Path,
    name: str,
    outcome: Optional[RewriteOutcome] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    metadata = _metadata(name, page.url if hasattr(page, "url") else None, outcome, extra)

    try:
        await page.screenshot(path=str(out_dir / f"{name}.png"), full_page=True)
    except PlaywrightError as exc:
        metadata["extra"]["screenshot_error"] = str(exc)

    try:
        html = await page.content()
        (out_dir / f"{name}.html").write_text(html, encoding="utf-8")
    except PlaywrightError as exc:
        metadata["extra"]["html_error"] = str(exc)

    (out_dir / f"{name}.json").write_text(json.dumps(metadata, indent=2, ensure_ascii=False), encoding="utf-8")
