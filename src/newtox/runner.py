"""End-to-end runs: analyze a page, rewrite its headlines, annotate the page."""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Callable, Optional

from openai import AsyncOpenAI
from playwright.async_api import Error as PlaywrightError, async_playwright

from .browser import BrowserHost, launch_context
from .capturer import capture_page, save_document
from .config import OPENAI_MODEL, OUTPUT_ROOT, PREFERENCES_PATH, get_openai_api_key
from .extractor import CandidateExtractor
from .game import GameSession
from .heuristic_rewriter import HeuristicRewriter
from .llm_rewriter import OpenAIRewriter
from .models import InjectionMode, RewriteOutcome
from .preferences import PreferenceStore
from .rewriter import HttpRewriteClient, TitleRewriter, rewrite_titles
from .session import PageSession

logger = logging.getLogger(__name__)


def build_rewriter(kind: str, api_url: Optional[str] = None) -> Optional[TitleRewriter]:
    kind = (kind or "api").lower()
    if kind == "none":
        return None
    if kind == "heuristic":
        return HeuristicRewriter()
    if kind == "openai":
        api_key = get_openai_api_key()
        if not api_key:
            logger.warning("OPENAI_API_KEY missing; using heuristic rewriter only")
            return HeuristicRewriter()
        logger.info("OpenAI rewriter enabled (%s)", OPENAI_MODEL)
        return OpenAIRewriter(client=AsyncOpenAI(api_key=api_key), model=OPENAI_MODEL)
    if kind == "api":
        return HttpRewriteClient(url=api_url) if api_url else HttpRewriteClient()
    raise ValueError(f"Unknown rewriter: {kind}")


async def run_on_html(
    html_path: Path,
    out_dir: Path = OUTPUT_ROOT,
    *,
    rewriter: Optional[TitleRewriter] = None,
    mode: InjectionMode = InjectionMode.OVERLAY,
    profile: Optional[str] = None,
    max_candidates: Optional[int] = None,
) -> tuple[PageSession, RewriteOutcome, int]:
    """Annotate a saved HTML page and write the result next to a JSON summary."""
    session = PageSession(html_path.read_text(encoding="utf-8"), extractor=CandidateExtractor(profile))
    candidates = session.analyze(max_candidates)
    if not candidates:
        logger.info("No news-style titles detected in %s", html_path)
        return session, RewriteOutcome(source="none"), 0

    outcome = await rewrite_titles(rewriter, candidates)
    if outcome.warning:
        logger.warning(outcome.warning)
    applied = session.apply(outcome.rewrites, mode)
    target = save_document(
        session.html(),
        out_dir,
        _slugify(html_path.stem),
        outcome=outcome,
        extra={"mode": InjectionMode(mode).value, "applied": applied, "candidates": len(candidates)},
    )
    logger.info("Annotated %s of %s headlines -> %s", applied, len(candidates), target)
    return session, outcome, applied


async def run_on_url(
    url: str,
    out_dir: Path = OUTPUT_ROOT,
    *,
    rewriter: Optional[TitleRewriter] = None,
    mode: InjectionMode = InjectionMode.OVERLAY,
    profile: Optional[str] = None,
    max_candidates: Optional[int] = None,
    browser: str = "chromium",
    headless: bool = True,
    timeout_ms: int = 8000,
    play: bool = False,
    input_fn: Callable[[str], str] = input,
) -> RewriteOutcome:
    async with async_playwright() as pw:
        context = await launch_context(pw, browser, headless)
        try:
            page = await context.new_page()
            host = BrowserHost(page, PageSession(extractor=CandidateExtractor(profile)), timeout_ms=timeout_ms)
            try:
                await host.goto(url)
            except PlaywrightError as exc:
                logger.warning("Navigation to %s failed: %s", url, exc)
                return RewriteOutcome(source="none", warning=str(exc))

            analysis = await host.analyze(max_candidates)
            if not analysis.titles:
                logger.info("No news-style titles detected on this page.")
                return RewriteOutcome(source="none")

            outcome = await rewrite_titles(rewriter, host.session.last_candidates)
            if outcome.warning:
                logger.warning(outcome.warning)
            result = await host.apply(outcome.rewrites, mode)
            logger.info("Applied %s of %s rewrites (%s)", result.count, result.requested, result.mode.value)
            await capture_page(
                page,
                out_dir,
                _slugify(url),
                outcome=outcome,
                extra={"mode": result.mode.value, "applied": result.count},
            )
            if play:
                game = GameSession(PreferenceStore(PREFERENCES_PATH))
                await play_game_async(game, outcome, input_fn=input_fn)
                await host.restore()
            return outcome
        finally:
            await context.close()


def play_game(
    game: GameSession,
    outcome: RewriteOutcome,
    *,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> None:
    """Show each rewritten headline and score the player's guess of the original."""
    playable = [item for item in outcome.rewrites if item.alternative != item.original]
    if not playable:
        output_fn("Nothing to guess: every headline came back unchanged.")
        return
    game.start(playable)
    for idx, rewrite in enumerate(playable):
        output_fn(f"[{idx + 1}/{len(playable)}] {rewrite.alternative}")
        answer = input_fn("Original headline? (blank to reveal) ").strip()
        if not answer:
            output_fn(f"  -> {game.reveal(idx)}")
            continue
        result = game.guess(idx, answer)
        verdict = "correct" if result.correct else "not quite"
        output_fn(f"  {result.score}/100 ({verdict}) -> {result.original}")
    state = game.state
    output_fn(f"Score {state.score:.0f}, {state.correct_count} correct out of {state.attempts} attempts.")


async def play_game_async(
    game: GameSession,
    outcome: RewriteOutcome,
    *,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> None:
    """Run :func:`play_game` in a worker thread so prompts do not stall the event loop."""
    await asyncio.to_thread(play_game, game, outcome, input_fn=input_fn, output_fn=output_fn)


def _slugify(value: str) -> str:
    text = re.sub(r"[^a-zA-Z0-9]+", "-", value).strip("-").lower()
    return text[:80] or "page"
