"""CLI entrypoint for NewTox."""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path

from newtox.config import DEFAULT_BROWSER, DEFAULT_PROFILE, OUTPUT_ROOT, PREFERENCES_PATH
from newtox.game import GameSession
from newtox.models import InjectionMode
from newtox.preferences import PreferenceStore
from newtox.runner import build_rewriter, play_game, run_on_html, run_on_url


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find news headlines on a page and show neutral rewrites.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--url", help="Page to open in a browser and annotate in place.")
    source.add_argument("--html", help="Saved HTML file to annotate offline.")
    parser.add_argument("--mode", choices=[mode.value for mode in InjectionMode], help="Overlay or replacement.")
    parser.add_argument(
        "--rewriter",
        default="api",
        choices=["api", "openai", "heuristic", "none"],
        help="Where rewrites come from (the HTTP rewrite API by default).",
    )
    parser.add_argument("--api-url", help="Override the rewrite API endpoint.")
    parser.add_argument("--profile", default=DEFAULT_PROFILE, choices=["lenient", "strict"], help="Extraction profile.")
    parser.add_argument("--max-candidates", type=int, help="Cap on headlines per page.")
    parser.add_argument("--outdir", default=str(OUTPUT_ROOT), help="Directory for annotated pages and metadata.")
    parser.add_argument("--headless", action="store_true", help="Run the browser in headless mode.")
    parser.add_argument("--browser", default=DEFAULT_BROWSER, help="chromium, chrome, firefox or webkit.")
    parser.add_argument("--timeout-ms", type=int, default=8000, help="Base timeout for page operations.")
    parser.add_argument(
        "--game",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Turn game mode on or off (remembered between runs).",
    )
    parser.add_argument("--log-level", default="INFO", help="Python logging level.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    log_file = _configure_logging(args.log_level)
    logging.info("Log file: %s", log_file)
    _validate_args(args)

    preferences = PreferenceStore(PREFERENCES_PATH)
    if args.game is not None:
        preferences.set_game_mode(args.game)
    game_mode = preferences.game_mode_enabled
    mode = InjectionMode(args.mode) if args.mode else (InjectionMode.REPLACEMENT if game_mode else InjectionMode.OVERLAY)
    rewriter = build_rewriter(args.rewriter, args.api_url)
    out_dir = Path(args.outdir)

    if args.html:
        _, outcome, _ = asyncio.run(
            run_on_html(
                Path(args.html).expanduser(),
                out_dir,
                rewriter=rewriter,
                mode=mode,
                profile=args.profile,
                max_candidates=args.max_candidates,
            )
        )
        if game_mode and outcome.rewrites:
            play_game(GameSession(preferences), outcome)
        return

    asyncio.run(
        run_on_url(
            args.url,
            out_dir,
            rewriter=rewriter,
            mode=mode,
            profile=args.profile,
            max_candidates=args.max_candidates,
            browser=args.browser,
            headless=args.headless,
            timeout_ms=args.timeout_ms,
            play=game_mode,
        )
    )


def _validate_args(args: argparse.Namespace) -> None:
    if args.html:
        html_path = Path(args.html).expanduser()
        if not html_path.is_file():
            raise SystemExit(f"HTML file not found: {html_path}")
    if args.max_candidates is not None and args.max_candidates < 1:
        raise SystemExit("--max-candidates must be at least 1")


def _configure_logging(log_level: str) -> Path:
    level = getattr(logging, log_level.upper(), logging.INFO)
    log_dir = Path("logs")
    log_dir.mkdir(exist_ok=True)
    log_file = log_dir / f"newtox-{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}.log"
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=[stream_handler, file_handler])
    return log_file


if __name__ == "__main__":
    main()
