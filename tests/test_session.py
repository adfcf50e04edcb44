from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from newtox.dom import OVERLAY_CLASS, ORIGINAL_ATTR  # noqa: E402
from newtox.models import Candidate, ElementRef, InjectionMode, Rewrite  # noqa: E402
from newtox.session import PageSession, analyze_with_retry, match_rewrites, rescan_for_text  # noqa: E402

PAGE = """
<html><head><title>Daily</title></head><body>
<h2>Shocking deal collapses!!</h2>
<h2>Local team wins championship</h2>
<h2>You won't believe this trick</h2>
</body></html>
"""


def test_apply_matches_rewrites_by_text():
    session = PageSession(PAGE)
    candidates = session.analyze()
    rewrites = [Rewrite(id=item.id, original=item.original.upper(), alternative=f"alt {item.id}") for item in candidates]

    assert session.apply(rewrites, InjectionMode.OVERLAY) == 3
    assert len(session.document.select(f".{OVERLAY_CLASS}")) == 3


def test_apply_falls_back_to_candidate_id():
    session = PageSession(PAGE)
    candidates = session.analyze()
    rewrites = [Rewrite(id=candidates[1].id, original="text that no longer matches", alternative="Team takes title")]

    assert session.apply(rewrites, InjectionMode.REPLACEMENT) == 1
    replaced = session.document.select_one(f"[{ORIGINAL_ATTR}]")
    assert replaced.get_text() == "Team takes title"
    assert replaced[ORIGINAL_ATTR] == candidates[1].original


def test_repeated_apply_is_not_cumulative():
    session = PageSession(PAGE)
    candidates = session.analyze()
    rewrites = [Rewrite(id=item.id, original=item.original, alternative="Neutral version") for item in candidates]

    session.apply(rewrites, InjectionMode.REPLACEMENT)
    session.apply(rewrites, InjectionMode.OVERLAY)

    assert session.document.select(f"[{ORIGINAL_ATTR}]") == []
    assert len(session.document.select(f".{OVERLAY_CLASS}")) == 3


def test_restore_returns_page_to_original_text():
    session = PageSession(PAGE)
    candidates = session.analyze()
    before = [h2.get_text() for h2 in session.document.select("h2")]
    session.apply([Rewrite(id=c.id, original=c.original, alternative="Changed") for c in candidates], "replacement")

    assert session.restore() == 3
    assert [h2.get_text() for h2 in session.document.select("h2")] == before


def test_stale_candidate_element_is_found_by_rescan():
    session = PageSession("<div><p>Officials confirm river levels are falling</p></div>")
    stale = [
        Candidate(
            id=0,
            original="Officials confirm river levels are falling",
            element=ElementRef(selector="html > body > section:nth-of-type(2) > h3:nth-of-type(1)", tag="h3"),
        )
    ]
    rewrites = [Rewrite(id=0, original="Officials confirm river levels are falling", alternative="River levels fall")]

    pairs = match_rewrites(session.document, rewrites, fresh=[], stale=stale)

    assert len(pairs) == 1
    assert pairs[0].element.tag == "p"


def test_unmatched_rewrites_are_dropped():
    session = PageSession(PAGE)
    pairs = match_rewrites(
        session.document,
        [
            Rewrite(id=None, original="Headline that is nowhere on the page", alternative="x"),
            Rewrite(id=0, original="Shocking deal collapses!!", alternative=""),
        ],
        fresh=session.analyze(),
    )
    assert pairs == []


def test_rescan_prefers_innermost_element():
    session = PageSession("<section><h3><a href='/a'>Ferry service resumes on weekends</a></h3></section>")
    element = rescan_for_text(session.document, "Ferry service resumes on weekends")
    assert element.name == "a"


def test_load_resets_candidate_history():
    session = PageSession(PAGE)
    session.analyze()
    session.load("<p>nothing here</p>")
    assert session.last_candidates == []
    assert session.prior_candidates == []


@pytest.mark.asyncio
async def test_analyze_retries_once_for_late_headlines():
    session = PageSession("<html><body><div id='app'></div></body></html>")
    calls = []

    async def refresh() -> str:
        calls.append(1)
        return PAGE

    candidates, retried = await analyze_with_retry(session, refresh=refresh, delay_ms=0)

    assert retried is True
    assert len(calls) == 1
    assert len(candidates) == 3


@pytest.mark.asyncio
async def test_analyze_without_retry_when_headlines_present():
    session = PageSession(PAGE)

    async def refresh() -> str:
        raise AssertionError("retry should not run")

    candidates, retried = await analyze_with_retry(session, refresh=refresh, delay_ms=0)

    assert retried is False
    assert [item.id for item in candidates] == [0, 1, 2]
