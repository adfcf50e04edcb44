import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from newtox.dom import ORIGINAL_ATTR, OVERLAY_CLASS, make_ref, parse_html
from newtox.injection import InjectionEngine, STYLE_ID
from newtox.models import ElementRef, InjectionMode, InjectionPair

PAGE = """
<html><head></head><body>
<h2 style="color: red">Shocking deal collapses!!</h2>
<h2>Local team wins championship</h2>
<div class="card"><a href="https://example.test/news/7" title="You won't believe this trick">You won't believe this trick</a></div>
</body></html>
"""

ALTERNATIVES = {
    "Shocking deal collapses!!": "Deal falls through",
    "Local team wins championship": "Local team wins championship",
    "You won't believe this trick": "Marketing trick explained",
}


def _pairs(soup):
    pairs = []
    for element in soup.select("h2, a"):
        text = element.get_text().strip()
        pairs.append(InjectionPair(original=text, alternative=ALTERNATIVES[text], element=make_ref(element, text)))
    return pairs


def test_overlay_adds_one_block_per_pair():
    soup = parse_html(PAGE)
    engine = InjectionEngine(soup)

    applied = engine.inject(_pairs(soup), InjectionMode.OVERLAY)

    assert applied == 3
    blocks = soup.select(f".{OVERLAY_CLASS}")
    assert [block.select_one(".newtox-alt-text").get_text() for block in blocks] == [
        "Deal falls through",
        "Local team wins championship",
        "Marketing trick explained",
    ]
    assert soup.find(id=STYLE_ID) is not None


def test_overlay_injection_does_not_accumulate():
    soup = parse_html(PAGE)
    engine = InjectionEngine(soup)
    pairs = _pairs(soup)

    engine.inject(pairs, InjectionMode.OVERLAY)
    engine.inject(pairs, InjectionMode.OVERLAY)

    assert len(soup.select(f".{OVERLAY_CLASS}")) == 3
    assert len(soup.select(f"#{STYLE_ID}")) == 1


def test_overlay_for_links_goes_after_item_container():
    soup = parse_html(PAGE)
    InjectionEngine(soup).inject(_pairs(soup), InjectionMode.OVERLAY)
    card = soup.select_one("div.card")
    assert OVERLAY_CLASS in card.find_next_sibling("div").get("class")


def test_replacement_marks_and_restores():
    soup = parse_html(PAGE)
    engine = InjectionEngine(soup)
    before = [element.get_text() for element in soup.select("h2, a")]

    applied = engine.inject(_pairs(soup), InjectionMode.REPLACEMENT)

    # The unchanged championship headline is left alone.
    assert applied == 2
    first = soup.select("h2")[0]
    assert first.get_text() == "Deal falls through"
    assert "dashed" in first["style"]
    link = soup.find("a")
    assert link["title"] == "Marketing trick explained"
    assert ORIGINAL_ATTR not in soup.select("h2")[1].attrs

    engine.clear()

    assert [element.get_text() for element in soup.select("h2, a")] == before
    assert soup.select(f"[{ORIGINAL_ATTR}]") == []
    assert first["style"] == "color: red"
    assert "style" not in link.attrs
    assert link["title"] == "You won't believe this trick"


def test_replacement_keeps_first_stored_original():
    soup = parse_html(PAGE)
    engine = InjectionEngine(soup)
    first = soup.select("h2")[0]
    ref = make_ref(first, "Shocking deal collapses!!")

    engine.inject([InjectionPair(original="Shocking deal collapses!!", alternative="Deal falls through", element=ref)], "replacement")
    # A second round starts from the restored page, so the stored value stays the real original.
    engine.inject([InjectionPair(original="Shocking deal collapses!!", alternative="Talks end", element=ref)], "replacement")

    assert first.get_text() == "Talks end"
    assert first[ORIGINAL_ATTR] == "Shocking deal collapses!!"


def test_identical_alternatives_do_not_mark_elements():
    soup = parse_html(PAGE)
    pairs = [
        InjectionPair(original=pair.original, alternative=pair.original, element=pair.element)
        for pair in _pairs(soup)
    ]

    applied = InjectionEngine(soup).inject(pairs, InjectionMode.REPLACEMENT)

    assert applied == 0
    assert soup.select(f"[{ORIGINAL_ATTR}]") == []
    assert soup.select("h2")[1].get("style") is None


def test_detached_or_empty_pairs_are_skipped():
    soup = parse_html(PAGE)
    pairs = _pairs(soup)
    soup.select("h2")[1].decompose()
    pairs.append(
        InjectionPair(
            original="Gone headline text here",
            alternative="Still gone",
            element=ElementRef(selector="html > body > section:nth-of-type(4) > h1:nth-of-type(1)", tag="h1"),
        )
    )
    pairs[0] = InjectionPair(original=pairs[0].original, alternative="   ", element=pairs[0].element)

    applied = InjectionEngine(soup).inject(pairs, InjectionMode.OVERLAY)

    # Only the link survives: one pair was blank, one element removed, one never existed.
    assert applied == 1


NESTED_PAGE = """
<html><head></head><body><main>
<h3 class="headline"><a href="https://x.example/a">Shocking deal collapses overnight</a> <span>Daily Planet Wire</span></h3>
</main></body></html>
"""


def _nested_pairs(soup):
    heading = soup.find("h3")
    link = soup.find("a")
    return [
        InjectionPair(
            original="Shocking deal collapses overnight",
            alternative="Deal ends overnight",
            element=make_ref(link, "Shocking deal collapses overnight"),
        ),
        InjectionPair(
            original=heading.get_text(" ", strip=True),
            alternative="Deal ends overnight, wire reports",
            element=make_ref(heading, heading.get_text(" ", strip=True)),
        ),
    ]


def test_replacement_counts_only_elements_still_on_the_page():
    soup = parse_html(NESTED_PAGE)

    applied = InjectionEngine(soup).inject(_nested_pairs(soup), InjectionMode.REPLACEMENT)

    assert applied == 1
    assert len(soup.select(f"[{ORIGINAL_ATTR}]")) == 1


def test_replacing_outer_headline_first_skips_its_link():
    soup = parse_html(NESTED_PAGE)
    pairs = list(reversed(_nested_pairs(soup)))

    applied = InjectionEngine(soup).inject(pairs, InjectionMode.REPLACEMENT)

    assert applied == 1
    assert soup.find("h3").get_text() == "Deal ends overnight, wire reports"


def test_restore_brings_back_nested_markup():
    soup = parse_html(NESTED_PAGE)
    before = soup.find("h3").decode_contents()
    engine = InjectionEngine(soup)

    engine.inject(list(reversed(_nested_pairs(soup))), InjectionMode.REPLACEMENT)
    assert soup.find("h3").find("a") is None

    engine.clear()

    heading = soup.find("h3")
    assert heading.decode_contents() == before
    assert heading.find("a")["href"] == "https://x.example/a"
    assert heading.find("span").get_text() == "Daily Planet Wire"
    assert ORIGINAL_ATTR not in heading.attrs
