import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from newtox.dom import parse_html, resolve
from newtox.extractor import CandidateExtractor, best_text

HEADLINES_PAGE = """
<html><head><title>Daily</title></head><body>
<h2>Shocking deal collapses!!</h2>
<h2>Local team wins championship</h2>
<h2>You won't believe this trick</h2>
</body></html>
"""


def test_three_headings_become_ranked_candidates():
    candidates = CandidateExtractor("strict").collect(parse_html(HEADLINES_PAGE))

    assert [item.id for item in candidates] == [0, 1, 2]
    # Equal priority, so longer titles first and discovery order breaks the length tie.
    assert [item.original for item in candidates] == [
        "Local team wins championship",
        "You won't believe this trick",
        "Shocking deal collapses!!",
    ]
    assert all(item.source == "h2" for item in candidates)


def test_lenient_profile_keeps_discovery_order():
    candidates = CandidateExtractor("lenient").collect(parse_html(HEADLINES_PAGE))
    assert [item.original for item in candidates] == [
        "Shocking deal collapses!!",
        "Local team wins championship",
        "You won't believe this trick",
    ]


def test_extraction_is_deterministic():
    extractor = CandidateExtractor()
    first = extractor.collect(parse_html(HEADLINES_PAGE))
    second = extractor.collect(parse_html(HEADLINES_PAGE))
    assert [item.model_dump() for item in first] == [item.model_dump() for item in second]


def test_duplicates_are_collapsed_case_insensitively():
    html = "<h2>Markets rally after rate decision</h2><h3>MARKETS RALLY AFTER RATE DECISION</h3>"
    candidates = CandidateExtractor().collect(parse_html(html))
    assert len(candidates) == 1
    assert candidates[0].original == "Markets rally after rate decision"


def test_length_limits_follow_profile():
    long_title = "Very long headline " * 12
    html = f"<h2>Too short</h2><h2>Nine char</h2><h2>{long_title}</h2><h2>Acceptable headline text</h2>"
    strict = CandidateExtractor("strict").collect(parse_html(html))
    lenient = CandidateExtractor("lenient").collect(parse_html(html))

    assert [item.original for item in strict] == ["Acceptable headline text"]
    assert all(8 <= len(item.original) <= 200 for item in strict)
    assert "Nine char" in [item.original for item in lenient]
    assert any(len(item.original) > 200 for item in lenient)


def test_symbol_only_text_is_rejected():
    html = "<h2>••••••••••••</h2><h2>Storm closes coastal highway</h2>"
    candidates = CandidateExtractor().collect(parse_html(html))
    assert [item.original for item in candidates] == ["Storm closes coastal highway"]


def test_content_area_and_article_links_rank_higher():
    html = """
    <h2>Outside heading that is much longer than the rest</h2>
    <main><h3>Inside main content heading</h3></main>
    <ul><li><a href="https://site.example/news/123">Council approves budget</a></li></ul>
    """
    candidates = CandidateExtractor().collect(parse_html(html))
    assert [item.original for item in candidates] == [
        "Council approves budget",
        "Inside main content heading",
        "Outside heading that is much longer than the rest",
    ]
    assert [item.priority for item in candidates] == [2, 1, 0]


def test_publisher_prefix_is_stripped_in_strict_profile():
    html = '<ul><li><a href="/news/1">연합뉴스 12월 3일 14:05 정부, 새 예산안 발표했다</a></li></ul>'
    candidates = CandidateExtractor("strict").collect(parse_html(html))
    assert candidates[0].original == "정부, 새 예산안 발표했다"


def test_emphasis_child_is_preferred():
    soup = parse_html('<a href="/x"><strong>Strong headline text inside</strong><span>3 min ago</span></a>')
    assert best_text(soup.find("a")) == "Strong headline text inside"


def test_aria_label_used_when_element_has_no_text():
    soup = parse_html('<a href="/x" aria-label="Rates held steady for third month"><img src="x.png"></a>')
    assert best_text(soup.find("a")) == "Rates held steady for third month"


def test_navigation_chrome_is_skipped():
    html = """
    <nav><a href="/login">로그인</a><a href="/home">Top stories</a></nav>
    <footer><p class="copyright">Copyright 2024 Example. All rights reserved.</p></footer>
    <article><h1>Bridge reopens after repairs finish</h1><p>The bridge reopened on Monday.</p></article>
    """
    candidates = CandidateExtractor().collect(parse_html(html))
    assert [item.original for item in candidates] == ["Bridge reopens after repairs finish"]
    assert candidates[0].context == "The bridge reopened on Monday."


def test_falls_back_to_document_and_meta_titles():
    html = """
    <html><head>
      <title>Election results live updates</title>
      <meta property="og:title" content="Election results live updates">
      <meta name="twitter:title" content="Live: the count continues overnight">
    </head><body><p>short</p></body></html>
    """
    candidates = CandidateExtractor().collect(parse_html(html))
    assert [(item.original, item.source) for item in candidates] == [
        ("Election results live updates", "document-title"),
        ("Live: the count continues overnight", "twitter:title"),
    ]
    assert candidates[0].element is not None and candidates[0].element.tag == "title"


def test_candidates_are_truncated_and_renumbered():
    html = "".join(f"<h2>Headline number {idx:02d} of the day</h2>" for idx in range(30))
    candidates = CandidateExtractor("strict").collect(parse_html(html), max_candidates=5)
    assert len(candidates) == 5
    assert [item.id for item in candidates] == list(range(5))
    assert len(CandidateExtractor("strict").collect(parse_html(html))) == 20


def test_element_refs_resolve_back_to_source():
    soup = parse_html(HEADLINES_PAGE)
    for candidate in CandidateExtractor().collect(soup):
        element = resolve(soup, candidate.element)
        assert element is not None
        assert element.get_text().strip() == candidate.original


def test_empty_document_yields_no_candidates():
    assert CandidateExtractor().collect(parse_html("")) == []
