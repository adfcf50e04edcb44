"""Selector and phrase tables driving headline detection.

These tables are data: site-specific tweaks belong here rather than in the
extraction code, and each table can be exercised on its own in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

# Ordered: earlier patterns win discovery-order ties. Every pattern is queried,
# so order never decides whether an element is found.
HEADING_SELECTORS: Tuple[str, ...] = (
    "article h1",
    "article h2",
    "article h3",
    "article h4",
    "main h1",
    "main h2",
    "main h3",
    "main h4",
    '[role="main"] h1',
    '[role="main"] h2',
    '[role="main"] h3',
    '[role="main"] h4',
    "h1",
    "h2",
    "h3",
    "h4",
    '[role="heading"]',
    "[aria-level]",
    "header h1",
    "header h2",
    "header h3",
    "header h4",
)

# Google News style anchors and obfuscated class names.
PORTAL_SELECTORS: Tuple[str, ...] = (
    'a[role="heading"]',
    "a[aria-label]",
    "a[jsname][href]",
    'a[class*="DY5T1d"]',
    'a[class*="JtKRv"]',
    "a[aria-label][href]",
    'span[class*="DY5T1d"]',
    'div[class*="DY5T1d"]',
)

# Class/id hints and list-style article links common on Korean news portals.
NEWS_SITE_SELECTORS: Tuple[str, ...] = (
    ".article-title",
    ".news-title",
    ".headline",
    '[class*="title"]',
    '[class*="headline"]',
    '[id*="title"]',
    '[id*="headline"]',
    'a[href*="/view/"]',
    'a[href*="/news/"]',
    "li a[href]",
    "ul li a",
    "ol li a",
    ".list-item a",
    '[class*="list"] a[href]',
    "h3 a",
    "h2 a",
    "h4 a",
    "strong a[href]",
    "b a[href]",
    "dt a[href]",
    "dd a[href]",
)

SELECTOR_PATTERNS: Tuple[str, ...] = HEADING_SELECTORS + PORTAL_SELECTORS + NEWS_SITE_SELECTORS

# Elements whose nested bold text is usually the real headline.
EMPHASIS_TAGS: Tuple[str, ...] = ("strong", "b")

HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})

CONTENT_LANDMARKS = 'main, article, [role="main"], [role="article"]'
CONTENT_CONTAINERS = '[class*="content"], [class*="article"], [class*="post"], [id*="content"], [id*="article"]'

ARTICLE_URL_MARKERS: Tuple[str, ...] = ("/view/", "/news/", "/article/")

# Containers an overlay goes after when the headline is a bare link.
ITEM_CONTAINER_HINTS: Tuple[str, ...] = ("article", "item", "card", "story", "entry", "post")

FALLBACK_META: Tuple[Tuple[str, str], ...] = (
    ('meta[property="og:title"]', "og:title"),
    ('meta[name="twitter:title"]', "twitter:title"),
)


@dataclass(frozen=True)
class ExclusionRules:
    """Chrome/boilerplate phrases that never count as headlines."""

    exact_phrases: Tuple[str, ...] = ("Google 앱", "관련 콘텐츠")
    always_contains: Tuple[str, ...] = ("google 계정", "all rights reserved", "copyright", "저작권")
    chrome_words: Tuple[str, ...] = (
        "로그인", "회원가입", "검색", "메뉴", "닫기", "공유",
        "댓글", "좋아요", "구독", "알림", "설정", "더보기",
        "이전", "다음", "이전글", "다음글", "목록", "목차",
        "홈", "홈으로", "맨위로", "top", "bottom",
        "login", "log in", "sign in", "sign up", "search", "menu", "share",
        "comment", "subscribe", "breadcrumb", "newsletter",
    )
    strict_landmarks: str = 'nav, header, footer, [role="navigation"], [role="banner"], [role="contentinfo"]'
    loose_landmarks: str = (
        'nav, header, footer, .nav, .header, .footer, '
        '[role="navigation"], [role="banner"], [role="contentinfo"]'
    )
    short_text_limit: int = 20


DEFAULT_RULES = ExclusionRules()


@dataclass(frozen=True)
class ExtractionProfile:
    """Tunable limits for one extraction flavour."""

    name: str
    min_length: int = 8
    max_length: int | None = None
    max_candidates: int = 12
    tie_break: str = "discovery"  # "discovery" | "length"
    strip_prefix: bool = False
    selectors: Tuple[str, ...] = field(default=SELECTOR_PATTERNS)


PROFILES: Dict[str, ExtractionProfile] = {
    "lenient": ExtractionProfile(
        name="lenient",
        min_length=8,
        max_length=None,
        max_candidates=12,
        tie_break="discovery",
        strip_prefix=False,
        selectors=HEADING_SELECTORS + PORTAL_SELECTORS,
    ),
    "strict": ExtractionProfile(
        name="strict",
        min_length=10,
        max_length=200,
        max_candidates=20,
        tie_break="length",
        strip_prefix=True,
    ),
}


def get_profile(name: str | None) -> ExtractionProfile:
    """Return the named profile, defaulting to the strict one."""
    return PROFILES.get((name or "strict").lower(), PROFILES["strict"])
