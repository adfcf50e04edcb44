"""BeautifulSoup helpers mirroring the few browser DOM calls the extractor needs."""

from __future__ import annotations

import logging
import re
from typing import Iterator, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from .models import ElementRef
from .text import normalize

logger = logging.getLogger(__name__)

OVERLAY_CLASS = "newtox-alt-block"
ORIGINAL_ATTR = "data-newtox-original"

_SIMPLE_TAG = re.compile(r"^[a-zA-Z][a-zA-Z0-9-]*$")


def parse_html(html: str) -> BeautifulSoup:
    soup = BeautifulSoup(html or "", "html.parser")
    if soup.html is None:
        # Fragments get a root so every element path starts at ``html``.
        soup = BeautifulSoup(f"<html><body>{html or ''}</body></html>", "html.parser")
    return soup


def closest(element: Optional[Tag], selector: str) -> Optional[Tag]:
    """Nearest ancestor-or-self matching ``selector``, like ``Element.closest``."""
    if element is None:
        return None
    return element.css.closest(selector)


def text_content(element: Tag) -> str:
    return normalize(element.get_text())


def direct_text(element: Tag) -> str:
    """First non-blank text node directly under ``element``."""
    for child in element.children:
        if type(child) is NavigableString and child.strip():
            return normalize(str(child))
    return ""


def first_child_element(element: Tag) -> Optional[Tag]:
    for child in element.children:
        if isinstance(child, Tag):
            return child
    return None


def is_attached(element: Optional[Tag], root: Optional[Tag] = None) -> bool:
    """True when ``element`` still hangs off ``root`` (or off any parent when no root is given)."""
    if element is None or element.parent is None:
        return False
    if root is None:
        return True
    return any(parent is root for parent in element.parents)


def inside_overlay(element: Tag) -> bool:
    return closest(element, f".{OVERLAY_CLASS}") is not None


def css_path(element: Tag) -> str:
    """Build a root-anchored ``tag:nth-of-type(n)`` path usable by soupsieve and browsers."""
    steps: List[str] = []
    node = element
    while isinstance(node, Tag) and not isinstance(node, BeautifulSoup):
        parent = node.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            steps.append(node.name)
            break
        if _SIMPLE_TAG.match(node.name):
            same_type = [child for child in parent.children if isinstance(child, Tag) and child.name == node.name]
            steps.append(f"{node.name}:nth-of-type({_position(same_type, node)})")
        else:
            siblings = [child for child in parent.children if isinstance(child, Tag)]
            steps.append(f"*:nth-child({_position(siblings, node)})")
        node = parent
    steps.reverse()
    return " > ".join(steps)


def _position(siblings: List[Tag], node: Tag) -> int:
    # Tags compare by markup, so identity decides the position.
    for idx, sibling in enumerate(siblings, start=1):
        if sibling is node:
            return idx
    return 1


def make_ref(element: Tag, text: str) -> ElementRef:
    return ElementRef(selector=css_path(element), tag=element.name, text=text)


def resolve(document: BeautifulSoup, ref: Optional[ElementRef]) -> Optional[Tag]:
    """Re-acquire the element behind ``ref``; None when it is gone."""
    if ref is None or not ref.selector:
        return None
    try:
        element = document.select_one(ref.selector)
    except Exception as exc:  # noqa: BLE001 - soupsieve raises several selector errors
        logger.debug("Unusable element path %s: %s", ref.selector, exc)
        return None
    if element is None or (ref.tag and element.name != ref.tag):
        return None
    return element


def iter_elements(document: BeautifulSoup) -> Iterator[Tag]:
    root = document.body or document
    yield from root.find_all(True)
