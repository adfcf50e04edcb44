"""Show rewritten headlines next to, or instead of, the originals in a document."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Tag

from .dom import ORIGINAL_ATTR, OVERLAY_CLASS, is_attached, resolve, text_content
from .heuristics import ITEM_CONTAINER_HINTS
from .models import InjectionMode, InjectionPair
from .text import normalize

logger = logging.getLogger(__name__)

STYLE_ID = "newtox-alt-style"
LABEL_TEXT = "Alternative"
MARKER_STYLE = "border-bottom: 2px dashed #3b82f6; padding-bottom: 2px;"

_STYLE_ATTR = f"{ORIGINAL_ATTR}-style"
_MARKUP_ATTR = f"{ORIGINAL_ATTR}-html"
_SAVED_ATTRS = ("title", "aria-label")

OVERLAY_CSS = """
.newtox-alt-block {
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
  margin-top: 4px;
  padding: 6px 8px;
  background: #eff6ff;
  border: 1px solid #3b82f6;
  border-left-width: 3px;
  border-radius: 6px;
  color: #111827;
  line-height: 1.4;
}
.newtox-alt-label {
  font-size: 11px;
  text-transform: uppercase;
  letter-spacing: 0.4px;
  color: #2563eb;
  margin-bottom: 4px;
  font-weight: 600;
}
.newtox-alt-text {
  font-size: 14px;
  font-weight: 600;
}
"""


class InjectionEngine:
    """Annotate a parsed document; every call starts by undoing earlier annotations."""

    def __init__(self, document: BeautifulSoup) -> None:
        self.document = document

    def inject(self, pairs: Sequence[InjectionPair], mode: InjectionMode = InjectionMode.OVERLAY) -> int:
        """Apply ``pairs`` and return how many elements were annotated.

        Pairs whose element is gone, or whose alternative is empty, are skipped
        silently. In replacement mode an alternative identical to the original
        is skipped too, so unchanged headlines never carry the altered marker.
        """
        mode = InjectionMode(mode)
        self.clear()
        self.ensure_styles()

        resolved: List[Tuple[Tag, InjectionPair]] = []
        for pair in pairs:
            if not normalize(pair.alternative):
                continue
            element = resolve(self.document, pair.element)
            if element is None or not _still_matches(element, pair.original):
                logger.debug("Skipping detached element for %r", pair.original)
                continue
            resolved.append((element, pair))

        applied = 0
        replaced: List[Tag] = []
        for element, pair in resolved:
            # An earlier replacement may have rewritten this element's ancestor.
            if not is_attached(element, self.document):
                logger.debug("Skipping element detached during injection for %r", pair.original)
                continue
            if mode is InjectionMode.REPLACEMENT:
                if any(_nested(element, other) for other in replaced):
                    logger.debug("Skipping %r nested in an already replaced headline", pair.original)
                    continue
                if self._replace(element, pair):
                    replaced.append(element)
                    applied += 1
            else:
                self._overlay(element, pair.alternative)
                applied += 1
        logger.info("Injected %s of %s rewrites (%s)", applied, len(pairs), mode.value)
        return applied

    def clear(self) -> int:
        """Remove overlay blocks and restore replaced text. Returns elements touched."""
        touched = 0
        for block in self.document.select(f".{OVERLAY_CLASS}"):
            block.decompose()
            touched += 1
        for element in self.document.select(f"[{ORIGINAL_ATTR}]"):
            _restore(element)
            touched += 1
        return touched

    def ensure_styles(self) -> None:
        if self.document.find(id=STYLE_ID) is not None:
            return
        head = self.document.head
        if head is None:
            head = self.document.new_tag("head")
            root = self.document.html or self.document
            root.insert(0, head)
        style = self.document.new_tag("style", id=STYLE_ID)
        style.string = OVERLAY_CSS
        head.append(style)

    def _overlay(self, element: Tag, alternative: str) -> None:
        block = self.document.new_tag("div", attrs={"class": OVERLAY_CLASS})
        label = self.document.new_tag("div", attrs={"class": "newtox-alt-label"})
        label.string = LABEL_TEXT
        text = self.document.new_tag("div", attrs={"class": "newtox-alt-text"})
        text.string = alternative
        block.append(label)
        block.append(text)
        _insert_target(element).insert_after(block)

    def _replace(self, element: Tag, pair: InjectionPair) -> bool:
        if normalize(pair.alternative) == normalize(pair.original):
            return False
        if ORIGINAL_ATTR not in element.attrs:
            element[ORIGINAL_ATTR] = element.get_text()
            element[_MARKUP_ATTR] = element.decode_contents()
            for attr in _SAVED_ATTRS:
                if element.get(attr):
                    element[f"{ORIGINAL_ATTR}-{attr}"] = element[attr]
            if element.get("style"):
                element[_STYLE_ATTR] = element["style"]
        element.string = pair.alternative
        if element.name == "a":
            for attr in _SAVED_ATTRS:
                if element.get(attr):
                    element[attr] = pair.alternative
        base_style = element.get(_STYLE_ATTR, "")
        element["style"] = f"{base_style.rstrip('; ')}; {MARKER_STYLE}" if base_style else MARKER_STYLE
        return True


def _restore(element: Tag) -> None:
    markup = element.get(_MARKUP_ATTR)
    original = element.get(ORIGINAL_ATTR)
    if markup is not None:
        element.clear()
        for child in list(BeautifulSoup(markup, "html.parser").contents):
            element.append(child.extract())
        del element[_MARKUP_ATTR]
    elif original is not None:
        element.string = original
    for attr in _SAVED_ATTRS:
        saved_key = f"{ORIGINAL_ATTR}-{attr}"
        if saved_key in element.attrs:
            element[attr] = element[saved_key]
            del element[saved_key]
    if _STYLE_ATTR in element.attrs:
        element["style"] = element[_STYLE_ATTR]
        del element[_STYLE_ATTR]
    elif "style" in element.attrs:
        del element["style"]
    del element[ORIGINAL_ATTR]


def _nested(element: Tag, other: Tag) -> bool:
    if element is other:
        return True
    return any(parent is other for parent in element.parents) or any(parent is element for parent in other.parents)


def _still_matches(element: Tag, original: str) -> bool:
    expected = normalize(original).lower()
    if not expected:
        return False
    haystacks = [text_content(element), normalize(element.get("aria-label")), normalize(element.get("title"))]
    if element.name == "meta":
        haystacks.append(normalize(element.get("content")))
    return any(expected in value.lower() for value in haystacks if value)


def _insert_target(element: Tag) -> Tag:
    if element.name != "a":
        return element
    parent: Optional[Tag] = element.parent
    if parent is None or not isinstance(parent, Tag):
        return element
    classes = " ".join(parent.get("class") or []).lower()
    if (
        any(hint in classes for hint in ITEM_CONTAINER_HINTS)
        or parent.get("role") == "article"
        or parent.name == "article"
    ):
        return parent
    return element
