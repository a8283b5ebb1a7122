"""
Declarative selector-fallback lists.

A field is described by an ordered tuple of Locators; `first_text` evaluates
them lazily against a root element and returns the first non-empty value.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from bs4 import Tag

from ..utils import collapse_ws


@dataclass(frozen=True)
class Locator:
    """
    selector: CSS selector evaluated relative to the root (soupsieve syntax)
    pattern:  optional regex the element's text must match
    attr:     read this attribute instead of the element text
    """

    selector: str
    pattern: re.Pattern[str] | None = None
    attr: str | None = None

    def elements(self, root: Tag) -> Iterable[Tag]:
        for el in root.select(self.selector):
            if self.pattern is not None and not self.pattern.search(el.get_text(" ")):
                continue
            yield el

    def find(self, root: Tag) -> Tag | None:
        return next(iter(self.elements(root)), None)

    def value(self, el: Tag) -> str:
        if self.attr:
            raw = el.get(self.attr)
            if isinstance(raw, list):
                raw = " ".join(raw)
            return (raw or "").strip()
        return collapse_ws(el.get_text(" "))


def first_element(root: Tag | None, locators: Iterable[Locator]) -> Tag | None:
    if root is None:
        return None
    for loc in locators:
        el = loc.find(root)
        if el is not None:
            return el
    return None


def first_text(root: Tag | None, locators: Iterable[Locator]) -> str:
    """First non-empty value across locators (and across each locator's matches)."""
    if root is None:
        return ""
    for loc in locators:
        for el in loc.elements(root):
            val = loc.value(el)
            if val:
                return val
    return ""


def first_matching(root: Tag, selectors: Iterable[str]) -> list[Tag]:
    """Coarse-to-fine container lookup: elements of the first selector that matches anything."""
    for sel in selectors:
        found = root.select(sel)
        if found:
            return found
    return []
