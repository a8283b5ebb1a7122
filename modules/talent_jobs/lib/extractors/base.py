from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import ListExtraction
from ..page import Page


class ListExtractor(ABC):
    """
    One list-page extraction strategy.

    Contract:
      - extract(page) returns a ListExtraction (possibly empty); it never raises
        for malformed page content, it degrades to an empty result instead.
      - Do NOT touch crawl state; dedup within the page/pass only.
      - The engine runs strategies in a fixed priority order and merges results.
    """

    # Concrete subclasses MUST set this to a stable label used in logs
    name: str = ""

    @abstractmethod
    def extract(self, page: Page) -> ListExtraction:
        raise NotImplementedError
