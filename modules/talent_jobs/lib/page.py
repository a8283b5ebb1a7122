from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup


def parse_html(body: str) -> BeautifulSoup:
    # html5lib matches browser tree-building, which the card selectors rely on
    return BeautifulSoup(body or "", "html5lib")


@dataclass
class Page:
    """
    Everything a page handler gets from the fetching layer.
    - url: final (resolved) request URL
    - soup: parsed markup, queryable with CSS selectors
    - body: raw response text (the streamed payload lives in here)
    """

    url: str
    soup: BeautifulSoup
    body: str = ""
    status: int = 200

    @classmethod
    def from_html(cls, url: str, body: str, status: int = 200) -> Page:
        return cls(url=url, soup=parse_html(body), body=body, status=status)
