# modules/talent_jobs/lib/extractors/dom.py
"""
Heuristic DOM extractor for list pages.

Cards are located with a coarse-to-fine container list; each field inside a
card has its own ordered Locator list. A field that matches nothing stays
empty; a card without a title or a resolvable link is skipped.
"""

from __future__ import annotations

import logging
import re

from bs4 import Tag

from ..models import DEFAULT_SOURCE, JobSummary, ListExtraction
from ..normalize import clean_snippet, salary_from_title
from ..page import Page
from ..urls import resolve_url
from .base import ListExtractor
from .selectors import Locator, first_element, first_matching, first_text

log = logging.getLogger(__name__)

CARD_CONTAINER = '[data-testid="JobCardContainer"]'

CARD_SELECTORS: tuple[str, ...] = (
    CARD_CONTAINER,
    'header[data-testid="JobCard"]',
    "article",
    '[class*="job-card"]',
    '[class*="job-listing"]',
    '[class*="search-result"]',
    ".job",
    ".card",
)

LAST_UPDATED_RE = re.compile(r"last updated", re.IGNORECASE)
RELATIVE_DATE_RE = re.compile(
    r"\b(?:(?:\d+\+?|an?)\s*(?:minute|hour|day|week|month)s?\s+ago|today|yesterday|just posted)\b",
    re.IGNORECASE,
)

TITLE: tuple[Locator, ...] = (
    Locator(":scope > h2"),
    Locator(":scope > h3"),
    Locator("h2"),
    Locator("h3"),
    Locator('[class*="title"]'),
)

LINK: tuple[Locator, ...] = (
    Locator('a[href*="/view?id="]', attr="href"),
    Locator("h2 a[href]", attr="href"),
    Locator("h3 a[href]", attr="href"),
    Locator('a[href*="job"]', attr="href"),
)

COMPANY: tuple[Locator, ...] = (
    Locator(":scope > span:nth-of-type(1)"),
    Locator('[data-testid*="company" i]'),
    Locator('[class*="company" i]'),
)

LOCATION: tuple[Locator, ...] = (
    Locator(":scope > span:nth-of-type(2)"),
    Locator('[data-testid*="location" i]'),
    Locator('[class*="location" i]'),
)

JOB_TYPE: tuple[Locator, ...] = (
    Locator('[class*="job-type" i]'),
    Locator('[class*="badge" i]'),
    Locator(":scope > div div"),
)

SNIPPET: tuple[Locator, ...] = (
    Locator(":scope > div span"),
    Locator('[class*="snippet" i]'),
    Locator('[class*="description" i]'),
    Locator("p"),
)

POSTED_DATE: tuple[Locator, ...] = (
    Locator("div span", pattern=LAST_UPDATED_RE),
    Locator("div span", pattern=RELATIVE_DATE_RE),
    Locator("time"),
    Locator('[class*="date" i]'),
)


def _card_root(card: Tag) -> Tag:
    """Prefer the stable JobCardContainer inside (or at) the matched card."""
    if card.has_attr("data-testid") and card.get("data-testid") == "JobCardContainer":
        return card
    inner = card.select_one(CARD_CONTAINER)
    return inner if inner is not None else card


def _card_link(root: Tag, title_el: Tag | None) -> str:
    href = first_text(root, LINK)
    if not href and title_el is not None:
        anchor = title_el if title_el.name == "a" else title_el.find("a", href=True)
        if anchor is not None:
            href = (anchor.get("href") or "").strip()
    if not href and root.name == "a":
        href = (root.get("href") or "").strip()
    return href


def summary_from_card(card: Tag, base_url: str) -> JobSummary | None:
    root = _card_root(card)
    title_el = first_element(root, TITLE)
    title = first_text(root, TITLE)
    if not title:
        return None

    url = resolve_url(_card_link(root, title_el), base_url)
    if not url:
        return None

    return JobSummary(
        title=title,
        company=first_text(root, COMPANY),
        location=first_text(root, LOCATION),
        job_type=first_text(root, JOB_TYPE),
        salary=salary_from_title(title),
        snippet=clean_snippet(first_text(root, SNIPPET)),
        posted_date=first_text(root, POSTED_DATE),
        url=url,
        list_url=base_url,
        source=DEFAULT_SOURCE,
    )


class DomExtractor(ListExtractor):
    """Strategy 3: job cards scraped straight from the markup."""

    name = "dom"

    def extract(self, page: Page) -> ListExtraction:
        result = ListExtraction(source=self.name)
        cards = first_matching(page.soup, CARD_SELECTORS)
        if not cards:
            return result
        log.debug("DOM: %d candidate cards on %s", len(cards), page.url)

        seen: set[str] = set()
        for card in cards:
            summary = summary_from_card(card, page.url)
            if summary is None or summary.url in seen:
                continue
            seen.add(summary.url)
            result.jobs.append(summary)
        return result
