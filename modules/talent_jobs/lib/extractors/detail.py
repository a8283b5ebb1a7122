# modules/talent_jobs/lib/extractors/detail.py
"""
Detail-page extractor.

Priority:
  1. the page's dedicated JSON-LD script (id="job-data-ld+json")
  2. any JobPosting JSON-LD, preferring the one whose url is this page
  3. DOM heuristics (title, employment type, posted date, description block)

Always returns a JobDetail; fields that can't be found are left empty.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup, Tag

from ..models import JobDetail
from ..normalize import (
    DESCRIPTION_MAX_CHARS,
    company_from_jsonld,
    employment_type,
    html_to_text,
    is_job_posting_type,
    location_from_jsonld,
    salary_from_jsonld,
    truncate,
)
from ..page import Page
from ..urls import resolve_url, strip_fragment
from ..utils import collapse_ws
from .dom import LAST_UPDATED_RE, RELATIVE_DATE_RE
from .jsonld import find_job_postings, parse_script_json
from .selectors import Locator, first_text

log = logging.getLogger(__name__)

DEDICATED_SCRIPT_IDS = ("job-data-ld+json", "job-data-ld")

_SHOW_MORE_RE = re.compile(r"show more", re.IGNORECASE)
_META_SPLIT_RE = re.compile(r"[•|·]")

# Build-hash class fragments: last resort, expected to rot.
HEADER_BLOCK = Locator('[class*="sc-668ba90a-3"]')

COMPANY: tuple[Locator, ...] = (
    Locator('[data-testid*="company" i]'),
    Locator('[class*="company-name" i]'),
)

LOCATION: tuple[Locator, ...] = (
    Locator('[data-testid*="location" i]'),
    Locator('[class*="job-location" i]'),
)

JOB_TYPE: tuple[Locator, ...] = (
    Locator('[data-testid*="job-type" i]'),
    Locator('[class*="employment-type" i]'),
    Locator('[class*="job-type" i]'),
    Locator('[class*="sc-fd8dae98-0"]'),
)

POSTED_DATE: tuple[Locator, ...] = (
    Locator("span", pattern=LAST_UPDATED_RE),
    Locator("span", pattern=RELATIVE_DATE_RE),
    Locator("time"),
)

DESCRIPTION_CONTAINERS: tuple[Locator, ...] = (
    Locator('[class*="job-description"]'),
    Locator('[data-testid="job-description"]'),
    Locator('[class*="description"]'),
    Locator(".job-content"),
    Locator("main"),
)


# -----------------------------------------------------------------------------
# Structured data
# -----------------------------------------------------------------------------
def _dedicated_posting(soup: BeautifulSoup) -> Mapping[str, Any] | None:
    for script_id in DEDICATED_SCRIPT_IDS:
        script = soup.find("script", id=script_id)
        if script is None:
            continue
        data = parse_script_json(script)
        if isinstance(data, Mapping) and is_job_posting_type(data.get("@type")):
            return data
    return None


def _matching_posting(soup: BeautifulSoup, page_url: str) -> Mapping[str, Any] | None:
    postings = find_job_postings(soup)
    if not postings:
        return None
    here = strip_fragment(page_url)
    for posting in postings:
        resolved = resolve_url(posting.get("url"), page_url)
        if resolved and strip_fragment(resolved) == here:
            return posting
    return postings[0]


def detail_from_posting(posting: Mapping[str, Any], page_url: str, job_id: str) -> JobDetail:
    description_html = posting.get("description") or ""
    if not isinstance(description_html, str):
        description_html = ""
    return JobDetail(
        job_id=job_id,
        title=collapse_ws(posting.get("title") or ""),
        company=company_from_jsonld(posting.get("hiringOrganization")),
        location=location_from_jsonld(posting.get("jobLocation")),
        job_type=employment_type(posting.get("employmentType")),
        salary=salary_from_jsonld(posting.get("baseSalary")),
        description=truncate(html_to_text(description_html), DESCRIPTION_MAX_CHARS),
        description_html=description_html,
        date_posted=collapse_ws(posting.get("datePosted") or ""),
        url=page_url,
    )


# -----------------------------------------------------------------------------
# DOM fallback
# -----------------------------------------------------------------------------
def _heading_title(soup: BeautifulSoup) -> str:
    for el in soup.select("h1, h2"):
        text = collapse_ws(el.get_text(" "))
        if len(text) > 3 and not _SHOW_MORE_RE.search(text):
            return text
    return ""


def _header_block(soup: BeautifulSoup) -> tuple[str, str, str]:
    """(title, company, location) from the generated-class header block."""
    block = HEADER_BLOCK.find(soup)
    if block is None:
        return "", "", ""
    spans = block.find_all("span")
    title = collapse_ws(spans[0].get_text(" ")) if spans else ""
    company = location = ""
    if len(spans) > 1:
        meta = collapse_ws(spans[1].get_text(" ").replace("\ufffd", "•"))
        parts = [p.strip() for p in _META_SPLIT_RE.split(meta) if p.strip()]
        if parts:
            company = parts[0]
            if len(parts) > 1:
                location = parts[-1]
    return title, company, location


def _labelled_description(soup: BeautifulSoup) -> str:
    """The last <div> next to a 'Job description' label span."""
    for span in soup.find_all("span"):
        if collapse_ws(span.get_text(" ")).lower() != "job description":
            continue
        parent = span.parent
        if not isinstance(parent, Tag):
            return ""
        divs = parent.find_all("div")
        if divs:
            return divs[-1].decode_contents().strip()
        return ""
    return ""


def _container_description(soup: BeautifulSoup) -> str:
    for loc in DESCRIPTION_CONTAINERS:
        for el in loc.elements(soup):
            if collapse_ws(el.get_text(" ")):
                return el.decode_contents().strip()
    return ""


def detail_from_dom(soup: BeautifulSoup, page_url: str, job_id: str) -> JobDetail:
    block_title, block_company, block_location = _header_block(soup)
    title = _heading_title(soup) or block_title
    company = first_text(soup, COMPANY) or block_company
    location = first_text(soup, LOCATION) or block_location

    description_html = _labelled_description(soup) or _container_description(soup)
    return JobDetail(
        job_id=job_id,
        title=title,
        company=company,
        location=location,
        job_type=first_text(soup, JOB_TYPE),
        salary="",
        description=truncate(html_to_text(description_html), DESCRIPTION_MAX_CHARS),
        description_html=description_html,
        date_posted=first_text(soup, POSTED_DATE),
        url=page_url,
    )


def extract_job_detail(page: Page, job_id: str = "") -> JobDetail:
    posting = _dedicated_posting(page.soup) or _matching_posting(page.soup, page.url)
    if posting is not None:
        return detail_from_posting(posting, page.url, job_id)
    log.debug("No JobPosting JSON-LD on %s; falling back to DOM", page.url)
    return detail_from_dom(page.soup, page.url, job_id)
