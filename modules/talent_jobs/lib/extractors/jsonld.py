"""
Structured-data (JSON-LD) extractor.

Collects schema.org JobPosting objects from every
<script type="application/ld+json"> block on a page. Handles a bare object,
an array of objects, and an @graph container; @type may be a string or an
array. Broken blocks are skipped.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from bs4 import BeautifulSoup, NavigableString, Tag

from ..models import DEFAULT_SOURCE, JobSummary, ListExtraction
from ..normalize import (
    SNIPPET_MAX_CHARS,
    company_from_jsonld,
    employment_type,
    html_to_text,
    is_job_posting_type,
    location_from_jsonld,
    salary_from_jsonld,
    truncate,
)
from ..page import Page
from ..urls import resolve_url
from ..utils import collapse_ws
from .base import ListExtractor

log = logging.getLogger(__name__)


def parse_script_json(script: Tag) -> Any:
    """JSON content of a <script> tag, or None when empty/malformed."""
    if script is None:
        return None
    # get_text() skips script bodies under html5lib; read the raw strings
    text = "".join(str(child) for child in script.contents if isinstance(child, NavigableString))
    if not text or not text.strip():
        return None
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError) as e:
        log.debug("Skipping malformed JSON-LD block: %s", e)
        return None


def _unwrap(data: Any) -> list[Mapping[str, Any]]:
    """Flatten bare object / array / @graph shapes into a list of objects."""
    if isinstance(data, list):
        items = data
    elif isinstance(data, Mapping):
        graph = data.get("@graph")
        if graph is not None and not is_job_posting_type(data.get("@type")):
            items = graph if isinstance(graph, list) else [graph]
        else:
            items = [data]
    else:
        return []
    return [item for item in items if isinstance(item, Mapping)]


def find_job_postings(soup: BeautifulSoup) -> list[Mapping[str, Any]]:
    """All JobPosting objects on the page, in document order."""
    found: list[Mapping[str, Any]] = []
    for script in soup.select('script[type="application/ld+json"]'):
        data = parse_script_json(script)
        if data is None:
            continue
        for item in _unwrap(data):
            if is_job_posting_type(item.get("@type")):
                found.append(item)
    return found


def summary_from_posting(posting: Mapping[str, Any], base_url: str) -> JobSummary:
    return JobSummary(
        title=collapse_ws(posting.get("title") or ""),
        company=company_from_jsonld(posting.get("hiringOrganization")),
        location=location_from_jsonld(posting.get("jobLocation")),
        job_type=employment_type(posting.get("employmentType")),
        salary=salary_from_jsonld(posting.get("baseSalary")),
        snippet=truncate(html_to_text(posting.get("description")), SNIPPET_MAX_CHARS),
        posted_date=collapse_ws(posting.get("datePosted") or ""),
        url=resolve_url(posting.get("url"), base_url) or "",
        list_url=base_url,
        source=DEFAULT_SOURCE,
    )


class JsonLdExtractor(ListExtractor):
    """Strategy 2: schema.org JobPosting objects embedded as JSON-LD."""

    name = "jsonld"

    def extract(self, page: Page) -> ListExtraction:
        result = ListExtraction(source=self.name)
        seen: set[str] = set()
        for posting in find_job_postings(page.soup):
            summary = summary_from_posting(posting, page.url)
            if summary.url:
                if summary.url in seen:
                    continue
                seen.add(summary.url)
            result.jobs.append(summary)
        return result
