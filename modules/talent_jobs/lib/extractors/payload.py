# modules/talent_jobs/lib/extractors/payload.py
"""
Streamed-payload extractor.

talent.com renders search results through the Next.js app router, which
embeds its RSC stream in the HTML as repeated

    <script>self.__next_f.push([1,"1f:[\"$\",\"div\",...]\n"])</script>

chunks. Each chunk is an array whose string entries carry stream rows
("<hex id>:<json>"). Some rows hold an ItemList of detail links, some hold
fully-populated JobPosting objects or plain job records.

The regex-free bracket walk below isolates each JSON fragment, so brackets
inside quoted strings never unbalance the nesting count.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator, Mapping
from typing import Any

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

MARKER = "self.__next_f.push("

_OPENERS = {"[": "]", "{": "}"}
_ROW_PREFIX_RE = re.compile(r"^[0-9a-fA-F]+:")
_MAX_WALK_DEPTH = 64

# Synonyms per logical field, highest priority first. Dotted paths descend.
TITLE_KEYS = ("title", "jobTitle", "job_title", "name", "position")
URL_KEYS = ("url", "jobUrl", "job_url", "detailUrl", "link", "href", "applyUrl")
COMPANY_KEYS = ("company", "companyName", "company_name", "hiringOrganization.name", "employer", "hiringOrganization")
LOCATION_KEYS = ("location", "jobLocation", "locationName", "city", "formattedLocation")
JOB_TYPE_KEYS = ("jobType", "employmentType", "job_type", "contractType", "type")
SALARY_KEYS = ("salary", "baseSalary", "salaryText", "compensation")
DESCRIPTION_KEYS = ("description", "snippet", "summary", "shortDescription", "jobDescription")
DATE_KEYS = ("datePosted", "postedDate", "posted_at", "publicationDate", "date")


def find_fragment_end(text: str, start: int) -> int:
    """
    Given text[start] in '[{', return the index of its matching closer, or -1.

    Tracks nesting of both bracket kinds; characters inside double-quoted
    strings (with backslash escapes) are ignored.
    """
    if start < 0 or start >= len(text) or text[start] not in _OPENERS:
        return -1
    stack: list[str] = []
    in_str = False
    escape = False
    for i in range(start, len(text)):
        c = text[i]
        if in_str:
            if escape:
                escape = False
            elif c == "\\":
                escape = True
            elif c == '"':
                in_str = False
            continue
        if c == '"':
            in_str = True
        elif c in _OPENERS:
            stack.append(_OPENERS[c])
        elif c in ("]", "}"):
            if not stack or stack.pop() != c:
                return -1
            if not stack:
                return i
    return -1


def isolate_fragment(text: str, offset: int = 0) -> str | None:
    """Return the first balanced [...] / {...} fragment at or after `offset`."""
    starts = [i for i in (text.find("[", offset), text.find("{", offset)) if i >= 0]
    if not starts:
        return None
    start = min(starts)
    end = find_fragment_end(text, start)
    if end < 0:
        return None
    return text[start : end + 1]


def _loads(fragment: str | None) -> Any:
    if not fragment:
        return None
    try:
        return json.loads(fragment)
    except (json.JSONDecodeError, ValueError):
        return None


def iter_stream_chunks(html: str) -> Iterator[Any]:
    """Yield each parsed push(...) argument found in the document."""
    if not html or not isinstance(html, str):
        return
    pos = html.find(MARKER)
    while pos >= 0:
        offset = pos + len(MARKER)
        fragment = isolate_fragment(html, offset)
        parsed = _loads(fragment)
        if parsed is None:
            log.debug("Unparseable stream chunk at offset %d", pos)
        else:
            yield parsed
        pos = html.find(MARKER, offset)


def iter_stream_documents(chunk: Any) -> Iterator[Any]:
    """
    Expand a chunk into JSON documents. A string entry that is one JSON
    document is parsed whole; otherwise it is split into rows, the
    '<hex id>:' prefix is dropped and the JSON part parsed. Non-string
    entries (already structured) are yielded as-is.
    """
    entries = chunk if isinstance(chunk, list) else [chunk]
    for entry in entries:
        if not isinstance(entry, str):
            if isinstance(entry, (dict, list)):
                yield entry
            continue
        whole = _loads(entry.strip())
        if whole is not None:
            yield whole
            continue
        for row in entry.splitlines():
            row = _ROW_PREFIX_RE.sub("", row.strip(), count=1)
            if not row or row[0] not in _OPENERS:
                continue
            parsed = _loads(row)
            if parsed is None:
                parsed = _loads(isolate_fragment(row))
            if parsed is not None:
                yield parsed


def iter_objects(node: Any, depth: int = 0) -> Iterator[Mapping[str, Any]]:
    """Depth-first walk over every dict in a JSON tree."""
    if depth > _MAX_WALK_DEPTH:
        return
    if isinstance(node, Mapping):
        yield node
        for v in node.values():
            yield from iter_objects(v, depth + 1)
    elif isinstance(node, list):
        for v in node:
            yield from iter_objects(v, depth + 1)


def _lookup(obj: Mapping[str, Any], key: str) -> Any:
    cur: Any = obj
    for part in key.split("."):
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(part)
    return cur


def pick(obj: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    """First non-empty candidate value across synonym keys."""
    for key in keys:
        val = _lookup(obj, key)
        if val in (None, "", [], {}):
            continue
        return val
    return None


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return collapse_ws(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _looks_like_job(obj: Mapping[str, Any]) -> bool:
    if is_job_posting_type(obj.get("@type")):
        return True
    if "@type" in obj:
        return False
    has_title = isinstance(pick(obj, TITLE_KEYS), str)
    has_url = isinstance(pick(obj, URL_KEYS), str)
    has_context = pick(obj, COMPANY_KEYS) is not None or pick(obj, LOCATION_KEYS) is not None
    return has_title and has_url and has_context


def summary_from_record(obj: Mapping[str, Any], base_url: str) -> JobSummary | None:
    """
    Map a payload record onto JobSummary. Returns None when there is no title
    or no resolvable absolute URL.
    """
    title = _as_text(pick(obj, TITLE_KEYS))
    url = resolve_url(pick(obj, URL_KEYS), base_url)
    if not title or not url:
        return None

    company_raw = pick(obj, COMPANY_KEYS)
    location_raw = pick(obj, LOCATION_KEYS)
    salary_raw = pick(obj, SALARY_KEYS)
    description_raw = pick(obj, DESCRIPTION_KEYS)

    salary = salary_from_jsonld(salary_raw) if isinstance(salary_raw, Mapping) else _as_text(salary_raw)
    return JobSummary(
        title=title,
        company=company_from_jsonld(company_raw),
        location=location_from_jsonld(location_raw),
        job_type=employment_type(pick(obj, JOB_TYPE_KEYS)),
        salary=salary,
        snippet=truncate(html_to_text(description_raw), SNIPPET_MAX_CHARS),
        posted_date=_as_text(pick(obj, DATE_KEYS)),
        url=url,
        list_url=base_url,
        source=DEFAULT_SOURCE,
    )


def _item_list_urls(obj: Mapping[str, Any], base_url: str) -> Iterator[str]:
    elements = obj.get("itemListElement")
    if not isinstance(elements, list):
        return
    for element in elements:
        if not isinstance(element, Mapping):
            continue
        item = element.get("item")
        href = item.get("url") if isinstance(item, Mapping) else item
        resolved = resolve_url(href, base_url) or resolve_url(element.get("url"), base_url)
        if resolved:
            yield resolved


def extract_stream_payload(html: str, base_url: str) -> ListExtraction:
    """
    Parse every streamed chunk in `html`. Never raises; a missing or broken
    payload simply produces an empty ListExtraction.
    """
    result = ListExtraction(source="payload")
    seen_jobs: set[str] = set()
    seen_links: set[str] = set()

    for chunk in iter_stream_chunks(html):
        for doc in iter_stream_documents(chunk):
            for obj in iter_objects(doc):
                if obj.get("@type") == "ItemList":
                    for link in _item_list_urls(obj, base_url):
                        if link not in seen_links:
                            seen_links.add(link)
                            result.detail_urls.append(link)
                    continue
                if not _looks_like_job(obj):
                    continue
                summary = summary_from_record(obj, base_url)
                if summary is None or summary.url in seen_jobs:
                    continue
                seen_jobs.add(summary.url)
                result.jobs.append(summary)

    return result


class StreamPayloadExtractor(ListExtractor):
    """Strategy 1: records and links from the embedded streamed payload."""

    name = "payload"

    def extract(self, page: Page) -> ListExtraction:
        return extract_stream_payload(page.body, page.url)
