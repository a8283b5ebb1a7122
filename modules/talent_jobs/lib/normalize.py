"""Field normalizers.

Pure functions that turn heterogeneous source shapes (schema.org objects,
streamed-payload records, raw markup) into the canonical strings stored on
JobSummary/JobDetail.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from bs4 import BeautifulSoup

from .utils import collapse_ws

SNIPPET_MAX_CHARS = 500
DESCRIPTION_MAX_CHARS = 5000

_TITLE_SALARY_RE = re.compile(r"\$[\d,]+(?:\s*[-–]\s*\$[\d,]+)?")
_SHOW_MORE_RE = re.compile(r"show more", re.IGNORECASE)


def truncate(text: str | None, limit: int) -> str:
    if not text:
        return ""
    return text[:limit]


def html_to_text(fragment: Any) -> str:
    """
    Strip markup and collapse whitespace. Works for plain text too, so callers
    don't need to know whether a description field carries HTML.
    """
    if not fragment or not isinstance(fragment, str):
        return ""
    text = BeautifulSoup(fragment, "html.parser").get_text(" ")
    return collapse_ws(text)


def _address_of(entry: Any) -> str:
    if isinstance(entry, str):
        return collapse_ws(entry)
    if not isinstance(entry, Mapping):
        return ""
    address = entry.get("address")
    if isinstance(address, str):
        return collapse_ws(address)
    if isinstance(address, Mapping):
        return collapse_ws(address.get("addressLocality") or address.get("streetAddress") or "")
    return ""


def location_from_jsonld(job_location: Any) -> str:
    """
    Flatten schema.org jobLocation (object, list of objects, or plain string).
    Prefers addressLocality, then streetAddress; multiple entries join with ', '.
    """
    if not job_location:
        return ""
    if isinstance(job_location, str):
        return collapse_ws(job_location)
    if isinstance(job_location, Sequence):
        parts = [_address_of(loc) for loc in job_location]
        return ", ".join(p for p in parts if p)
    return _address_of(job_location)


def salary_from_jsonld(base_salary: Any) -> str:
    """Format '<currency> <min> - <max>' only when both bounds are present."""
    if not isinstance(base_salary, Mapping):
        return ""
    value = base_salary.get("value")
    if not isinstance(value, Mapping):
        return ""
    lo, hi = value.get("minValue"), value.get("maxValue")
    if lo in (None, "") or hi in (None, ""):
        return ""
    currency = str(base_salary.get("currency") or "")
    return f"{currency} {lo} - {hi}"


def company_from_jsonld(org: Any) -> str:
    if isinstance(org, Mapping):
        return collapse_ws(org.get("name") or org.get("legalName") or "")
    if isinstance(org, str):
        return collapse_ws(org)
    return ""


def employment_type(value: Any) -> str:
    """employmentType may be a string or a list of strings."""
    if isinstance(value, str):
        return collapse_ws(value)
    if isinstance(value, Sequence):
        return ", ".join(collapse_ws(v) for v in value if isinstance(v, str) and v.strip())
    return ""


def salary_from_title(title: str) -> str:
    m = _TITLE_SALARY_RE.search(title or "")
    return m.group(0) if m else ""


def clean_snippet(text: str) -> str:
    return truncate(collapse_ws(_SHOW_MORE_RE.sub("", text or "")), SNIPPET_MAX_CHARS)


def is_job_posting_type(value: Any) -> bool:
    """@type may be a single value or an array of values."""
    if isinstance(value, str):
        return value == "JobPosting"
    if isinstance(value, Sequence):
        return "JobPosting" in value
    return False
