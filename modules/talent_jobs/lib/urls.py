"""
URL resolution helpers shared by every extractor and by pagination.

All helpers are total: malformed input yields None (or ''), never an exception.
"""

from __future__ import annotations

import hashlib
from typing import Any
from urllib.parse import parse_qs, urljoin, urlsplit, urlunsplit

_ALLOWED_SCHEMES = {"http", "https"}


def resolve_url(href: Any, base_url: str | None) -> str | None:
    """
    Resolve `href` against `base_url` into an absolute http(s) URL.

    Returns None for empty/non-string input, fragment-only links, non-http
    schemes (javascript:, mailto:, ...) and anything urllib refuses to parse.
    """
    if not href or not isinstance(href, str):
        return None
    href = href.strip()
    if not href or href.startswith("#"):
        return None
    try:
        absolute = urljoin(base_url or "", href)
        parts = urlsplit(absolute)
        # Accessing .port validates the netloc (raises ValueError on garbage).
        parts.port  # noqa: B018
    except (ValueError, TypeError):
        return None
    if parts.scheme.lower() not in _ALLOWED_SCHEMES or not parts.hostname:
        return None
    return urlunsplit((parts.scheme.lower(), parts.netloc, parts.path or "/", parts.query, parts.fragment))


def strip_fragment(url: str | None) -> str:
    """Drop any '#...' suffix."""
    if not url:
        return ""
    return url.split("#", 1)[0]


def job_id_from_url(url: str | None) -> str:
    """
    Derive a stable job id from a detail URL.

    talent.com detail links look like /view?id=<id>; anything else gets a short
    content hash of the fragment-less URL.
    """
    if not url:
        return ""
    try:
        query = parse_qs(urlsplit(url).query)
    except ValueError:
        query = {}
    ids = query.get("id") or []
    if ids and ids[0].strip():
        return ids[0].strip()
    return hashlib.sha1(strip_fragment(url).encode("utf-8")).hexdigest()[:16]


def is_detail_url(url: str | None) -> bool:
    """True for talent.com job detail links (/view?id=<id>)."""
    if not url:
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.path.rstrip("/").endswith("/view") and bool(parse_qs(parts.query).get("id"))
