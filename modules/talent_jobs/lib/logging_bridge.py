"""
Structured run-level records for talent_jobs.

Records go to the daily JSONL files written by service.logging_utils; if
that write fails the record is handed to stdlib logging instead, so a full
disk never takes a crawl down.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from service import logging_utils

DEFAULT_COMPONENT = "talent_jobs"

# Top-level keys scrubbed before anything leaves the process; the JSONL
# writer additionally scrubs nested keys by substring.
_SENSITIVE_KEYS = frozenset({
    "authorization",
    "cookie",
    "cookies",
    "cookies_json",
    "proxy_urls",
    "password",
    "token",
})

_REDACTED = "***REDACTED***"


def scrub(record: dict[str, Any]) -> dict[str, Any]:
    """Copy of `record` with sensitive top-level values masked and a component set."""
    out = {k: (_REDACTED if str(k).lower() in _SENSITIVE_KEYS else v) for k, v in record.items()}
    out.setdefault("component", DEFAULT_COMPONENT)
    return out


def _emit(writer: Callable[[dict[str, Any]], None], fallback: logging.Logger, level: int, record: dict[str, Any]) -> None:
    payload = scrub(record)
    try:
        writer(payload)
    except (OSError, TypeError, ValueError):
        fallback.log(level, payload)


def activity(record: dict[str, Any]) -> None:
    _emit(logging_utils.write_activity_log, logging.getLogger("talent_jobs.activity"), logging.INFO, record)


def error(record: dict[str, Any]) -> None:
    """Error-log counterpart of `activity` (request failures, handler crashes)."""
    _emit(logging_utils.write_error_log, logging.getLogger("talent_jobs.error"), logging.ERROR, record)
