from __future__ import annotations

import os
import re
from datetime import datetime, timezone
from typing import Any

_WS_RE = re.compile(r"\s+")


def truthy(v: Any) -> bool:
    """
    Normalize common truthy inputs from env/kwargs.
    Accepts bools or strings like: '1', 'true', 'yes', 'on'.
    """
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    if isinstance(v, (int, float)):
        return v != 0
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "on", "y", "t"}


def now_iso() -> str:
    """
    UTC ISO-8601 timestamp with 'Z' suffix.
    """
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def getenv_str(name: str, default: str | None = None) -> str | None:
    """
    Typed wrapper for environment access.
    """
    val = os.getenv(name)
    return val if val is not None else default


def collapse_ws(text: Any) -> str:
    """Collapse runs of whitespace to a single space and trim."""
    if text is None:
        return ""
    return _WS_RE.sub(" ", str(text)).strip()


def first_non_empty(*values: Any) -> str:
    """Return the first value that is a non-blank string (as str), else ''."""
    for v in values:
        if v is None or isinstance(v, bool):
            continue
        s = str(v).strip() if isinstance(v, (str, int, float)) else ""
        if s:
            return s
    return ""
