# service/logging_utils.py
from __future__ import annotations

import datetime as _dt
import json
import os
import socket
import threading
from collections.abc import Iterable
from typing import Any

# A minimal set of key substrings to redact (case-insensitive, substring match)
_DEFAULT_REDACT_KEYS = {
    "password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "authorization",
    "cookie",
    "proxy_url",
}

# Host + process metadata (fixed per-process)
_HOSTNAME = socket.gethostname()
_PID = os.getpid()

# Worker threads of one crawl share the same daily files
_WRITE_LOCK = threading.Lock()


# ---- Configuration (env-driven, read per call so tests can redirect) --------


def _log_dir() -> str:
    return os.getenv("LOG_DIR", "./local/logs")


def _activity_prefix() -> str:
    return os.getenv("ACTIVITY_LOG_PREFIX", "activity")


def _error_prefix() -> str:
    return os.getenv("ERROR_LOG_PREFIX", "error")


# ---- Public API --------------------------------------------------------------


def write_activity_log(record: dict[str, Any]) -> None:
    """
    Persist a single structured activity record (JSON-safe) to today's
    activity JSONL file. Never mutates the passed-in dict.

    May raise on unrecoverable I/O/serialization errors; callers fall back
    to stdlib logging.
    """
    _write_jsonl(_log_path_for_today(_activity_prefix()), record)


def write_error_log(record: dict[str, Any]) -> None:
    """Persist a single structured error record, parallel to the activity log."""
    _write_jsonl(_log_path_for_today(_error_prefix()), record)


def get_activity_log_path() -> str:
    """Return the current day's activity log path (<prefix>-YYYY-MM-DD.jsonl)."""
    return _log_path_for_today(_activity_prefix())


def redact(record: dict[str, Any], keys: set[str] | None = None) -> dict[str, Any]:
    """
    Produce a redacted deep copy of `record` by scrubbing values whose KEYS
    contain any of the substrings in `keys` (case-insensitive).
    """
    return _redact_deep(record, keys or _DEFAULT_REDACT_KEYS)


# ---- Internal helpers --------------------------------------------------------


def _log_path_for_today(prefix: str) -> str:
    today = _dt.date.today().isoformat()
    return os.path.join(_log_dir(), f"{prefix}-{today}.jsonl")


def _key_matches(name: str, patterns: Iterable[str]) -> bool:
    n = name.lower()
    return any(pat in n for pat in patterns)


def _redact_deep(value: Any, patterns: Iterable[str]) -> Any:
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            if isinstance(k, str) and _key_matches(k, patterns):
                out[k] = "***REDACTED***"
            else:
                out[k] = _redact_deep(v, patterns)
        return out
    if isinstance(value, (list, tuple)):
        return [_redact_deep(v, patterns) for v in value]
    return value


def _write_jsonl(path: str, record: dict[str, Any]) -> None:
    """
    Redact, stamp ts/host/pid, serialize, then append one line.
    Serialization happens before any file op so a bad record leaves no partial line.
    """
    payload = dict(_redact_deep(record, _DEFAULT_REDACT_KEYS))
    payload.setdefault("ts", _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="seconds"))
    payload["_meta"] = {"host": _HOSTNAME, "pid": _PID}
    line = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str) + "\n"

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with _WRITE_LOCK, open(path, "a", encoding="utf-8") as f:
        f.write(line)
