from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

from .models import CrawlTask, Label
from .urls import resolve_url
from .utils import getenv_str, truthy

log = logging.getLogger(__name__)

SEARCH_URL = "https://www.talent.com/jobs"

# Actor-style (camelCase) input names accepted alongside the snake_case ones.
INPUT_ALIASES: dict[str, str] = {
    "startUrl": "start_url",
    "searchQuery": "search_query",
    "query": "search_query",
    "maxPages": "max_pages",
    "maxItems": "max_items",
    "includeJobDetails": "include_job_details",
    "delayBetweenRequests": "delay_between_requests",
    "delayMinSeconds": "delay_min_seconds",
    "delayMaxSeconds": "delay_max_seconds",
    "maxConcurrency": "max_concurrency",
    "maxRequestsPerMinute": "max_requests_per_minute",
    "maxRequestRetries": "max_request_retries",
    "requestTimeout": "request_timeout",
    "cookiesJson": "cookies_json",
    "useProxy": "use_proxy",
    "proxyUrls": "proxy_urls",
    "debugMode": "debug_mode",
    "outputPath": "output_path",
}


# -----------------------------
# Exceptions
# -----------------------------
class ConfigError(ValueError):
    """Raised when provided kwargs/env cannot form a valid Settings."""


# -----------------------------
# Models
# -----------------------------
@dataclass
class Settings:
    """
    Canonical configuration for one crawl run.

    Either `start_url` (a talent.com search URL) or `search_query` is required.
    A query is expanded into one LIST seed per page up to `max_pages`.
    """

    # What to crawl
    start_url: str = ""
    search_query: str = ""
    location: str = ""
    max_pages: int = 5

    # Budget
    max_items: int = 100
    include_job_details: bool = True

    # Pacing (seconds); a random delay in [min, max] precedes each page
    delay_min_seconds: float = 3.0
    delay_max_seconds: float = 5.0
    max_concurrency: int = 1
    max_requests_per_minute: int = 30

    # Transport
    max_request_retries: int = 5
    request_timeout: float = 30.0
    cookies: str = field(default="", repr=False)
    cookies_json: list[dict[str, Any]] = field(default_factory=list, repr=False)
    use_proxy: bool = False
    proxy_urls: list[str] = field(default_factory=list)

    # Output / diagnostics
    output_path: str | None = None
    debug_mode: bool = False

    # ------------- convenience -------------
    def search_url(self, page: int = 1) -> str:
        params: dict[str, Any] = {"k": self.search_query}
        if self.location:
            params["l"] = self.location
        if page > 1:
            params["p"] = page
        return f"{SEARCH_URL}?{urlencode(params)}"

    def start_tasks(self) -> list[CrawlTask]:
        """
        Seed LIST tasks: the custom start URL as page 1, or one search URL per
        page (1..max_pages) when only a query was given.
        """
        if self.start_url:
            return [CrawlTask(url=self.start_url, label=Label.LIST, page=1)]
        return [
            CrawlTask(url=self.search_url(page), label=Label.LIST, page=page)
            for page in range(1, self.max_pages + 1)
        ]

    # ------------- constructors -------------
    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None) -> Settings:
        """
        Build Settings from kwargs with validation.

        Expected kwargs (all optional unless stated otherwise; camelCase
        actor names such as startUrl / maxItems are accepted too):

            start_url: str           # required unless search_query is given
            search_query: str        # required unless start_url is given
            location: str = ""
            max_pages: int = 5
            max_items: int = 100
            include_job_details: bool = true

            delay_min_seconds: float = 3.0
            delay_max_seconds: float = 5.0
            delay_between_requests: int (ms)  # -> [d, d + 2s] if no explicit bounds
            max_concurrency: int = 1
            max_requests_per_minute: int = 30

            max_request_retries: int = 5
            request_timeout: float = 30.0
            cookies: str             # raw Cookie header
            cookies_json: str | list | dict
            use_proxy: bool = false
            proxy_urls: list[str] | str   # env fallback TALENT_JOBS_PROXY_URLS

            output_path: str         # env fallback TALENT_JOBS_OUTPUT
            debug_mode: bool = false
        """
        kw = normalize_input_keys(kwargs or {})

        start_url = str(kw.get("start_url") or "").strip()
        search_query = str(kw.get("search_query") or "").strip()
        if not start_url and not search_query:
            raise ConfigError(
                "Please provide either 'start_url' (a talent.com search URL) or 'search_query' (keyword)."
            )

        delay_min, delay_max = _delay_bounds(kw)

        proxy_raw = kw.get("proxy_urls")
        if proxy_raw is None:
            proxy_raw = getenv_str("TALENT_JOBS_PROXY_URLS", "")

        settings = cls(
            start_url=start_url,
            search_query=search_query,
            location=str(kw.get("location") or "").strip(),
            max_pages=_as_int(kw, "max_pages", 5),
            max_items=_as_int(kw, "max_items", 100),
            include_job_details=truthy(kw.get("include_job_details", True)),
            delay_min_seconds=delay_min,
            delay_max_seconds=delay_max,
            max_concurrency=_as_int(kw, "max_concurrency", 1),
            max_requests_per_minute=_as_int(kw, "max_requests_per_minute", 30),
            max_request_retries=_as_int(kw, "max_request_retries", 5),
            request_timeout=_as_float(kw, "request_timeout", 30.0),
            cookies=str(kw.get("cookies") or "").strip(),
            cookies_json=parse_cookies_json(kw.get("cookies_json")),
            use_proxy=truthy(kw.get("use_proxy")),
            proxy_urls=_as_list(proxy_raw),
            output_path=str(kw.get("output_path") or getenv_str("TALENT_JOBS_OUTPUT", "") or "").strip() or None,
            debug_mode=truthy(kw.get("debug_mode")),
        )
        _validate_settings(settings)
        return settings


# -----------------------------
# Helpers
# -----------------------------
def normalize_input_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase actor input names onto Settings field names."""
    out: dict[str, Any] = {}
    for k, v in raw.items():
        out[INPUT_ALIASES.get(str(k), str(k))] = v
    return out


def parse_cookies_json(value: Any) -> list[dict[str, Any]]:
    """
    Accept a JSON string, a list of cookie objects ({name, value, ...}) or a
    plain name -> value mapping. Unusable input is logged and ignored.
    """
    if value in (None, "", [], {}):
        return []
    data = value
    if isinstance(value, str):
        try:
            data = json.loads(value)
        except json.JSONDecodeError as e:
            log.warning("Failed to parse cookies_json: %s", e)
            return []
    if isinstance(data, Mapping):
        return [{"name": str(k), "value": str(v)} for k, v in data.items()]
    if isinstance(data, list):
        return [dict(c) for c in data if isinstance(c, Mapping) and c.get("name")]
    log.warning("Ignoring cookies_json of unsupported type %s", type(data).__name__)
    return []


def _delay_bounds(kw: Mapping[str, Any]) -> tuple[float, float]:
    if kw.get("delay_min_seconds") is None and kw.get("delay_between_requests") is not None:
        base = _as_float(kw, "delay_between_requests", 3000.0) / 1000.0
        return base, base + 2.0
    if kw.get("delay_max_seconds") in (None, ""):
        lo = _as_float(kw, "delay_min_seconds", 3.0)
        return lo, lo + 2.0
    hi = _as_float(kw, "delay_max_seconds", 5.0)
    # a lone max pulls the default min down with it
    return _as_float(kw, "delay_min_seconds", min(3.0, hi)), hi


def _as_int(kw: Mapping[str, Any], key: str, default: int) -> int:
    val = kw.get(key)
    if val is None or val == "":
        return default
    try:
        return int(val)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{key}' must be an integer (got {val!r}).") from e


def _as_float(kw: Mapping[str, Any], key: str, default: float) -> float:
    val = kw.get(key)
    if val is None or val == "":
        return default
    try:
        return float(val)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{key}' must be a number (got {val!r}).") from e


def _as_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [s.strip() for s in value.split(",") if s.strip()]
    if isinstance(value, (list, tuple)):
        return [str(s).strip() for s in value if str(s).strip()]
    raise ConfigError(f"Expected a list or comma-separated string (got {type(value).__name__}).")


def _validate_settings(s: Settings) -> None:
    if s.start_url and not resolve_url(s.start_url, None):
        raise ConfigError(f"'start_url' must be an absolute http(s) URL (got {s.start_url!r}).")
    if s.max_items <= 0:
        raise ConfigError("'max_items' must be >= 1.")
    if s.max_pages <= 0:
        raise ConfigError("'max_pages' must be >= 1.")
    if s.max_concurrency <= 0:
        raise ConfigError("'max_concurrency' must be >= 1.")
    if s.max_requests_per_minute <= 0:
        raise ConfigError("'max_requests_per_minute' must be >= 1.")
    if s.max_request_retries < 0:
        raise ConfigError("'max_request_retries' cannot be negative.")
    if s.request_timeout <= 0:
        raise ConfigError("'request_timeout' must be > 0.")
    if s.delay_min_seconds < 0 or s.delay_max_seconds < s.delay_min_seconds:
        raise ConfigError("Delay bounds must satisfy 0 <= delay_min_seconds <= delay_max_seconds.")


def build_start_tasks(settings: Settings) -> list[CrawlTask]:
    return settings.start_tasks()
