# tests/conftest.py
import json
import os
import tempfile

import pytest
from freezegun import freeze_time

from modules.talent_jobs.lib import config as tj_config
from modules.talent_jobs.lib.page import Page
from modules.talent_jobs.lib.sink import ListSink

SEARCH_URL = "https://www.talent.com/jobs?k=python&l=Austin"


# ---------------------------------------------------------------------
# Live tests are opt-in: use --live or RUN_LIVE_TESTS=1
# ---------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked as 'live' (network calls to talent.com).",
    )


def pytest_configure(config: pytest.Config) -> None:
    # Marker registration (so pytest --markers shows it)
    config.addinivalue_line(
        "markers",
        "live: marks tests that perform live network calls (skipped by default).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    run_live = config.getoption("--live") or os.getenv("RUN_LIVE_TESTS") == "1"
    if run_live:
        return
    skip_live = pytest.mark.skip(reason="live tests disabled (use --live or RUN_LIVE_TESTS=1)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------
# Test-wide env defaults (autouse, function-scoped)
# ---------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _env_defaults(monkeypatch):
    # Write logs to a throwaway dir so real logs stay clean (per test)
    tmp_logs = tempfile.mkdtemp(prefix="tj-pytest-logs-")
    monkeypatch.setenv("LOG_DIR", tmp_logs)
    monkeypatch.setenv("ACTIVITY_LOG_PREFIX", "activity-test")
    monkeypatch.setenv("ERROR_LOG_PREFIX", "error-test")
    monkeypatch.delenv("TALENT_JOBS_OUTPUT", raising=False)
    monkeypatch.delenv("TALENT_JOBS_PROXY_URLS", raising=False)
    monkeypatch.delenv("TALENT_JOBS_INPUT", raising=False)
    yield


@pytest.fixture
def frozen_utc():
    with freeze_time("2025-01-01T00:00:00Z"):
        yield


# ---------------------------------------------------------------------
# Page builders
# ---------------------------------------------------------------------
def html_doc(body: str = "", head: str = "") -> str:
    return f"<!DOCTYPE html><html><head>{head}</head><body>{body}</body></html>"


def jsonld_script(data, script_id: str | None = None) -> str:
    id_attr = f' id="{script_id}"' if script_id else ""
    return f'<script type="application/ld+json"{id_attr}>{json.dumps(data)}</script>'


def stream_script(*rows) -> str:
    """A Next.js push chunk whose string entry carries `rows` as '<id>:<json>' lines."""
    payload = "".join(f"{i:x}:{json.dumps(row)}\n" for i, row in enumerate(rows, start=1))
    return f"<script>self.__next_f.push({json.dumps([1, payload])})</script>"


def card_html(title: str, href: str, company: str = "", location: str = "", snippet: str = "") -> str:
    return (
        '<section><div data-testid="JobCardContainer">'
        f'<h2><a href="{href}">{title}</a></h2>'
        f"<span>{company}</span><span>{location}</span>"
        f"<div><span>{snippet}</span></div>"
        "</div></section>"
    )


def job_posting(title: str, url: str, **extra) -> dict:
    data = {"@context": "https://schema.org", "@type": "JobPosting", "title": title, "url": url}
    data.update(extra)
    return data


@pytest.fixture
def make_page():
    def _make(body: str = "", head: str = "", url: str = SEARCH_URL, status: int = 200) -> Page:
        return Page.from_html(url, html_doc(body, head), status)

    return _make


@pytest.fixture
def make_settings():
    def _make(**overrides) -> tj_config.Settings:
        kwargs = {
            "start_url": SEARCH_URL,
            "max_items": 100,
            "max_pages": 5,
            "delay_min_seconds": 0,
            "delay_max_seconds": 0,
            "max_requests_per_minute": 6000,
        }
        kwargs.update(overrides)
        return tj_config.Settings.from_env_and_kwargs(kwargs)

    return _make


@pytest.fixture
def list_sink():
    return ListSink()
