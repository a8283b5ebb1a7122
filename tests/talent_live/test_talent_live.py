# tests/talent_live/test_talent_live.py
from __future__ import annotations

import os

import pytest

from modules.talent_jobs.lib.config import Settings
from modules.talent_jobs.lib.engine import run_once
from modules.talent_jobs.lib.sink import ListSink


def _print_records(label: str, records, max_items: int | None = None) -> None:
    # allow override via env (e.g., TALENT_MAX_PRINT=999)
    if max_items is None:
        env_max = os.getenv("TALENT_MAX_PRINT")
        max_items = int(env_max) if env_max else None

    print(f"\n[{label}] records: {len(records)}")
    limit = len(records) if max_items is None else min(max_items, len(records))
    for r in records[:limit]:
        print(f"      - {r.title} | {r.company} | {r.location}  [{r.url}]")


@pytest.mark.live
def test_search_summaries_live():
    """
    Live smoke test: one results page for a common query, list summaries only.
    """
    settings = Settings.from_env_and_kwargs({
        "search_query": "software engineer",
        "location": "Austin, TX",
        "max_pages": 1,
        "max_items": 10,
        "include_job_details": False,
        "delay_min_seconds": 1,
        "delay_max_seconds": 2,
    })
    sink = ListSink()
    summary = run_once(settings, sink=sink)
    _print_records("summaries", sink.records)

    assert summary["requests_failed"] == 0
    assert 0 < summary["emitted"] <= 10
    assert all(r.title and r.url.startswith("https://") for r in sink.records)


@pytest.mark.live
def test_search_with_details_live():
    """
    Live smoke test: follow a handful of detail pages and check descriptions arrive.
    """
    settings = Settings.from_env_and_kwargs({
        "search_query": "nurse",
        "max_pages": 1,
        "max_items": 3,
        "include_job_details": True,
    })
    sink = ListSink()
    summary = run_once(settings, sink=sink)
    _print_records("details", sink.records)

    assert summary["emitted"] <= 3
    assert len({r.url for r in sink.records}) == len(sink.records)
    assert any(r.description for r in sink.records)
