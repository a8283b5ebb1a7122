"""
Engine for crawling talent.com search results and job detail pages.

Features:
  - LIST pages: payload, JSON-LD and DOM strategies merged per page, then
    either scheduled as DETAIL fetches or emitted directly
  - DETAIL pages: detail extraction merged over the carried list summary
  - Run-wide dedup and quotas via an injectable `CrawlState`
  - Dependency injection for testability (`fetch`, `sink`, `sleep`, `rng`, `clock`)
  - Run-level records via `logging_bridge`
"""

from __future__ import annotations

import logging
import random
import re
import time
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import replace
from typing import Any

from bs4 import Tag

from . import logging_bridge
from .config import Settings, build_start_tasks
from .crawler import Crawler, Enqueue, FetchFn
from .extractors import ListExtractor, default_list_extractors, extract_job_detail
from .http_client import HttpClient
from .models import CrawlTask, JobRecord, JobSummary, Label, merge_detail, record_from_summary
from .page import Page
from .sink import JsonlSink, ListSink
from .state import CrawlState
from .urls import is_detail_url, job_id_from_url, resolve_url, strip_fragment
from .utils import collapse_ws, now_iso

log = logging.getLogger(__name__)

NEXT_PAGE_SELECTORS: tuple[str, ...] = (
    '[aria-label*="Next"]',
    "a.next",
)

# Whole-label match, so a job titled "Next Level Engineer" is not pagination.
NEXT_TEXT_RE = re.compile(r"^next(?:\s+page)?\W*$", re.IGNORECASE)


def _next_page_anchors(page: Page, current_page: int) -> Iterator[Tag]:
    for selector in NEXT_PAGE_SELECTORS:
        yield from page.soup.select(selector)
    for el in page.soup.select("a[href]"):
        if NEXT_TEXT_RE.match(collapse_ws(el.get_text(" "))):
            yield el
    yield from page.soup.select(f'a[href*="p={current_page + 1}"]')


def find_next_page(page: Page, current_page: int) -> str | None:
    """Resolved URL of the next results page, or None. Detail links never qualify."""
    for el in _next_page_anchors(page, current_page):
        url = resolve_url(el.get("href"), page.url)
        if not url or is_detail_url(url):
            continue
        if strip_fragment(url) != strip_fragment(page.url):
            return url
    return None


def collect_candidates(
    page: Page, extractors: Iterable[ListExtractor]
) -> tuple[list[JobSummary], list[str]]:
    """
    Run every strategy in order and merge what they find.

    Returns (candidates, extra_detail_urls):
      - candidates in discovery order, one per resolved URL; a later strategy
        only fills fields the earlier one left empty
      - bare detail links not already covered by a candidate
    """
    ordered: list[JobSummary] = []
    index: dict[str, int] = {}
    links: list[str] = []

    for extractor in extractors:
        result = extractor.extract(page)
        log.debug(
            "%s: %d jobs, %d links on %s",
            extractor.name,
            len(result.jobs),
            len(result.detail_urls),
            page.url,
        )
        for job in result.jobs:
            pos = index.get(job.url) if job.url else None
            if pos is None:
                if job.url:
                    index[job.url] = len(ordered)
                ordered.append(job)
            else:
                ordered[pos] = ordered[pos].fill_gaps(job)
        links.extend(result.detail_urls)

    extra: list[str] = []
    for url in links:
        if url not in index and url not in extra:
            extra.append(url)
    return ordered, extra


class CrawlEngine:
    """
    Page handler for one crawl run. `handle` is what the crawler calls for
    every fetched page.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        state: CrawlState | None = None,
        sink: Any = None,
        extractors: Sequence[ListExtractor] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
        clock: Callable[[], str] = now_iso,
    ):
        self.settings = settings
        self.state = state or CrawlState(max_items=settings.max_items)
        self.sink = sink if sink is not None else ListSink()
        self.extractors = tuple(extractors) if extractors is not None else default_list_extractors()
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._clock = clock

    @property
    def follow_details(self) -> bool:
        return self.settings.include_job_details

    # ---- crawler hooks ----
    def wants(self, task: CrawlTask) -> bool:
        """False once a queued task can no longer contribute anything."""
        if task.label is Label.DETAIL:
            return self.follow_details and not self.state.emit_quota_met()
        return self.state.can_schedule_more(self.follow_details)

    def handle(self, page: Page, task: CrawlTask, enqueue: Enqueue) -> None:
        self._pause()
        with self.state.lock:
            if task.label is Label.DETAIL:
                self.handle_detail(page, task)
            else:
                self.handle_list(page, task, enqueue)

    def _pause(self) -> None:
        lo, hi = self.settings.delay_min_seconds, self.settings.delay_max_seconds
        if hi <= 0:
            return
        self._sleep(self._rng.uniform(lo, hi))

    # ---- LIST ----
    def handle_list(self, page: Page, task: CrawlTask, enqueue: Enqueue) -> None:
        follow = self.follow_details
        if not self.state.can_schedule_more(follow):
            log.debug("Quota reached; skipping list page %s", page.url)
            return

        log.info("Processing list page %d: %s", task.page, page.url)
        candidates, extra_urls = collect_candidates(page, self.extractors)
        if not candidates and not extra_urls:
            log.warning("No jobs found on %s (page %d)", page.url, task.page)

        for summary in candidates:
            if not self.state.can_schedule_more(follow):
                break
            self._schedule_or_emit(summary, page, task, enqueue)

        if follow:
            for url in extra_urls:
                if not self.state.can_schedule_more(follow):
                    break
                self._schedule_or_emit(JobSummary(url=url, list_url=page.url), page, task, enqueue)

        self._enqueue_next_page(page, task, enqueue)

    def _schedule_or_emit(self, summary: JobSummary, page: Page, task: CrawlTask, enqueue: Enqueue) -> None:
        url = summary.url
        if url and not summary.job_id:
            summary = replace(summary, job_id=job_id_from_url(url))

        if not self.follow_details:
            if url and not self.state.first_sighting(url):
                return
            self._emit(record_from_summary(summary, page_url=page.url))
            return

        if not url or strip_fragment(url) == strip_fragment(page.url):
            log.debug("Dropping candidate without a detail URL: %r", summary.title)
            return
        if not self.state.try_schedule(url):
            return
        enqueue(
            CrawlTask(
                url=url,
                label=Label.DETAIL,
                page=task.page,
                job_summary=summary,
                job_id=summary.job_id,
                from_list_url=page.url,
            )
        )

    def _enqueue_next_page(self, page: Page, task: CrawlTask, enqueue: Enqueue) -> None:
        if not self.state.can_schedule_more(self.follow_details):
            return
        next_page = task.page + 1
        if next_page > self.settings.max_pages:
            return
        url = find_next_page(page, task.page)
        if url is None:
            log.debug("No next page link on %s", page.url)
            return
        enqueue(CrawlTask(url=url, label=Label.LIST, page=next_page))

    # ---- DETAIL ----
    def handle_detail(self, page: Page, task: CrawlTask) -> None:
        if not self.follow_details or self.state.emit_quota_met():
            log.debug("Skipping detail page %s", page.url)
            return

        job_id = task.job_id or job_id_from_url(task.url)
        summary = task.job_summary or JobSummary(url=task.url, job_id=job_id)
        detail = extract_job_detail(page, job_id=job_id)
        record = merge_detail(detail, summary, from_list_url=task.from_list_url)
        if self._emit(record):
            log.info("Saved job %d/%d: %s", self.state.emitted, self.state.max_items, record.title or record.url)

    def _emit(self, record: JobRecord) -> bool:
        seq = self.state.claim_emit()
        if seq is None:
            return False
        self.sink.push(record.stamped(seq=seq, scraped_at=self._clock()))
        return True


# =============================================================================
# MAIN ORCHESTRATOR
# =============================================================================
def run_once(
    settings: Settings,
    fetch: FetchFn | None = None,
    sink: Any = None,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, Any]:
    """
    Run one complete crawl.

    Args:
        settings: validated run configuration.
        fetch: optional override for the network fetch (task -> {url, status, body}).
        sink: optional record sink; defaults to a JsonlSink on
            `settings.output_path`, else an in-memory ListSink.

    Returns:
        Summary dict (counters, output path, duration).
    """
    start_ns = time.perf_counter_ns()

    own_sink = sink is None
    if sink is None:
        sink = JsonlSink(settings.output_path) if settings.output_path else ListSink()

    client: HttpClient | None = None
    if fetch is None:
        client = HttpClient.from_settings(settings)
        fetch = client.fetch

    engine = CrawlEngine(settings, sink=sink, sleep=sleep)
    crawler = Crawler(settings, engine.handle, fetch, accept=engine.wants)
    try:
        stats = crawler.run(build_start_tasks(settings))
    finally:
        if client is not None:
            client.close()
        if own_sink:
            sink.close()

    summary: dict[str, Any] = {
        "emitted": engine.state.emitted,
        "scheduled": engine.state.scheduled,
        "max_items": settings.max_items,
        "include_job_details": settings.include_job_details,
        **stats,
        "output_path": settings.output_path,
        "duration_ms": int((time.perf_counter_ns() - start_ns) // 1_000_000),
    }
    logging_bridge.activity({"component": "talent_jobs.engine", "op": "summary", **summary})
    if summary["emitted"] == 0:
        log.warning("Crawl finished without any jobs")
    return summary
