"""
Fetching substrate: a de-duplicating request queue drained by a bounded
thread pool.

  - each task is fetched once per unique key (label + URL)
  - at most `max_concurrency` tasks are in flight
  - request starts are spaced to honour `max_requests_per_minute`
  - a failed fetch or a handler exception is logged and counted; the task
    yields nothing and the crawl moves on
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any

from . import logging_bridge
from .config import Settings
from .models import CrawlTask
from .page import Page

log = logging.getLogger(__name__)

Enqueue = Callable[[CrawlTask], bool]
Handler = Callable[[Page, CrawlTask, Enqueue], None]
FetchFn = Callable[[CrawlTask], Mapping[str, Any]]


class RequestPacer:
    """Spaces request starts at least 60 / per_minute seconds apart."""

    def __init__(
        self,
        per_minute: int,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.interval = 60.0 / per_minute if per_minute > 0 else 0.0
        self._clock = clock
        self._sleep = sleep
        self._next_at = 0.0
        self._lock = threading.Lock()

    def wait(self) -> None:
        if self.interval <= 0:
            return
        with self._lock:
            now = self._clock()
            start = max(now, self._next_at)
            self._next_at = start + self.interval
        if start > now:
            self._sleep(start - now)


class Crawler:
    def __init__(
        self,
        settings: Settings,
        handler: Handler,
        fetch: FetchFn,
        *,
        accept: Callable[[CrawlTask], bool] | None = None,
        pacer: RequestPacer | None = None,
    ):
        self.settings = settings
        self.handler = handler
        self.fetch = fetch
        self.accept = accept
        self.pacer = pacer or RequestPacer(settings.max_requests_per_minute)

        self._queue: deque[CrawlTask] = deque()
        self._seen: set[str] = set()
        self._lock = threading.Lock()
        self.stats: dict[str, int] = {
            "requests_total": 0,
            "pages_processed": 0,
            "requests_failed": 0,
            "handler_errors": 0,
            "tasks_skipped": 0,
        }

    # ---- queue ----
    def enqueue(self, task: CrawlTask) -> bool:
        """Queue `task` unless its unique key was seen before; True if queued."""
        with self._lock:
            if task.unique_key in self._seen:
                return False
            self._seen.add(task.unique_key)
            self._queue.append(task)
            return True

    def _next_task(self) -> CrawlTask | None:
        while True:
            with self._lock:
                if not self._queue:
                    return None
                task = self._queue.popleft()
            if self.accept is None or self.accept(task):
                return task
            log.debug("Skipping %s %s (no longer needed)", task.label.value, task.url)
            self._bump("tasks_skipped")

    def _bump(self, key: str) -> None:
        with self._lock:
            self.stats[key] += 1

    # ---- one task ----
    def _process(self, task: CrawlTask) -> None:
        self.pacer.wait()
        self._bump("requests_total")
        try:
            resp = self.fetch(task)
        except Exception as e:
            self._bump("requests_failed")
            log.warning("Request failed for %s: %s", task.url, e)
            logging_bridge.error({
                "component": "talent_jobs.crawler",
                "op": "request_failed",
                "url": task.url,
                "label": task.label.value,
                "error": repr(e),
            })
            return

        page = Page.from_html(
            str(resp.get("url") or task.url),
            str(resp.get("body") or ""),
            int(resp.get("status") or 200),
        )
        try:
            self.handler(page, task, self.enqueue)
        except Exception as e:
            self._bump("handler_errors")
            log.exception("Handler failed for %s", task.url)
            logging_bridge.error({
                "component": "talent_jobs.crawler",
                "op": "handler_error",
                "url": task.url,
                "label": task.label.value,
                "error": repr(e),
            })
            return
        self._bump("pages_processed")

    # ---- drive ----
    def run(self, seeds: Iterable[CrawlTask]) -> dict[str, int]:
        for task in seeds:
            self.enqueue(task)

        limit = self.settings.max_concurrency
        pending: set[Future] = set()
        with ThreadPoolExecutor(max_workers=limit) as pool:
            while True:
                while len(pending) < limit:
                    task = self._next_task()
                    if task is None:
                        break
                    pending.add(pool.submit(self._process, task))
                if not pending:
                    break
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for fut in done:
                    fut.result()
        return dict(self.stats)
