from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass
class CrawlState:
    """
    Run-wide dedup/quota state, owned by one CrawlEngine.

    Invariants:
      - `enqueued` never holds the same detail URL twice
      - `emitted` never exceeds `max_items`
      - `scheduled` never exceeds `max_items`

    Page handlers hold `lock` for their whole body, so each handler's
    mutations are atomic with respect to other handlers of the same run.
    """

    max_items: int
    enqueued: set[str] = field(default_factory=set)
    emitted_urls: set[str] = field(default_factory=set)
    emitted: int = 0
    scheduled: int = 0
    _seq: int = 0
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def progress(self, follow_details: bool) -> int:
        """Binding counter for LIST-stage decisions."""
        return self.scheduled if follow_details else self.emitted

    def can_schedule_more(self, follow_details: bool) -> bool:
        with self.lock:
            return self.progress(follow_details) < self.max_items

    def emit_quota_met(self) -> bool:
        with self.lock:
            return self.emitted >= self.max_items

    def try_schedule(self, url: str) -> bool:
        """Mark `url` enqueued if it's new and the schedule quota allows it."""
        with self.lock:
            if not url or url in self.enqueued or self.scheduled >= self.max_items:
                return False
            self.enqueued.add(url)
            self.scheduled += 1
            return True

    def first_sighting(self, url: str) -> bool:
        """Summary-only runs: True the first time a job URL is seen this run."""
        with self.lock:
            if url in self.emitted_urls:
                return False
            self.emitted_urls.add(url)
            return True

    def claim_emit(self) -> int | None:
        """Reserve the next output slot; returns its sequence number or None when full."""
        with self.lock:
            if self.emitted >= self.max_items:
                return None
            self.emitted += 1
            self._seq += 1
            return self._seq

    def snapshot(self) -> dict[str, int]:
        with self.lock:
            return {
                "emitted": self.emitted,
                "scheduled": self.scheduled,
                "enqueued": len(self.enqueued),
                "max_items": self.max_items,
            }
