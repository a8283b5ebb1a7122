from __future__ import annotations

import logging
from typing import Any

from .lib.config import Settings
from .lib.engine import run_once as _run_engine
from .lib.logging_bridge import activity as log_activity


def run(sink: Any = None, **kwargs: Any) -> dict[str, Any]:
    """
    Entry point for the 'talent_jobs' module.

    Accepts kwargs (from the CLI or an input file), including:
      start_url: str          # a talent.com search URL, or
      search_query: str       # keyword, expanded into pages 1..max_pages
      location: str = ""
      max_pages: int = 5
      max_items: int = 100
      include_job_details: bool = True
      output_path: Optional[str]   # JSONL output; in-memory when unset
      debug_mode: bool = False     # DEBUG level for the talent_jobs loggers

    `sink` overrides where records go (anything with push()/close()).

    Returns:
      the run summary dict (emitted, scheduled, pages, failures, duration).
    """
    # Build validated settings from env + kwargs
    settings = Settings.from_env_and_kwargs(kwargs)
    if settings.debug_mode:
        logging.getLogger(__package__).setLevel(logging.DEBUG)

    log_activity({
        "component": "talent_jobs.main",
        "op": "start",
        "start_url": settings.start_url,
        "search_query": settings.search_query,
        "location": settings.location,
        "max_pages": settings.max_pages,
        "max_items": settings.max_items,
        "include_job_details": settings.include_job_details,
        "use_proxy": settings.use_proxy,
        "debug_mode": settings.debug_mode,
    })

    return _run_engine(settings, sink=sink)
