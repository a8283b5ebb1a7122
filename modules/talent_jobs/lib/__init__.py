# modules/talent_jobs/lib/__init__.py
from __future__ import annotations

# Re-export commonly-used types for convenience
from .config import ConfigError, Settings
from .engine import CrawlEngine, run_once
from .models import CrawlTask, JobDetail, JobRecord, JobSummary, Label
from .state import CrawlState

__all__ = [
    "ConfigError",
    "CrawlEngine",
    "CrawlState",
    "CrawlTask",
    "JobDetail",
    "JobRecord",
    "JobSummary",
    "Label",
    "Settings",
    "run_once",
]
