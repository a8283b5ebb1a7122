from __future__ import annotations

import enum
from dataclasses import dataclass, field, fields, replace
from typing import Any

from .utils import first_non_empty

DEFAULT_SOURCE = "talent.com"


class Label(str, enum.Enum):
    """Routing label carried on every enqueued fetch."""

    LIST = "LIST"
    DETAIL = "DETAIL"


@dataclass(frozen=True)
class JobSummary:
    """
    A job card found on a list page (any strategy). Every field may be empty;
    `url` is the resolved absolute detail URL when one was found.
    """

    title: str = ""
    company: str = ""
    location: str = ""
    job_type: str = ""
    salary: str = ""
    snippet: str = ""
    posted_date: str = ""
    url: str = ""
    list_url: str = ""
    source: str = DEFAULT_SOURCE
    job_id: str = ""

    def fill_gaps(self, other: JobSummary) -> JobSummary:
        """Return a copy where empty fields are taken from `other`."""
        updates = {}
        for f in fields(self):
            mine = getattr(self, f.name)
            theirs = getattr(other, f.name)
            if not mine and theirs:
                updates[f.name] = theirs
        return replace(self, **updates) if updates else self


@dataclass(frozen=True)
class JobDetail:
    """What a detail page yields on its own (before merging with the summary)."""

    job_id: str = ""
    title: str = ""
    company: str = ""
    location: str = ""
    job_type: str = ""
    salary: str = ""
    description: str = ""
    description_html: str = ""
    date_posted: str = ""
    url: str = ""


@dataclass(frozen=True)
class JobRecord:
    """
    Final output row. Immutable after emission; `seq` and `scraped_at` are
    stamped by the engine when the record is finalized.
    """

    title: str = ""
    company: str = ""
    location: str = ""
    job_type: str = ""
    salary: str = ""
    snippet: str = ""
    description: str = ""
    description_html: str = ""
    date_posted: str = ""
    url: str = ""
    source: str = DEFAULT_SOURCE
    list_url: str = ""
    job_id: str = ""
    seq: int = 0
    scraped_at: str = ""

    def stamped(self, *, seq: int, scraped_at: str) -> JobRecord:
        return replace(self, seq=seq, scraped_at=scraped_at)

    def to_dict(self) -> dict[str, Any]:
        """Serialized (camelCase) output shape."""
        return {
            "seq": self.seq,
            "jobId": self.job_id,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "jobType": self.job_type,
            "salary": self.salary,
            "snippet": self.snippet,
            "description": self.description,
            "descriptionHtml": self.description_html,
            "postedDate": self.date_posted,
            "datePosted": self.date_posted,
            "url": self.url,
            "source": self.source,
            "listUrl": self.list_url,
            "scrapedAt": self.scraped_at,
        }


def record_from_summary(summary: JobSummary, *, page_url: str = "") -> JobRecord:
    """Final record for runs that don't follow detail pages."""
    return JobRecord(
        title=summary.title,
        company=summary.company,
        location=summary.location,
        job_type=summary.job_type,
        salary=summary.salary,
        snippet=summary.snippet,
        description=summary.snippet,
        description_html="",
        date_posted=summary.posted_date,
        url=summary.url or page_url,
        source=summary.source or DEFAULT_SOURCE,
        list_url=summary.list_url or page_url,
        job_id=summary.job_id,
    )


def merge_detail(detail: JobDetail, summary: JobSummary, *, from_list_url: str = "") -> JobRecord:
    """
    Overlay detail-page values on the carried summary: detail wins when
    non-empty, summary fills the gaps. Deterministic, so merging the same pair
    again yields an equal record.
    """
    return JobRecord(
        job_id=first_non_empty(detail.job_id, summary.job_id),
        title=first_non_empty(detail.title, summary.title),
        company=first_non_empty(detail.company, summary.company),
        location=first_non_empty(detail.location, summary.location),
        job_type=first_non_empty(detail.job_type, summary.job_type),
        salary=first_non_empty(detail.salary, summary.salary),
        snippet=summary.snippet,
        description=first_non_empty(detail.description, summary.snippet),
        description_html=detail.description_html,
        date_posted=first_non_empty(detail.date_posted, summary.posted_date),
        url=first_non_empty(detail.url, summary.url),
        source=first_non_empty(summary.source, DEFAULT_SOURCE),
        list_url=first_non_empty(summary.list_url, from_list_url),
    )


@dataclass(frozen=True)
class CrawlTask:
    """One unit of work for the fetching layer (seed or follow-up)."""

    url: str
    label: Label = Label.LIST
    page: int = 1
    job_summary: JobSummary | None = None
    job_id: str = ""
    from_list_url: str = ""

    @property
    def unique_key(self) -> str:
        return f"{self.label.value}:{self.url}"


@dataclass
class ListExtraction:
    """
    What a list-page strategy found.
    - jobs: summaries with at least a title and an absolute URL
    - detail_urls: bare links to detail pages (no record attached)
    """

    source: str
    jobs: list[JobSummary] = field(default_factory=list)
    detail_urls: list[str] = field(default_factory=list)
