# modules/talent_jobs/lib/extractors/__init__.py
from __future__ import annotations

from .base import ListExtractor
from .detail import extract_job_detail
from .dom import DomExtractor
from .jsonld import JsonLdExtractor
from .payload import StreamPayloadExtractor


def default_list_extractors() -> tuple[ListExtractor, ...]:
    """List-page strategies in priority order: payload, JSON-LD, DOM."""
    return (StreamPayloadExtractor(), JsonLdExtractor(), DomExtractor())


__all__ = [
    "DomExtractor",
    "JsonLdExtractor",
    "ListExtractor",
    "StreamPayloadExtractor",
    "default_list_extractors",
    "extract_job_detail",
]
