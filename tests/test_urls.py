# tests/test_urls.py
import pytest

from modules.talent_jobs.lib.urls import is_detail_url, job_id_from_url, resolve_url, strip_fragment

BASE = "https://www.talent.com/jobs?k=python"


@pytest.mark.parametrize(
    "href,expected",
    [
        ("/view?id=abc123", "https://www.talent.com/view?id=abc123"),
        ("view?id=1", "https://www.talent.com/view?id=1"),
        ("//www.talent.com/view?id=2", "https://www.talent.com/view?id=2"),
        ("HTTPS://example.com", "https://example.com/"),
        ("  /jobs?p=2  ", "https://www.talent.com/jobs?p=2"),
    ],
)
def test_resolve_url_makes_absolute_http_urls(href, expected):
    assert resolve_url(href, BASE) == expected


@pytest.mark.parametrize(
    "href",
    [None, "", "   ", "#top", "javascript:void(0)", "mailto:jobs@example.com", "http://[::1", 42],
)
def test_resolve_url_rejects_unusable_hrefs(href):
    assert resolve_url(href, BASE) is None


def test_resolve_url_relative_without_base_is_none():
    assert resolve_url("/view?id=1", None) is None


def test_resolve_url_is_deterministic():
    assert resolve_url("/view?id=9#frag", BASE) == resolve_url("/view?id=9#frag", BASE)


def test_strip_fragment():
    assert strip_fragment("https://a.example/x?y=1#z") == "https://a.example/x?y=1"
    assert strip_fragment(None) == ""


def test_job_id_prefers_id_query_param():
    assert job_id_from_url("https://www.talent.com/view?id=5b1e2f") == "5b1e2f"


def test_job_id_falls_back_to_stable_hash():
    a = job_id_from_url("https://example.com/jobs/engineer")
    b = job_id_from_url("https://example.com/jobs/engineer#apply")
    assert a == b
    assert len(a) == 16
    assert job_id_from_url("") == ""


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://www.talent.com/view?id=abc", True),
        ("https://www.talent.com/view/?id=abc&source=x", True),
        ("https://www.talent.com/view", False),
        ("https://www.talent.com/jobs?k=python&p=2", False),
        ("", False),
        (None, False),
    ],
)
def test_is_detail_url(url, expected):
    assert is_detail_url(url) is expected
