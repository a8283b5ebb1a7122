# tests/test_config.py
import json

import pytest

from modules.talent_jobs.lib import config as tj_config
from modules.talent_jobs.lib.config import ConfigError, Settings, build_start_tasks
from modules.talent_jobs.lib.models import Label
from service import config_schema


def test_requires_start_url_or_query():
    with pytest.raises(ConfigError):
        Settings.from_env_and_kwargs({})


def test_defaults():
    s = Settings.from_env_and_kwargs({"search_query": "python"})
    assert s.max_items == 100
    assert s.max_pages == 5
    assert s.include_job_details is True
    assert (s.delay_min_seconds, s.delay_max_seconds) == (3.0, 5.0)
    assert s.max_concurrency == 1
    assert s.max_requests_per_minute == 30
    assert s.output_path is None


def test_camel_case_actor_input_is_accepted():
    s = Settings.from_env_and_kwargs({
        "searchQuery": "nurse",
        "maxItems": "7",
        "includeJobDetails": "false",
        "delayBetweenRequests": 1500,
        "useProxy": True,
        "proxyUrls": "http://p1:8000, http://p2:8000",
    })
    assert s.search_query == "nurse"
    assert s.max_items == 7
    assert s.include_job_details is False
    assert (s.delay_min_seconds, s.delay_max_seconds) == (1.5, 3.5)
    assert s.use_proxy is True
    assert s.proxy_urls == ["http://p1:8000", "http://p2:8000"]


@pytest.mark.parametrize(
    ("kwargs", "bounds"),
    [
        ({"delay_max_seconds": 1}, (1.0, 1.0)),
        ({"delay_max_seconds": "8"}, (3.0, 8.0)),
        ({"delay_min_seconds": 0.5, "delay_max_seconds": 1}, (0.5, 1.0)),
    ],
)
def test_lone_delay_max_lowers_default_min(kwargs, bounds):
    s = Settings.from_env_and_kwargs({"search_query": "python", **kwargs})
    assert (s.delay_min_seconds, s.delay_max_seconds) == bounds


@pytest.mark.parametrize(
    "kwargs",
    [
        {"search_query": "x", "max_items": 0},
        {"search_query": "x", "max_pages": "many"},
        {"search_query": "x", "delay_min_seconds": 5, "delay_max_seconds": 1},
        {"start_url": "not a url"},
        {"search_query": "x", "max_concurrency": 0},
        {"search_query": "x", "delay_max_seconds": -1},
    ],
)
def test_invalid_bounds_raise(kwargs):
    with pytest.raises(ConfigError):
        Settings.from_env_and_kwargs(kwargs)


def test_env_fallbacks(monkeypatch, tmp_path):
    out = tmp_path / "jobs.jsonl"
    monkeypatch.setenv("TALENT_JOBS_OUTPUT", str(out))
    monkeypatch.setenv("TALENT_JOBS_PROXY_URLS", "http://p:1")
    s = Settings.from_env_and_kwargs({"search_query": "x"})
    assert s.output_path == str(out)
    assert s.proxy_urls == ["http://p:1"]


def test_cookies_json_shapes(caplog):
    as_list = tj_config.parse_cookies_json('[{"name": "sid", "value": "1"}, {"value": "nameless"}]')
    assert as_list == [{"name": "sid", "value": "1"}]
    assert tj_config.parse_cookies_json({"a": 1}) == [{"name": "a", "value": "1"}]
    assert tj_config.parse_cookies_json("{oops") == []
    assert "Failed to parse cookies_json" in caplog.text


def test_query_expands_into_one_list_seed_per_page():
    s = Settings.from_env_and_kwargs({"search_query": "data engineer", "location": "Austin, TX", "max_pages": 3})
    tasks = build_start_tasks(s)
    assert [t.page for t in tasks] == [1, 2, 3]
    assert all(t.label is Label.LIST for t in tasks)
    assert tasks[0].url == "https://www.talent.com/jobs?k=data+engineer&l=Austin%2C+TX"
    assert tasks[2].url.endswith("&p=3")


def test_start_url_is_a_single_seed():
    url = "https://www.talent.com/jobs?k=python&l=Remote"
    tasks = build_start_tasks(Settings.from_env_and_kwargs({"start_url": url, "search_query": "ignored"}))
    assert [(t.url, t.page) for t in tasks] == [(url, 1)]


# ----------------------------------------------------------------------
# Input files
# ----------------------------------------------------------------------
def test_load_input_json_maps_aliases(tmp_path, caplog):
    p = tmp_path / "input.json"
    p.write_text(json.dumps({"startUrl": "https://www.talent.com/jobs?k=x", "maxItems": 3, "bogus": 1}), encoding="utf-8")
    cfg = config_schema.load_input(str(p))
    assert cfg == {"start_url": "https://www.talent.com/jobs?k=x", "max_items": 3}
    assert "bogus" in caplog.text
    assert config_schema.validate_input(cfg).max_items == 3


def test_load_input_yaml(tmp_path):
    p = tmp_path / "input.yaml"
    p.write_text("searchQuery: welder\nmax_pages: 2\n", encoding="utf-8")
    assert config_schema.load_input(str(p)) == {"search_query": "welder", "max_pages": 2}


def test_load_input_errors(tmp_path):
    with pytest.raises(ConfigError):
        config_schema.load_input(str(tmp_path / "missing.json"))
    bad = tmp_path / "bad.json"
    bad.write_text("{nope", encoding="utf-8")
    with pytest.raises(ConfigError):
        config_schema.load_input(str(bad))
    listy = tmp_path / "list.yml"
    listy.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        config_schema.load_input(str(listy))


def test_load_input_without_path_is_empty():
    assert config_schema.load_input(None) == {}
