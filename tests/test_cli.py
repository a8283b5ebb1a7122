# tests/test_cli.py
import json

import pytest

from modules.talent_jobs.lib.models import JobRecord
from service import cli


@pytest.fixture
def fake_run(monkeypatch):
    calls = []

    def run(sink=None, **kwargs):
        calls.append(kwargs)
        if sink is not None:
            sink.push(JobRecord(title="Stub job", seq=1))
        return {"emitted": 1, "output_path": kwargs.get("output_path")}

    monkeypatch.setattr(cli._talent_jobs, "run", run)
    return calls


def test_crawl_prints_records_without_output(fake_run, capsys):
    rc = cli.main(["crawl", "--query", "python", "--max-items", "3", "--no-details"])
    assert rc == 0
    assert fake_run == [{"search_query": "python", "max_items": 3, "include_job_details": False}]
    out = capsys.readouterr().out.strip().splitlines()
    assert json.loads(out[0])["title"] == "Stub job"


def test_crawl_merges_input_file_with_flags(fake_run, tmp_path, capsys):
    p = tmp_path / "input.json"
    p.write_text(json.dumps({"searchQuery": "nurse", "maxItems": 9, "useProxy": False}), encoding="utf-8")
    out_path = tmp_path / "jobs.jsonl"
    rc = cli.main([
        "crawl",
        "--input", str(p),
        "--max-items", "4",
        "--proxy-url", "http://p1:1",
        "--proxy-url", "http://p2:2",
        "--use-proxy",
        "--output", str(out_path),
    ])
    assert rc == 0
    [kwargs] = fake_run
    assert kwargs["search_query"] == "nurse"
    assert kwargs["max_items"] == 4
    assert kwargs["use_proxy"] is True
    assert kwargs["proxy_urls"] == ["http://p1:1", "http://p2:2"]
    assert kwargs["output_path"] == str(out_path)
    assert "written to" in capsys.readouterr().out


def test_crawl_config_error_exits_2(capsys):
    rc = cli.main(["crawl", "--max-items", "3"])
    assert rc == 2
    assert "configuration invalid" in capsys.readouterr().err


def test_crawl_runtime_failure_exits_1(monkeypatch, capsys):
    def run(sink=None, **kwargs):
        raise RuntimeError("network down")

    monkeypatch.setattr(cli._talent_jobs, "run", run)
    assert cli.main(["crawl", "--query", "x"]) == 1
    assert "network down" in capsys.readouterr().err


def test_crawl_interrupt_exits_130(monkeypatch):
    def run(sink=None, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli._talent_jobs, "run", run)
    assert cli.main(["crawl", "--query", "x"]) == 130


def test_validate_input(tmp_path, capsys):
    good = tmp_path / "good.yaml"
    good.write_text("startUrl: https://www.talent.com/jobs?k=python\nmaxItems: 5\n", encoding="utf-8")
    assert cli.main(["validate-input", str(good)]) == 0
    assert "OK" in capsys.readouterr().out

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"maxItems": 5}), encoding="utf-8")
    assert cli.main(["validate-input", str(bad)]) == 2
