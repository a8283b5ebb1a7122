# service/cli.py
"""
User-facing command-line entrypoints.

Subcommands
-----------
crawl [--input FILE] [--start-url URL | --query Q] [options ...]
    - Builds kwargs from the optional input file, then applies CLI flags on top
    - Runs modules.talent_jobs.main.run(...) once
    - Without --output, prints one JSON record per line to stdout

validate-input FILE
    - Loads the input file and validates it; returns nonzero on error

Exit codes: 0 success, 1 runtime failure, 2 configuration error, 130 interrupted.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
import uuid
from datetime import datetime
from typing import Any

from modules.talent_jobs import main as _talent_jobs
from modules.talent_jobs.lib.config import ConfigError
from modules.talent_jobs.lib.sink import ListSink
from service import config_schema as _config_schema
from service import logging_utils as L

LOG = logging.getLogger("service.cli")


# ----------------------------- Logging setup ---------------------------------
def _ensure_logging(debug: bool = False) -> None:
    """Initialize a reasonable logging setup if none exists yet."""
    root = logging.getLogger()
    level_name = "DEBUG" if debug else os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    elif debug:
        root.setLevel(level)


def _now_iso():
    return datetime.now().astimezone().isoformat()


# -------------------------- Utility / glue code ------------------------------
# argparse dest -> Settings kwarg; only flags the user actually passed are applied
_FLAG_TO_KWARG = {
    "start_url": "start_url",
    "query": "search_query",
    "location": "location",
    "max_pages": "max_pages",
    "max_items": "max_items",
    "delay_min": "delay_min_seconds",
    "delay_max": "delay_max_seconds",
    "max_concurrency": "max_concurrency",
    "rpm": "max_requests_per_minute",
    "retries": "max_request_retries",
    "timeout": "request_timeout",
    "cookies": "cookies",
    "cookies_json": "cookies_json",
    "proxy_url": "proxy_urls",
    "output": "output_path",
}


def _crawl_kwargs(args: argparse.Namespace) -> dict[str, Any]:
    kwargs = _config_schema.load_input(args.input) if args.input else {}
    for dest, key in _FLAG_TO_KWARG.items():
        value = getattr(args, dest, None)
        if value is not None:
            kwargs[key] = value
    if args.no_details:
        kwargs["include_job_details"] = False
    if args.use_proxy:
        kwargs["use_proxy"] = True
    if args.debug:
        kwargs["debug_mode"] = True
    return kwargs


# ------------------------------ Subcommands ----------------------------------
def cmd_crawl(args: argparse.Namespace) -> int:
    run_id = uuid.uuid4().hex
    start_time = time.monotonic()
    kwargs: dict[str, Any] = {}

    try:
        kwargs = _crawl_kwargs(args)
        _ensure_logging(debug=bool(kwargs.get("debug_mode")))
        LOG.debug("Crawl with kwargs=%s", sorted(kwargs))

        sink = None if kwargs.get("output_path") else ListSink()
        summary = _talent_jobs.run(sink=sink, **kwargs)

        duration_ms = int((time.monotonic() - start_time) * 1000)
        L.write_activity_log({
            "ts": _now_iso(),
            "event": "cli_crawl",
            "run_id": run_id,
            "emitted": summary.get("emitted"),
            "output_path": summary.get("output_path"),
            "duration_ms": duration_ms,
        })

        # Console output
        if sink is not None:
            for record in sink.records:
                print(json.dumps(record.to_dict(), ensure_ascii=False))
            print(f"DONE: {summary['emitted']} job(s) scraped.", file=sys.stderr)
        else:
            print(f"DONE: {summary['emitted']} job(s) written to {summary['output_path']}.")
        return 0

    except KeyboardInterrupt:
        return 130
    except ConfigError as e:
        print(f"ERROR: configuration invalid: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        duration_s = time.monotonic() - start_time
        print(f"FAILURE: {e}", file=sys.stderr)
        L.write_error_log({
            "ts": _now_iso(),
            "where": "cli.crawl",
            "run_id": run_id,
            "kwargs": kwargs,
            "error": repr(e),
            "duration_ms": int(duration_s * 1000),
        })
        return 1


def cmd_validate_input(args: argparse.Namespace) -> int:
    try:
        cfg = _config_schema.load_input(args.file)
        settings = _config_schema.validate_input(cfg)
        target = settings.start_url or settings.search_url(1)
        print(f"OK: input is valid ({target}, max_items={settings.max_items}).")
        return 0
    except KeyboardInterrupt:
        return 130
    except ConfigError as e:
        print(f"ERROR: input invalid: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        LOG.exception("Input validation failed: %s", e)
        print(f"ERROR: input validation failed: {e}", file=sys.stderr)
        return 1


# ------------------------------- Argparse ------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="python -m service.cli",
        description="talent.com job crawler",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    # crawl
    sp = sub.add_parser("crawl", help="Crawl talent.com search results (and optionally detail pages).")
    sp.add_argument("--input", help="JSON or YAML input file (actor-style camelCase keys accepted).")
    sp.add_argument("--start-url", help="A talent.com search URL to start from.")
    sp.add_argument("--query", help="Search keyword (used when no start URL is given).")
    sp.add_argument("--location", help="Search location.")
    sp.add_argument("--max-pages", type=int, help="Maximum list pages to visit (default 5).")
    sp.add_argument("--max-items", type=int, help="Maximum records to produce (default 100).")
    sp.add_argument("--no-details", action="store_true", help="Emit list-page summaries without visiting detail pages.")
    sp.add_argument("--delay-min", type=float, help="Minimum per-page delay in seconds.")
    sp.add_argument("--delay-max", type=float, help="Maximum per-page delay in seconds.")
    sp.add_argument("--max-concurrency", type=int, help="Pages processed concurrently (default 1).")
    sp.add_argument("--rpm", type=int, help="Maximum requests per minute (default 30).")
    sp.add_argument("--retries", type=int, help="Maximum retries per request (default 5).")
    sp.add_argument("--timeout", type=float, help="Per-request timeout in seconds (default 30).")
    sp.add_argument("--cookies", help="Raw Cookie header value.")
    sp.add_argument("--cookies-json", help="Cookies as a JSON list of {name, value} or an object.")
    sp.add_argument("--use-proxy", action="store_true", help="Route requests through the configured proxies.")
    sp.add_argument("--proxy-url", action="append", help="Proxy URL (repeatable).")
    sp.add_argument("--output", help="Write records to this JSONL file instead of stdout.")
    sp.add_argument("--debug", action="store_true", help="Verbose logging.")
    sp.set_defaults(func=cmd_crawl)

    # validate-input
    sp = sub.add_parser("validate-input", help="Validate a crawl input file and exit.")
    sp.add_argument("file", help="Path to a .json or .yml/.yaml input file.")
    sp.set_defaults(func=cmd_validate_input)

    return p


def main(argv: list[str] | None = None) -> int:
    _ensure_logging()
    parser = _build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
