# service/config_schema.py
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from typing import Any

import yaml

from modules.talent_jobs.lib.config import INPUT_ALIASES, ConfigError, Settings, normalize_input_keys

logger = logging.getLogger(__name__)

# Every key an input file may carry (snake_case fields + camelCase aliases)
_SETTINGS_KEYS = {f.name for f in fields(Settings)} | {"delay_between_requests"}
KNOWN_KEYS = _SETTINGS_KEYS | set(INPUT_ALIASES)


@dataclass
class _LoadResult:
    """Internal convenience container (not required by callers)."""

    cfg: dict[str, Any]
    source: str


def load_input(path: str | None = None) -> dict[str, Any]:
    """
    Load a crawl input file.

    Resolution order:
      1) Explicit `path` argument (if provided)
      2) os.environ['TALENT_JOBS_INPUT'] (if set)
      3) Empty input (callers then rely on CLI flags)

    Returns:
        dict of Settings kwargs with camelCase actor names mapped to snake_case.
    """
    resolved_path = path or os.environ.get("TALENT_JOBS_INPUT")
    if not resolved_path:
        logger.info("No input file provided; using empty input.")
        return {}

    lr = _read_any(resolved_path)
    if not isinstance(lr.cfg, dict):
        raise ConfigError(f"Top-level input in {lr.source} must be an object.")

    unknown = sorted(k for k in lr.cfg if k not in KNOWN_KEYS)
    if unknown:
        logger.warning("Ignoring unknown input keys in %s: %s", lr.source, ", ".join(unknown))
    return normalize_input_keys({k: v for k, v in lr.cfg.items() if k in KNOWN_KEYS})


def validate_input(cfg: dict[str, Any]) -> Settings:
    """
    Validate loaded input by building Settings from it. Raise ConfigError on
    any problem. No prints, no sys.exit().
    """
    if not isinstance(cfg, dict):
        raise ConfigError("Input must be a dict.")
    return Settings.from_env_and_kwargs(cfg)


def _read_any(path: str) -> _LoadResult:
    lower = path.lower()
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except FileNotFoundError as e:
        raise ConfigError(f"Input file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read input file: {path}: {e}") from e

    if lower.endswith(".json"):
        try:
            return _LoadResult(cfg=json.loads(text), source=path)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if lower.endswith(".yml") or lower.endswith(".yaml"):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        return _LoadResult(cfg=data if data is not None else {}, source=path)

    # Try JSON as a fallback if extension is unknown
    try:
        return _LoadResult(cfg=json.loads(text), source=path)
    except json.JSONDecodeError:
        pass

    raise ConfigError(f"Unsupported input format for {path}. Use .json or .yml/.yaml.")
