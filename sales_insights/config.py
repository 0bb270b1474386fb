from __future__ import annotations

import os
from pathlib import Path
from typing import Dict

import yaml

from sales_insights.seed import DEFAULT_SEED_URL

DEFAULT_CONFIG: Dict[str, object] = {
    "db_path": "sales_insights.db",
    "seed_url": DEFAULT_SEED_URL,
    "host": "127.0.0.1",
    "port": 5000,
    "per_page": 10,
    "log_level": "INFO",
}

ENV_OVERRIDES: Dict[str, str] = {
    "SALES_INSIGHTS_DB": "db_path",
    "SALES_INSIGHTS_SEED_URL": "seed_url",
    "SALES_INSIGHTS_LOG_LEVEL": "log_level",
}


def _merge_defaults(current: Dict[str, object], defaults: Dict[str, object]) -> Dict[str, object]:
    """Merge missing default keys into the current config recursively."""
    merged = dict(current)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = value
        elif isinstance(value, dict) and isinstance(merged[key], dict):
            merged[key] = _merge_defaults(merged[key], value)
    return merged


def load_config(path: str | Path | None = None) -> Dict[str, object]:
    """Read a YAML config file, fill in defaults and apply environment overrides."""
    data: Dict[str, object] = {}
    if path is not None and Path(path).exists():
        with Path(path).open("r", encoding="utf-8") as fp:
            data = yaml.safe_load(fp) or {}
    config = _merge_defaults(data, DEFAULT_CONFIG)
    for env_key, config_key in ENV_OVERRIDES.items():
        value = os.environ.get(env_key)
        if value:
            config[config_key] = value
    return config
