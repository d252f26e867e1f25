"""
config_loader.py — Unified configuration loader
================================================
Merges config.tech.yaml (infrastructure settings) and config.content.yaml
(optional local overrides) into a single dict, then applies environment
overrides for the values that should never live in a committed file.

Precedence (last wins):
  config.tech.yaml  <  config.content.yaml  <  environment variables

Environment overrides:
  PORTFOLIO_API_TOKEN  → security.api_token
  PORTFOLIO_DB_PATH    → database.path
"""

import os
from pathlib import Path

import yaml

ROOT = Path(__file__).parent

ENV_OVERRIDES = {
    "PORTFOLIO_API_TOKEN": ("security", "api_token"),
    "PORTFOLIO_DB_PATH":   ("database", "path"),
}


def _merge(base: dict, extra: dict) -> dict:
    """Recursively merge *extra* into *base* (in place) and return *base*."""
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(root: Path | str | None = None) -> dict:
    """
    Load and merge config.tech.yaml + config.content.yaml, then apply env overrides.

    Args:
        root: Project root directory. Defaults to the directory containing
              this file (i.e. the project root).

    Returns:
        Merged configuration dict.
    """
    root = Path(root) if root is not None else ROOT

    merged: dict = {}
    for name in ("config.tech.yaml", "config.content.yaml"):
        path = root / name
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}
            _merge(merged, data)

    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            merged.setdefault(section, {})[key] = value

    return merged


def resolve_db_path(config: dict, root: Path | str | None = None) -> Path:
    """Return the configured database path, resolved against the project root."""
    root = Path(root) if root is not None else ROOT
    path = Path(config.get("database", {}).get("path", "db/portfolio.db"))
    if not path.is_absolute():
        path = root / path
    return path
