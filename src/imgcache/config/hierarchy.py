"""Configuration hierarchy — merges sources in priority order.

Precedence (later overrides earlier):
  1. Package defaults
  2. Global config   (~/.imgcache/config.yaml)
  3. Project config   (./imgcache.yaml, searched upward from cwd)
  4. Environment variables (IMGCACHE_<KEY>)
  5. Runtime arguments
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

import yaml

from imgcache.config.defaults import get_defaults

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = Path.home() / ".imgcache" / "config.yaml"
_PROJECT_CONFIG_NAME = "imgcache.yaml"
_ENV_PREFIX = "IMGCACHE_"

# Fixed by the on-disk layout, never read from the environment
_NOT_FROM_ENV = frozenset({"file_extension"})

# Tri-state: true, false, or None for "probe the cache directory"
_OPTIONAL_BOOL_KEYS = frozenset({"local_storage"})

_TRUTHY = {"1", "true", "yes", "on"}
_AUTO = {"auto", ""}


def load_config_hierarchy(**runtime_overrides: Any) -> dict[str, Any]:
    """Load and merge configuration from all sources.

    Runtime overrides set to None are treated as unset.
    """
    config = get_defaults()
    for layer, values in _layers(runtime_overrides):
        if values:
            logger.debug("Config layer %s sets %s", layer, sorted(values))
            config.update(values)
    return config


def _layers(runtime_overrides: Mapping[str, Any]) -> Iterator[tuple[str, dict[str, Any]]]:
    yield str(_GLOBAL_CONFIG_PATH), _load_yaml_config(_GLOBAL_CONFIG_PATH) or {}

    project_path = _find_project_config()
    if project_path is not None:
        yield str(project_path), _load_yaml_config(project_path) or {}

    yield "environment", _load_env_vars()
    yield "runtime", {k: v for k, v in runtime_overrides.items() if v is not None}


def _load_yaml_config(path: Path) -> dict[str, Any] | None:
    """Parse a YAML mapping, or return None if the file is absent or unusable."""
    if not path.is_file():
        return None
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, ignoring", path)
        return None
    return data


def _find_project_config() -> Path | None:
    cwd = Path.cwd()
    candidates = (d / _PROJECT_CONFIG_NAME for d in (cwd, *cwd.parents))
    return next((c for c in candidates if c.exists()), None)


def _load_env_vars() -> dict[str, Any]:
    """Read IMGCACHE_<KEY> for every defaulted key."""
    result: dict[str, Any] = {}
    for key in get_defaults():
        if key in _NOT_FROM_ENV:
            continue
        raw = os.environ.get(_ENV_PREFIX + key.upper())
        if raw is not None:
            result[key] = _coerce_env_value(key, raw)
    return result


def _coerce_env_value(key: str, value: str) -> Any:
    """Convert an env string to the type of the key's default value."""
    lowered = value.strip().lower()
    if key in _OPTIONAL_BOOL_KEYS:
        return None if lowered in _AUTO else lowered in _TRUTHY

    default = get_defaults().get(key)
    if isinstance(default, bool):
        return lowered in _TRUTHY
    if isinstance(default, Path):
        return Path(value)
    if isinstance(default, int):
        try:
            return int(value)
        except ValueError:
            logger.warning("Cannot convert env var for '%s' to int: %s", key, value)
            return value
    return value
