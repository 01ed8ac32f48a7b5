"""
Configuration and settings resolution.

Settings for the content API and the analytics views come from YAML files
plus a couple of environment overrides.

Resolution order for each setting:
  1. FOLIO_API_URL / FOLIO_API_TOKEN environment variables (highest priority)
  2. Local .folio/config.yaml, found by walking up from cwd
  3. Global config file (~/.config/folio/config.yaml)
  4. Built-in defaults

A value that cannot be converted to its type falls back to the default.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from folio.analytics.timeline import TimeRange

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT = 10.0
DEFAULT_POLL_INTERVAL = 30.0
DEFAULT_FEED_LIMIT = 10
DEFAULT_DASHBOARD_FEED_LIMIT = 5
DEFAULT_RANGE = "30d"

ENV_API_URL = "FOLIO_API_URL"
ENV_API_TOKEN = "FOLIO_API_TOKEN"


@dataclass(frozen=True)
class Settings:
    """Resolved settings for one invocation."""

    api_url: str = DEFAULT_API_URL
    api_token: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    feed_limit: int = DEFAULT_FEED_LIMIT
    dashboard_feed_limit: int = DEFAULT_DASHBOARD_FEED_LIMIT
    default_range: str = DEFAULT_RANGE

    @property
    def is_authenticated(self) -> bool:
        return bool(self.api_token)


def get_global_config_path() -> Path:
    """Return the path to the global folio config file.

    Respects XDG_CONFIG_HOME if set, otherwise defaults to
    ~/.config/folio/config.yaml.
    """
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        base = Path(xdg_config_home)
    else:
        base = Path.home() / ".config"
    return base / "folio" / "config.yaml"


def find_local_config_dir(start_path: Path | None = None) -> Path | None:
    """Walk up from start_path (or cwd) looking for a .folio/ directory.

    Returns:
        Path to the .folio/ directory, or None if not found.
    """
    if start_path is None:
        start_path = Path.cwd()
    current = Path(start_path).resolve()
    while current != current.parent:
        candidate = current / ".folio"
        if candidate.is_dir():
            return candidate
        current = current.parent
    return None


def get_config_path(start_path: Path | None = None) -> Path:
    """Return the config file that `folio config` reads and writes.

    The local .folio/config.yaml wins when a .folio/ directory exists,
    otherwise the global file is used.
    """
    local_dir = find_local_config_dir(start_path)
    if local_dir is not None:
        return local_dir / "config.yaml"
    return get_global_config_path()


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML config file.

    Returns:
        Configuration dict, or empty dict if file is missing or invalid.
    """
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return {}
    if isinstance(data, dict):
        return data
    return {}


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _lookup(config: dict[str, Any], key: str, default: Any = None) -> Any:
    current: Any = config
    for part in key.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return default
    return current


def _typed(
    config: dict[str, Any],
    key: str,
    convert: Callable[[Any], Any],
    default: Any,
) -> Any:
    """Look up and convert a setting, falling back to the default if it is invalid."""
    value = _lookup(config, key)
    if value is None:
        return default
    try:
        return convert(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid value for %s: %r (using %r)", key, value, default)
        return default


def load_settings(start_path: Path | None = None) -> Settings:
    """Resolve settings from environment, local and global config files."""
    config = load_yaml_config(get_global_config_path())
    local_dir = find_local_config_dir(start_path)
    if local_dir is not None:
        config = _merge(config, load_yaml_config(local_dir / "config.yaml"))

    api_url = os.environ.get(ENV_API_URL) or _lookup(config, "api.base_url", DEFAULT_API_URL)
    api_token = os.environ.get(ENV_API_TOKEN) or _lookup(config, "api.token")

    return Settings(
        api_url=str(api_url).rstrip("/"),
        api_token=str(api_token) if api_token else None,
        timeout=_typed(config, "api.timeout", float, DEFAULT_TIMEOUT),
        poll_interval=_typed(config, "messages.poll_interval", float, DEFAULT_POLL_INTERVAL),
        feed_limit=_typed(config, "analytics.feed_limit", int, DEFAULT_FEED_LIMIT),
        dashboard_feed_limit=_typed(
            config, "analytics.dashboard_feed_limit", int, DEFAULT_DASHBOARD_FEED_LIMIT
        ),
        default_range=_typed(
            config, "analytics.default_range", lambda v: TimeRange.parse(v).value, DEFAULT_RANGE
        ),
    )
