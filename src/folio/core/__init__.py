"""Core utilities for folio."""

from folio.core.auth import AuthSignal, AuthState
from folio.core.config import (
    Settings,
    get_config_path,
    get_global_config_path,
    load_settings,
)

__all__ = [
    # Auth
    "AuthSignal",
    "AuthState",
    # Config
    "Settings",
    "get_config_path",
    "get_global_config_path",
    "load_settings",
]
