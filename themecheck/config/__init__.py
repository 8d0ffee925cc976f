"""
Run configuration: ``.theme-check.yml`` loading and per-check settings.
"""

from __future__ import annotations

from .load import CONFIG_FILE_NAME, config_uri, load_config
from .model import CheckSettings, ThemeCheckConfig, resolve_settings
from .typed import ConfigLoadError, load_typed

__all__ = [
    "CONFIG_FILE_NAME",
    "CheckSettings",
    "ConfigLoadError",
    "ThemeCheckConfig",
    "config_uri",
    "load_config",
    "load_typed",
    "resolve_settings",
]
