"""
Configuration module for Refinery.

Provides Pydantic-based settings management with YAML file support
and environment variable overrides.
"""

from refinery.config.settings import (
    Settings,
    ExtractorSettings,
    LoggingSettings,
)
from refinery.config.loader import (
    load_config,
    get_settings,
    reset_settings,
    get_default_config_path,
)

__all__ = [
    "Settings",
    "ExtractorSettings",
    "LoggingSettings",
    "load_config",
    "get_settings",
    "reset_settings",
    "get_default_config_path",
]
