"""Modular Pydantic Settings v2 configuration.

Settings are split by domain (app/logging/storage), read from environment
variables, an optional .env file and optional YAML/conf.d files, and cached
by the loaders in `loader`.

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. YAML/conf.d files (conf/<domain>.yaml, conf/<domain>.d/*.yaml)
    3. Environment variables
    4. .env file
    5. secrets_dir
"""

from __future__ import annotations

from .app import AppSettings
from .loader import (
    clear_settings_cache,
    get_app_settings,
    get_logging_settings,
    get_storage_settings,
)
from .logs import LoggingSettings
from .storage import StorageSettings

__all__ = [
    "AppSettings",
    "LoggingSettings",
    "StorageSettings",
    "clear_settings_cache",
    "get_app_settings",
    "get_logging_settings",
    "get_storage_settings",
]
