"""Application configuration helpers."""

from __future__ import annotations

from .env import env_value, optional_float_env, optional_path_env
from .errors import ConfigurationError
from .imports import DEFAULT_FUZZY_TOLERANCE, ImportConfig, get_import_config
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "DEFAULT_FUZZY_TOLERANCE",
    "ConfigurationError",
    "DatabaseConfig",
    "ImportConfig",
    "StorageConfig",
    "configure_logging",
    "env_value",
    "get_database_config",
    "get_database_uri",
    "get_import_config",
    "get_storage_config",
    "optional_float_env",
    "optional_path_env",
]
