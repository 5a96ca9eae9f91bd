"""Where the tracked-entity database lives.

``DATABASE_URI`` wins outright. Otherwise the store is a SQLite file named
``sitetrack.db`` inside ``SITETRACK_DATA_DIR`` or the platform's per-user data
directory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_value, optional_path_env

DATA_DIR_ENV: Final[str] = "SITETRACK_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
DEFAULT_DB_FILENAME: Final[str] = "sitetrack.db"


def platform_data_dir() -> Path:
    if os.name == "nt":
        root = env_value("LOCALAPPDATA") or Path.home() / "AppData" / "Local"
    else:
        root = env_value("XDG_DATA_HOME") or Path.home() / ".local" / "share"
    return Path(root) / "sitetrack"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def database_path(self, *, ensure: bool = True) -> Path:
        """Path of the SQLite file; creates its directory unless ``ensure`` is off."""

        directory = self.resolve_data_dir()
        if ensure:
            directory.mkdir(parents=True, exist_ok=True)
        return directory / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_storage_config() -> StorageConfig:
    return StorageConfig(data_dir=optional_path_env(DATA_DIR_ENV) or platform_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    override = env_value(DATABASE_URI_ENV)
    if override is not None:
        return DatabaseConfig(uri=override)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())


def get_database_uri() -> str:
    return get_database_config().uri
