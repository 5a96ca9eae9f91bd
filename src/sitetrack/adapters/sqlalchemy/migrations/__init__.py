"""Alembic wiring for the tracked-entity schema.

Settings come from ``[tool.alembic]`` in the project's pyproject.toml, so no
``alembic.ini`` is needed. Installed copies without that file use the revisions
shipped next to this module.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from sitetrack.config import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent
PROJECT_ROOT: Final[Path] = MIGRATIONS_PATH.parents[4]
PYPROJECT_PATH: Final[Path] = PROJECT_ROOT / "pyproject.toml"


@dataclass(frozen=True, slots=True)
class MigrationSettings:
    script_location: Path = MIGRATIONS_PATH
    main_options: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_pyproject(cls, path: Path = PYPROJECT_PATH) -> MigrationSettings:
        if not path.is_file():
            return cls()
        with path.open("rb") as handle:
            section = tomllib.load(handle).get("tool", {}).get("alembic", {})

        options = {str(key): str(value) for key, value in section.items()}
        location = options.pop("script_location", None)
        if location is None:
            return cls(main_options=options)
        script_path = Path(location)
        if not script_path.is_absolute():
            script_path = path.parent / script_path
        return cls(
            script_location=script_path if script_path.is_dir() else MIGRATIONS_PATH,
            main_options=options,
        )

    def alembic_config(self) -> Config:
        config = Config()
        config.set_main_option("script_location", str(self.script_location))
        for key, value in self.main_options.items():
            config.set_main_option(key, value)
        return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Bring the schema behind ``engine`` (or ``database_uri``) to the newest revision."""

    config = MigrationSettings.from_pyproject().alembic_config()
    if engine is None:
        config.set_main_option("sqlalchemy.url", database_uri or get_database_uri())
        command.upgrade(config, "head")
        return
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")
