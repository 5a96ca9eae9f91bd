"""Alembic environment for the tracked-entity schema.

``upgrade_head`` hands over an open connection through
``config.attributes["connection"]``; the ``alembic`` command line falls back to
``sqlalchemy.url`` or the configured database URI.
"""

from __future__ import annotations

import logging
from logging.config import fileConfig
from pathlib import Path
from typing import TYPE_CHECKING

from alembic import context
from sqlalchemy import create_engine, make_url, pool

from sitetrack.adapters.sqlalchemy import mapper_registry, start_mappers
from sitetrack.config import get_database_config

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

config = context.config
log = logging.getLogger("alembic.env")

if config.config_file_name and Path(config.config_file_name).suffix == ".ini":
    fileConfig(config.config_file_name)

start_mappers()

# batch mode: SQLite can not ALTER most column properties in place
_CONFIGURE_OPTIONS = {
    "target_metadata": mapper_registry.metadata,
    "render_as_batch": True,
    "compare_type": True,
}


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **_CONFIGURE_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    """Emit the migration SQL for ``alembic upgrade --sql``."""

    context.configure(url=_database_url(), literal_binds=True, **_CONFIGURE_OPTIONS)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    handed_over: Connection | None = config.attributes.get("connection")
    if handed_over is not None:
        _migrate(handed_over)
        return

    url = _database_url()
    log.info("Migrating %s", make_url(url).render_as_string(hide_password=True))
    engine = create_engine(url, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            _migrate(connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
