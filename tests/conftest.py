from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from sitetrack.adapters.sqlalchemy import start_mappers
from sitetrack.adapters.sqlalchemy.migrations import upgrade_head
from sitetrack.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    shutdown,
    startup,
)

# nothing under test may reach the per-user database
os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.engine import Engine

IN_MEMORY_SQLITE = "sqlite+pysqlite:///:memory:"


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    """A migrated in-memory store; every test gets a fresh one."""

    engine = create_engine(IN_MEMORY_SQLITE)
    start_mappers()
    upgrade_head(engine=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    with Session(sqlite_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyImportUnitOfWork]]:
    """Start the adapter on ``sqlite_engine`` and hand out unit-of-work constructors."""

    startup(engine=sqlite_engine, force=True, migrate=False)
    yield SqlAlchemyImportUnitOfWork
    shutdown()
