"""SQLAlchemy-backed units of work for import reconciliation.

The adapter keeps one engine per process. ``startup()`` maps the domain model,
brings the schema to the latest Alembic revision and prepares a session factory;
every unit of work opens its own session from that factory.

A unit of work rolls its session back on exit unless ``commit()`` was called
inside the block.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Self

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from sitetrack.adapters.sqlalchemy.mappings import start_mappers
from sitetrack.adapters.sqlalchemy.migrations import upgrade_head
from sitetrack.adapters.sqlalchemy.repositories import SqlAlchemyTrackedEntityRepository
from sitetrack.config import get_database_uri

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter is used before ``startup()`` or configured twice."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    session_factory: sessionmaker[Session] | None = None

    def reset(self, engine: Engine | None) -> None:
        self.engine = engine
        self.session_factory = (
            None if engine is None else sessionmaker(bind=engine, expire_on_commit=False)
        )

    def require_session_factory(self) -> sessionmaker[Session]:
        if self.session_factory is None:
            raise StartupError(
                "Tracked-entity store not initialised; call "
                "sitetrack.adapters.sqlalchemy.startup() first."
            )
        return self.session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
    migrate: bool = True,
) -> Engine:
    """Connect the tracked-entity store and return its engine.

    Pass ``force=True`` to replace an engine configured earlier in the process.
    """

    if _STATE.engine is not None and not force:
        raise StartupError(
            "Tracked-entity store already initialised; pass force=True to replace it"
        )

    resolved = engine or create_engine(database_uri or get_database_uri(), future=True)
    start_mappers()
    if migrate:
        upgrade_head(engine=resolved)
    _STATE.reset(resolved)
    log.info(
        "Tracked-entity store ready at %s", resolved.url.render_as_string(hide_password=True)
    )
    return resolved


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget it (tests call this between cases)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.reset(None)


@dataclass(frozen=True, slots=True)
class SqlAlchemyImportRepositories:
    entities: SqlAlchemyTrackedEntityRepository


class SqlAlchemyImportUnitOfWork:
    """One session and its tracked-entity repository, rolled back unless committed."""

    def __init__(self) -> None:
        self._session_factory = _STATE.require_session_factory()
        self._session: Session | None = None
        self._repositories: SqlAlchemyImportRepositories | None = None
        self.committed = False

    def __enter__(self) -> Self:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._session_factory()
        self._repositories = SqlAlchemyImportRepositories(
            entities=SqlAlchemyTrackedEntityRepository(self._session)
        )
        self.committed = False
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None or not self.committed:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    def commit(self) -> None:
        self.session.commit()
        self.committed = True

    def rollback(self) -> None:
        self.session.rollback()
        self.committed = False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open; use it as a context manager")
        return self._session

    @property
    def repositories(self) -> SqlAlchemyImportRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open; use it as a context manager")
        return self._repositories


if TYPE_CHECKING:
    from sitetrack.domain.ports.unit_of_work import ImportUnitOfWork

    _uow_check: ImportUnitOfWork = SqlAlchemyImportUnitOfWork()
