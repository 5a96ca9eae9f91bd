"""SQLAlchemy adapter package for sitetrack."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers, tracked_entity_table
from .repositories import SqlAlchemyTrackedEntityRepository
from .unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyImportUnitOfWork",
    "SqlAlchemyTrackedEntityRepository",
    "StartupError",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
    "tracked_entity_table",
]
