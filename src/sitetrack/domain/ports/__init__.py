"""Store-facing protocols the reconciliation engine and the app depend on."""

from __future__ import annotations

from .persistence import EntityEditor, EntityReader, EntityWriter, TrackedEntityRepository
from .unit_of_work import ImportRepositories, ImportUnitOfWork

__all__ = [
    "EntityEditor",
    "EntityReader",
    "EntityWriter",
    "ImportRepositories",
    "ImportUnitOfWork",
    "TrackedEntityRepository",
]
