"""Ports for reading and writing tracked entities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from decimal import Decimal
    from uuid import UUID

    from sitetrack.domain.model import EntityFamily, TrackedEntity
    from sitetrack.domain.reconciliation.contracts import EntityDraft


@runtime_checkable
class EntityReader(Protocol):
    """Read-only lookups used by the matcher."""

    def find_by_external_id(
        self, family: EntityFamily, external_id: str
    ) -> Sequence[TrackedEntity]: ...

    def find_by_natural_key(self, family: EntityFamily, key: str) -> Sequence[TrackedEntity]: ...

    def find_by_fuzzy_value(
        self,
        family: EntityFamily,
        name_key: str,
        value: Decimal,
        tolerance: float,
    ) -> Sequence[TrackedEntity]: ...


@runtime_checkable
class EntityWriter(Protocol):
    """Write operations applied during the commit phase of a run."""

    def insert(self, draft: EntityDraft) -> UUID: ...

    def apply_diff(self, entity_id: UUID, diff: Mapping[str, object]) -> None: ...


@runtime_checkable
class EntityEditor(Protocol):
    """User-facing edits that bypass the import policy."""

    def get(self, entity_id: UUID) -> TrackedEntity | None: ...

    def record_user_edit(self, entity_id: UUID, changes: Mapping[str, object]) -> TrackedEntity: ...

    def unlock_fields(self, entity_id: UUID, fields: Sequence[str] | None = None) -> set[str]: ...


@runtime_checkable
class TrackedEntityRepository(EntityReader, EntityWriter, EntityEditor, Protocol):
    """Full persistence contract for tracked entities."""
