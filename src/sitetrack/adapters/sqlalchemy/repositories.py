"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from sitetrack.adapters.sqlalchemy.mappings import tracked_entity_table
from sitetrack.domain.model import TrackedEntity, utcnow
from sitetrack.domain.reconciliation import StoreWriteError, apply_user_edit, schema_for

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from uuid import UUID

    from sqlalchemy import Select
    from sqlalchemy.orm import Session

    from sitetrack.domain.model import EntityFamily
    from sitetrack.domain.reconciliation import EntityDraft

log = logging.getLogger(__name__)

_columns = tracked_entity_table.c


class SqlAlchemyTrackedEntityRepository:
    """Lookups, import writes and user edits for tracked entities.

    Import writes run inside a savepoint so a failing row leaves the rest of the
    session usable; failures surface as ``StoreWriteError``.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # -- reads -------------------------------------------------------------

    def get(self, entity_id: UUID) -> TrackedEntity | None:
        return self.session.get(TrackedEntity, entity_id)

    def find_by_external_id(
        self, family: EntityFamily, external_id: str
    ) -> Sequence[TrackedEntity]:
        return self._all(_family_query(family).where(_columns.external_id == external_id))

    def find_by_natural_key(self, family: EntityFamily, key: str) -> Sequence[TrackedEntity]:
        return self._all(_family_query(family).where(_columns.dedupe_key == key))

    def find_by_fuzzy_value(
        self,
        family: EntityFamily,
        name_key: str,
        value: Decimal,
        tolerance: float,
    ) -> Sequence[TrackedEntity]:
        spread = abs(value) * Decimal(str(tolerance))
        stmt = (
            _family_query(family)
            .where(_columns.name_key == name_key)
            .where(_columns.value.is_not(None))
            .where(_columns.value.between(value - spread, value + spread))
        )
        return self._all(stmt)

    # -- import writes -----------------------------------------------------

    def insert(self, draft: EntityDraft) -> UUID:
        schema = schema_for(draft.family)
        now = utcnow()
        entity = TrackedEntity(family=schema.family, name=str(draft.values["name"]))
        for name, value in draft.values.items():
            setattr(entity, name, value)
        entity.dedupe_key, entity.name_key = schema.keys_for_entity(entity)
        entity.created_at = now
        entity.updated_at = now
        entity.last_imported_at = now

        try:
            with self.session.begin_nested():
                self.session.add(entity)
        except SQLAlchemyError as exc:
            raise StoreWriteError(f"Could not insert {schema.family} {entity.name!r}") from exc
        log.debug("Inserted %s %s", schema.family, entity.id)
        return entity.id

    def apply_diff(self, entity_id: UUID, diff: Mapping[str, object]) -> None:
        entity = self.get(entity_id)
        if entity is None:
            raise StoreWriteError(f"Entity {entity_id} no longer exists")
        schema = schema_for(entity.family)

        try:
            with self.session.begin_nested():
                entity.apply_changes(diff)
                entity.dedupe_key, entity.name_key = schema.keys_for_entity(entity)
        except SQLAlchemyError as exc:
            raise StoreWriteError(f"Could not update {schema.family} {entity_id}") from exc
        log.debug("Updated %s %s: %s", schema.family, entity_id, ", ".join(sorted(diff)))

    # -- user edits --------------------------------------------------------

    def record_user_edit(self, entity_id: UUID, changes: Mapping[str, object]) -> TrackedEntity:
        entity = self._require(entity_id)
        schema = schema_for(entity.family)
        apply_user_edit(entity, changes, schema=schema)
        entity.dedupe_key, entity.name_key = schema.keys_for_entity(entity)
        self.session.flush()
        return entity

    def unlock_fields(self, entity_id: UUID, fields: Sequence[str] | None = None) -> set[str]:
        entity = self._require(entity_id)
        remaining = entity.unlock(fields)
        self.session.flush()
        return remaining

    # -- helpers -----------------------------------------------------------

    def _require(self, entity_id: UUID) -> TrackedEntity:
        entity = self.get(entity_id)
        if entity is None:
            raise LookupError(f"No tracked entity with id {entity_id}")
        return entity

    def _all(self, stmt: Select[tuple[TrackedEntity]]) -> Sequence[TrackedEntity]:
        return tuple(self.session.scalars(stmt))


def _family_query(family: EntityFamily) -> Select[tuple[TrackedEntity]]:
    return (
        select(TrackedEntity)
        .where(_columns.family == family)
        .order_by(_columns.created_at, _columns.id)
    )
