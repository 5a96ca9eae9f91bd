"""SQLAlchemy mapping metadata for tracked entities."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Dialect,
    Enum,
    Index,
    Numeric,
    String,
    Table,
    Text,
    TypeDecorator,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from sitetrack.domain.model import (
    EntityFamily,
    InteractionType,
    JobStatus,
    Temperature,
    TrackedEntity,
)
from sitetrack.domain.reconciliation.normalize import VALUE_DECIMAL_PLACES

if TYPE_CHECKING:
    from enum import StrEnum

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class FieldNameSetType(TypeDecorator[set[str]]):
    """Store a set of field names as a sorted JSON array."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: set[str] | None, dialect: Dialect) -> str:
        _ = dialect
        return json.dumps(sorted(value or ()))

    def process_result_value(self, value: str | None, dialect: Dialect) -> set[str]:
        _ = dialect
        if value is None:
            return set()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return set()
        items = cast(list[Any], loaded)
        return {item for item in items if isinstance(item, str)}


def _interaction_type_column() -> Enum:
    return Enum(InteractionType, native_enum=False, values_callable=_enum_values, length=16)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

tracked_entity_table = Table(
    "tracked_entity",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "family",
        Enum(EntityFamily, native_enum=False, values_callable=_enum_values, length=16),
        nullable=False,
    ),
    Column("name", String, nullable=False),
    Column("address", String, nullable=False, default=""),
    Column("company_name", String, nullable=True),
    Column("external_id", String, nullable=True),
    Column("value", Numeric(14, VALUE_DECIMAL_PLACES), nullable=True),
    Column(
        "status",
        Enum(JobStatus, native_enum=False, values_callable=_enum_values, length=16),
        nullable=True,
    ),
    Column("category", String(32), nullable=True),
    Column("description", Text, nullable=True),
    Column("contractor", String, nullable=True),
    Column("owner", String, nullable=True),
    Column("architect", String, nullable=True),
    Column("phone", String, nullable=True),
    Column("email", String, nullable=True),
    Column("county", String, nullable=True),
    Column("role", String, nullable=True),
    Column("start_date", Date, nullable=True),
    Column("end_date", Date, nullable=True),
    Column("interaction_type", _interaction_type_column(), nullable=True),
    Column("occurred_on", Date, nullable=True),
    Column("last_interaction_on", Date, nullable=True),
    Column("last_interaction_type", _interaction_type_column(), nullable=True),
    Column("is_viewed", Boolean, nullable=False, default=False),
    Column("user_notes", Text, nullable=False, default=""),
    Column("is_favorite", Boolean, nullable=False, default=False),
    Column(
        "temperature",
        Enum(Temperature, native_enum=False, values_callable=_enum_values, length=16),
        nullable=True,
    ),
    Column("is_cold", Boolean, nullable=False, default=False),
    Column("locked_fields", FieldNameSetType, nullable=False),
    Column("dedupe_key", String, nullable=True),
    Column("name_key", String, nullable=True),
    Column("created_at", UTCDateTime, nullable=True),
    Column("updated_at", UTCDateTime, nullable=True),
    Column("last_imported_at", UTCDateTime, nullable=True),
    Index("ix_tracked_entity_family_external_id", "family", "external_id"),
    Index("ix_tracked_entity_family_dedupe_key", "family", "dedupe_key"),
    Index("ix_tracked_entity_family_name_key", "family", "name_key"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure imperative mappings between domain entities and tables."""

    log.debug("Mapping tracked entities")
    mapper_registry.map_imperatively(TrackedEntity, tracked_entity_table)
    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
