"""Tracked entities: job sites, offices, companies, contacts and interactions.

All five families share one shape so the reconciliation engine can treat them
uniformly; each family only populates the attributes its schema declares
(see ``sitetrack.domain.reconciliation.families``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sitetrack.domain.model.entity import Entity

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import date
    from decimal import Decimal

    from sitetrack.domain.model.enums import (
        EntityFamily,
        InteractionType,
        JobStatus,
        Temperature,
    )


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(eq=False, kw_only=True)
class TrackedEntity(Entity):
    """A persisted record of one entity family."""

    family: EntityFamily
    name: str

    # natural-key attributes
    address: str = ""
    company_name: str | None = None

    # import-owned attributes
    external_id: str | None = None
    value: Decimal | None = None
    status: JobStatus | None = None
    category: str | None = None
    description: str | None = None
    contractor: str | None = None
    owner: str | None = None
    architect: str | None = None
    phone: str | None = None
    email: str | None = None
    county: str | None = None
    role: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    # sales-log interactions, and the latest one on companies and contacts
    interaction_type: InteractionType | None = None
    occurred_on: date | None = None
    last_interaction_on: date | None = None
    last_interaction_type: InteractionType | None = None

    # user-owned attributes
    is_viewed: bool = False
    user_notes: str = ""
    is_favorite: bool = False
    temperature: Temperature | None = None
    is_cold: bool = False

    # import-owned attributes the user edited by hand
    locked_fields: set[str] = field(default_factory=set[str])

    # lookup keys maintained by the store
    dedupe_key: str | None = None
    name_key: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_imported_at: datetime | None = None

    def field_value(self, name: str) -> object:
        try:
            return getattr(self, name)
        except AttributeError as exc:
            raise KeyError(f"Unknown tracked entity field: {name}") from exc

    def is_locked(self, name: str) -> bool:
        return name in self.locked_fields

    def lock(self, names: Iterable[str]) -> None:
        # reassign so ORM-mapped JSON columns register the change
        self.locked_fields = self.locked_fields | set(names)

    def unlock(self, names: Iterable[str] | None = None) -> set[str]:
        """Release locks on ``names`` (all when ``None``); return the remaining set."""

        self.locked_fields = set() if names is None else self.locked_fields - set(names)
        return set(self.locked_fields)

    def apply_changes(self, changes: Mapping[str, object], *, at: datetime | None = None) -> None:
        """Set imported values and stamp the import time."""

        for name, value in changes.items():
            self.field_value(name)
            setattr(self, name, value)
        stamp = at or utcnow()
        self.last_imported_at = stamp
        self.updated_at = stamp
