"""Field-level merge policy.

Given a prepared record and the entity it matched, work out which fields an
import may write. Protection rules:
- user-owned fields are written only while the entity still holds their default
- import-owned fields the user edited by hand (``locked_fields``) are never written
- status never leaves ``completed``
- the last interaction never moves back to an older date
- the external id is fill-only
- blank incoming cells never produce a change
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING

from sitetrack.domain.model import InteractionType, JobStatus, Temperature, utcnow

from .families import EXTERNAL_ID_FIELD, FieldKind, FieldOwner
from .normalize import clean_text, parse_date, parse_decimal

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sitetrack.domain.model import TrackedEntity

    from .contracts import PreparedRecord
    from .families import FamilySchema


_LAST_INTERACTION_FIELDS = frozenset({"last_interaction_on", "last_interaction_type"})


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Outcome of one merge: fields to write and fields held back."""

    changes: Mapping[str, object] = field(default_factory=lambda: MappingProxyType({}))
    blocked: tuple[str, ...] = ()

    @property
    def unchanged(self) -> bool:
        return not self.changes


def diff(prepared: PreparedRecord, existing: TrackedEntity, *, schema: FamilySchema) -> MergeResult:
    """Compute the changes ``prepared`` may apply to ``existing``."""

    changes: dict[str, object] = {}
    blocked: list[str] = []
    older_interaction = _is_older_interaction(prepared.values, existing)

    for name, incoming in prepared.values.items():
        spec = schema.spec(name)
        current = existing.field_value(name)
        if values_equal(spec.kind, incoming, current):
            continue

        if name == EXTERNAL_ID_FIELD:
            if _is_default(current, None):
                changes[name] = incoming
            continue

        if schema.is_user_owned(name):
            if _is_default(current, spec.default):
                changes[name] = incoming
            else:
                blocked.append(name)
            continue

        if older_interaction and name in _LAST_INTERACTION_FIELDS:
            # an older log is not a change
            continue

        if existing.is_locked(name) or _leaves_completed(name, current, incoming):
            blocked.append(name)
            continue

        changes[name] = incoming

    return MergeResult(changes=MappingProxyType(changes), blocked=tuple(blocked))


def values_equal(kind: FieldKind, incoming: object, current: object) -> bool:
    """Compare values after normalization so formatting noise is not a change."""

    if current is None:
        return incoming is None
    match kind:
        case FieldKind.DECIMAL:
            return _as_decimal(incoming) == _as_decimal(current)
        case FieldKind.DATE:
            return _as_date(incoming) == _as_date(current)
        case FieldKind.STATUS:
            return _enum_value(incoming) == _enum_value(current)
        case FieldKind.TEMPERATURE | FieldKind.INTERACTION:
            return _enum_value(incoming) == _enum_value(current)
        case FieldKind.FLAG:
            return bool(incoming) == bool(current)
        case FieldKind.TEXT | FieldKind.CATEGORY:
            return clean_text(incoming) == clean_text(current)


def _is_default(current: object, default: object) -> bool:
    if current is None or current == "":
        return True
    return current == default


def _leaves_completed(name: str, current: object, incoming: object) -> bool:
    if name != "status" or current is None:
        return False
    return _enum_value(current) == JobStatus.COMPLETED.value and (
        _enum_value(incoming) != JobStatus.COMPLETED.value
    )


def _is_older_interaction(incoming: Mapping[str, object], existing: TrackedEntity) -> bool:
    incoming_on = _as_date(incoming.get("last_interaction_on"))
    current_on = _as_date(existing.last_interaction_on)
    return incoming_on is not None and current_on is not None and incoming_on < current_on


def _enum_value(value: object) -> object:
    if isinstance(value, JobStatus | Temperature | InteractionType):
        return value.value
    return value


def _as_decimal(value: object) -> Decimal | None:
    try:
        return parse_decimal(value)
    except ValueError:
        return None


def _as_date(value: object) -> date | None:
    try:
        return parse_date(value)
    except ValueError:
        return None


def apply_user_edit(
    entity: TrackedEntity,
    changes: Mapping[str, object],
    *,
    schema: FamilySchema,
) -> dict[str, object]:
    """Apply a manual edit and lock every import-owned field it touched.

    Blank values reset user-owned fields to their default. Returns the coerced
    values that were written.
    """

    written: dict[str, object] = {}
    for name, raw in changes.items():
        try:
            spec = schema.spec(name)
        except KeyError as exc:
            raise ValueError(f"{schema.family} has no field {name!r}") from exc
        value = schema.coerce(name, raw)
        if value is None:
            if name == "name":
                raise ValueError("name can not be blank")
            value = spec.default if spec.owner is FieldOwner.USER else _blank_for(name)
        setattr(entity, name, value)
        written[name] = value

    entity.lock(name for name in written if not schema.is_user_owned(name))
    entity.updated_at = utcnow()
    return written


def _blank_for(name: str) -> object:
    return "" if name == "address" else None
