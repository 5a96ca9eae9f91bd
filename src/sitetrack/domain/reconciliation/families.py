"""Per-family field schemas.

A ``FamilySchema`` tells the reconciliation stages, for one entity family:
- which fields form the composite natural key (and how each is normalized)
- which fields are import-owned and which are user-owned (with their defaults)
- how raw cells are coerced into typed values
- which defaults apply when a record is inserted
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from sitetrack.domain.model import (
    CompanyType,
    EntityFamily,
    InteractionType,
    JobStatus,
    JobType,
)

from .contracts import PreparedRecord
from .errors import FatalConfigurationError, RowError
from .normalize import (
    clean_text,
    is_blank,
    normalize_company_name,
    normalize_company_type,
    normalize_project_type,
    normalize_status,
    normalize_text,
    office_category,
    parse_date,
    parse_decimal,
    parse_flag,
    parse_interaction_type,
    parse_temperature,
)

if TYPE_CHECKING:
    from sitetrack.domain.model import TrackedEntity

    from .contracts import IncomingRecord

type KeyNormalizer = Callable[[object], str]
type Coercer = Callable[[object], object]


class FieldKind(StrEnum):
    TEXT = "text"
    DECIMAL = "decimal"
    DATE = "date"
    STATUS = "status"
    CATEGORY = "category"
    FLAG = "flag"
    TEMPERATURE = "temperature"
    INTERACTION = "interaction"


class FieldOwner(StrEnum):
    IMPORT = "import"
    USER = "user"


@dataclass(frozen=True, slots=True)
class FieldSpec:
    kind: FieldKind
    owner: FieldOwner = FieldOwner.IMPORT
    default: object = None


EXTERNAL_ID_FIELD: Final = "external_id"

_TEXT = FieldSpec(FieldKind.TEXT)
_USER_FIELDS: Final[Mapping[str, FieldSpec]] = {
    "is_viewed": FieldSpec(FieldKind.FLAG, FieldOwner.USER, default=False),
    "user_notes": FieldSpec(FieldKind.TEXT, FieldOwner.USER, default=""),
    "is_favorite": FieldSpec(FieldKind.FLAG, FieldOwner.USER, default=False),
    "temperature": FieldSpec(FieldKind.TEMPERATURE, FieldOwner.USER, default=None),
    "is_cold": FieldSpec(FieldKind.FLAG, FieldOwner.USER, default=False),
}


@dataclass(frozen=True, slots=True, kw_only=True)
class FamilySchema:
    """Field layout and key strategy for one entity family."""

    family: EntityFamily
    key_fields: tuple[str, ...]
    fields: Mapping[str, FieldSpec]
    value_field: str | None = None
    key_normalizers: Mapping[str, KeyNormalizer] = field(
        default_factory=dict[str, "KeyNormalizer"]
    )
    category_parser: Coercer = normalize_project_type
    insert_defaults: Mapping[str, object] = field(default_factory=dict[str, object])

    def __post_init__(self) -> None:
        missing = [name for name in self.key_fields if name not in self.fields]
        if missing:
            raise FatalConfigurationError(
                f"{self.family} schema key fields are not declared: {', '.join(missing)}"
            )

    # -- field ownership ---------------------------------------------------

    def spec(self, name: str) -> FieldSpec:
        try:
            return self.fields[name]
        except KeyError as exc:
            raise KeyError(f"{self.family} has no field {name!r}") from exc

    def is_user_owned(self, name: str) -> bool:
        return self.spec(name).owner is FieldOwner.USER

    @property
    def user_fields(self) -> tuple[str, ...]:
        return tuple(name for name, spec in self.fields.items() if spec.owner is FieldOwner.USER)

    # -- coercion ----------------------------------------------------------

    def coerce(self, name: str, raw: object) -> object:
        """Coerce one raw cell into the typed value stored on entities."""

        kind = self.spec(name).kind
        match kind:
            case FieldKind.TEXT:
                return clean_text(raw)
            case FieldKind.DECIMAL:
                return parse_decimal(raw)
            case FieldKind.DATE:
                return parse_date(raw)
            case FieldKind.STATUS:
                return normalize_status(raw)
            case FieldKind.CATEGORY:
                return self.category_parser(raw)
            case FieldKind.FLAG:
                return parse_flag(raw)
            case FieldKind.TEMPERATURE:
                return parse_temperature(raw)
            case FieldKind.INTERACTION:
                return parse_interaction_type(raw)

    def prepare(self, record: IncomingRecord) -> PreparedRecord:
        """Validate ``record`` and derive typed values plus lookup keys.

        Unknown source columns are ignored; blank cells are dropped so they never
        produce a diff.
        """

        if record.family != self.family:
            raise RowError(
                record.row_index,
                f"record belongs to family {record.family!r}, run targets {self.family!r}",
            )
        values: dict[str, object] = {}
        for name, raw in record.fields.items():
            if name not in self.fields or is_blank(raw):
                continue
            try:
                value = self.coerce(name, raw)
            except ValueError as exc:
                raise RowError(record.row_index, f"{name}: {exc}") from exc
            if value is not None:
                values[name] = value

        if "name" not in values:
            raise RowError(record.row_index, "missing required field 'name'")

        external_id = values.get(EXTERNAL_ID_FIELD)
        return PreparedRecord(
            record=record,
            values=MappingProxyType(values),
            external_id=str(external_id) if external_id else None,
            dedupe_key=self.dedupe_key(values),
            name_key=self.normalize_key_part("name", values["name"]),
        )

    # -- keys --------------------------------------------------------------

    def normalize_key_part(self, name: str, raw: object) -> str:
        normalizer = self.key_normalizers.get(name, normalize_text)
        return normalizer(raw)

    def natural_key(self, values: Mapping[str, object]) -> tuple[str, ...]:
        return tuple(self.normalize_key_part(name, values.get(name)) for name in self.key_fields)

    def dedupe_key(self, values: Mapping[str, object]) -> str:
        return "|".join(self.natural_key(values))

    def entity_values(self, entity: TrackedEntity) -> dict[str, object]:
        return {name: entity.field_value(name) for name in self.fields}

    def keys_for_entity(self, entity: TrackedEntity) -> tuple[str, str]:
        """Return ``(dedupe_key, name_key)`` for a stored entity."""

        values = self.entity_values(entity)
        return self.dedupe_key(values), self.normalize_key_part("name", entity.name)

    def draft_values(self, prepared: PreparedRecord) -> dict[str, object]:
        values: dict[str, object] = dict(self.insert_defaults)
        values.update(prepared.values)
        return values


_JOB_FIELDS: Final[Mapping[str, FieldSpec]] = {
    EXTERNAL_ID_FIELD: _TEXT,
    "name": _TEXT,
    "address": _TEXT,
    "value": FieldSpec(FieldKind.DECIMAL),
    "status": FieldSpec(FieldKind.STATUS),
    "category": FieldSpec(FieldKind.CATEGORY),
    "description": _TEXT,
    "contractor": _TEXT,
    "owner": _TEXT,
    "architect": _TEXT,
    "phone": _TEXT,
    "email": _TEXT,
    "county": _TEXT,
    "start_date": FieldSpec(FieldKind.DATE),
    "end_date": FieldSpec(FieldKind.DATE),
    **_USER_FIELDS,
}

_OFFICE_FIELDS: Final[Mapping[str, FieldSpec]] = {
    EXTERNAL_ID_FIELD: _TEXT,
    "name": _TEXT,
    "address": _TEXT,
    "county": _TEXT,
    "phone": _TEXT,
    "status": FieldSpec(FieldKind.STATUS),
    "category": FieldSpec(FieldKind.CATEGORY),
    **_USER_FIELDS,
}

_LAST_INTERACTION_FIELDS: Final[Mapping[str, FieldSpec]] = {
    "last_interaction_on": FieldSpec(FieldKind.DATE),
    "last_interaction_type": FieldSpec(FieldKind.INTERACTION),
}

_COMPANY_FIELDS: Final[Mapping[str, FieldSpec]] = {
    EXTERNAL_ID_FIELD: _TEXT,
    "name": _TEXT,
    "address": _TEXT,
    "phone": _TEXT,
    "email": _TEXT,
    "county": _TEXT,
    "category": FieldSpec(FieldKind.CATEGORY),
    **_LAST_INTERACTION_FIELDS,
    "user_notes": _USER_FIELDS["user_notes"],
    "is_favorite": _USER_FIELDS["is_favorite"],
}

_CONTACT_FIELDS: Final[Mapping[str, FieldSpec]] = {
    EXTERNAL_ID_FIELD: _TEXT,
    "name": _TEXT,
    "company_name": _TEXT,
    "role": _TEXT,
    "phone": _TEXT,
    "email": _TEXT,
    "address": _TEXT,
    **_LAST_INTERACTION_FIELDS,
    "user_notes": _USER_FIELDS["user_notes"],
    "is_favorite": _USER_FIELDS["is_favorite"],
}

_INTERACTION_FIELDS: Final[Mapping[str, FieldSpec]] = {
    "name": _TEXT,
    "company_name": _TEXT,
    "interaction_type": FieldSpec(FieldKind.INTERACTION),
    "occurred_on": FieldSpec(FieldKind.DATE),
    "description": _TEXT,
    "user_notes": _USER_FIELDS["user_notes"],
}

_INTERACTION_KEY: Final = (
    "name",
    "company_name",
    "occurred_on",
    "interaction_type",
    "description",
)


def _interaction_key(raw: object) -> str:
    # untyped log rows are stored as notes
    return (parse_interaction_type(raw) or InteractionType.NOTE).value


FAMILY_SCHEMAS: Final[Mapping[EntityFamily, FamilySchema]] = MappingProxyType(
    {
        EntityFamily.JOB: FamilySchema(
            family=EntityFamily.JOB,
            key_fields=("name", "address"),
            fields=_JOB_FIELDS,
            value_field="value",
            insert_defaults={
                "address": "",
                "status": JobStatus.PLANNING,
                "category": JobType.COMMERCIAL.value,
            },
        ),
        EntityFamily.OFFICE: FamilySchema(
            family=EntityFamily.OFFICE,
            key_fields=("name", "address"),
            fields=_OFFICE_FIELDS,
            category_parser=office_category,
            insert_defaults={
                "address": "",
                "status": JobStatus.ACTIVE,
                "category": JobType.OFFICE.value,
            },
        ),
        EntityFamily.COMPANY: FamilySchema(
            family=EntityFamily.COMPANY,
            key_fields=("name",),
            fields=_COMPANY_FIELDS,
            key_normalizers={"name": normalize_company_name},
            category_parser=normalize_company_type,
            insert_defaults={"address": "", "category": CompanyType.CONTRACTOR.value},
        ),
        EntityFamily.CONTACT: FamilySchema(
            family=EntityFamily.CONTACT,
            key_fields=("name", "company_name"),
            fields=_CONTACT_FIELDS,
            key_normalizers={"company_name": normalize_company_name},
            insert_defaults={"address": "", "role": "Unknown"},
        ),
        EntityFamily.INTERACTION: FamilySchema(
            family=EntityFamily.INTERACTION,
            key_fields=_INTERACTION_KEY,
            fields=_INTERACTION_FIELDS,
            key_normalizers={
                "company_name": normalize_company_name,
                "interaction_type": _interaction_key,
            },
            insert_defaults={"address": "", "interaction_type": InteractionType.NOTE},
        ),
    }
)


def schema_for(family: EntityFamily | str) -> FamilySchema:
    """Return the schema for ``family`` or fail the whole run."""

    try:
        return FAMILY_SCHEMAS[EntityFamily(family)]
    except (KeyError, ValueError) as exc:
        raise FatalConfigurationError(f"Unknown entity family: {family!r}") from exc
