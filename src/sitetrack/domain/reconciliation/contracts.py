"""Shared reconciliation contract components.

This module intentionally holds only:
- the incoming-record and match-candidate value objects
- the ``Decision`` tagged union produced by the classifier
- identity-key aliases used for intra-run duplicate suppression
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from uuid import UUID

    from sitetrack.domain.model import EntityFamily, TrackedEntity


type FieldDiff = Mapping[str, object]
type IdentityKey = tuple[str, str]


@dataclass(frozen=True, slots=True, kw_only=True)
class IncomingRecord:
    """One normalized row from an external source."""

    row_index: int
    family: EntityFamily
    fields: Mapping[str, object] = field(default_factory=dict[str, object])

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def get(self, name: str) -> object:
        return self.fields.get(name)


@dataclass(frozen=True, slots=True, kw_only=True)
class PreparedRecord:
    """An incoming record with typed values and derived lookup keys.

    ``values`` only holds fields that carried a non-blank value in the source.
    """

    record: IncomingRecord
    values: Mapping[str, object]
    external_id: str | None
    dedupe_key: str
    name_key: str

    @property
    def row_index(self) -> int:
        return self.record.row_index

    @property
    def identity_keys(self) -> tuple[IdentityKey, ...]:
        keys: list[IdentityKey] = [("natural_key", self.dedupe_key)]
        if self.external_id:
            keys.insert(0, ("external_id", self.external_id))
        return tuple(keys)


class MatchStrategy(StrEnum):
    """How the matcher found a candidate."""

    EXTERNAL_ID = "external_id"
    COMPOSITE_KEY = "composite_key"
    FUZZY_VALUE = "fuzzy_value"


class ConfidenceTier(IntEnum):
    """Ordered confidence; higher values win."""

    WEAK = 1
    STRONG = 2
    EXACT = 3


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchCandidate:
    """Result of one matching strategy against one incoming record."""

    entity_id: UUID
    strategy: MatchStrategy
    tier: ConfidenceTier
    entity: TrackedEntity = field(compare=False, repr=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityDraft:
    """Values for a new entity, as produced by an ``Insert`` decision."""

    family: EntityFamily
    values: Mapping[str, object]


class DecisionKind(StrEnum):
    INSERT = "insert"
    UPDATE = "update"
    SKIP_UNCHANGED = "unchanged"
    SKIP_LOCKED = "skipped_locked"
    CONFLICT = "conflict"


@dataclass(frozen=True, slots=True, kw_only=True)
class Insert:
    """Record has no existing match and should be created."""

    draft: EntityDraft
    reason: str = "no existing match"
    kind: Literal[DecisionKind.INSERT] = DecisionKind.INSERT


@dataclass(frozen=True, slots=True, kw_only=True)
class Update:
    """Record matched one entity and carries changes allowed by the merge policy."""

    target_id: UUID
    diff: FieldDiff
    strategy: MatchStrategy
    reason: str
    kind: Literal[DecisionKind.UPDATE] = DecisionKind.UPDATE

    def __post_init__(self) -> None:
        if not self.diff:
            raise ValueError("Update decision requires a non-empty diff")


@dataclass(frozen=True, slots=True, kw_only=True)
class SkipUnchanged:
    """Record matched one entity and nothing would change."""

    target_id: UUID
    strategy: MatchStrategy
    reason: str = "unchanged"
    kind: Literal[DecisionKind.SKIP_UNCHANGED] = DecisionKind.SKIP_UNCHANGED


@dataclass(frozen=True, slots=True, kw_only=True)
class SkipLocked:
    """Record only differs in fields the user owns."""

    target_id: UUID
    fields: tuple[str, ...]
    reason: str = "would overwrite user data"
    kind: Literal[DecisionKind.SKIP_LOCKED] = DecisionKind.SKIP_LOCKED


@dataclass(frozen=True, slots=True, kw_only=True)
class Conflict:
    """Automatic resolution would be unsafe; needs human review."""

    reason: str
    candidates: tuple[MatchCandidate, ...] = ()
    kind: Literal[DecisionKind.CONFLICT] = DecisionKind.CONFLICT


type Decision = Insert | Update | SkipUnchanged | SkipLocked | Conflict
