"""Candidate lookup for one incoming record.

Strategies run from highest to lowest confidence and stop at the first tier that
produces hits; every hit of that tier is returned so the classifier can detect
ambiguity. Lookups are read-only.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from .contracts import ConfidenceTier, MatchCandidate, MatchStrategy
from .normalize import normalize_text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sitetrack.domain.model import TrackedEntity
    from sitetrack.domain.ports import EntityReader

    from .contracts import PreparedRecord
    from .families import FamilySchema

log = logging.getLogger(__name__)


def find_candidates(
    prepared: PreparedRecord,
    reader: EntityReader,
    *,
    schema: FamilySchema,
    tolerance: float,
) -> tuple[MatchCandidate, ...]:
    """Return match candidates for ``prepared``, highest confidence tier only."""

    family = schema.family

    if prepared.external_id:
        hits = reader.find_by_external_id(family, prepared.external_id)
        if hits:
            return _candidates(hits, MatchStrategy.EXTERNAL_ID, ConfidenceTier.EXACT)

    hits = reader.find_by_natural_key(family, prepared.dedupe_key)
    if hits:
        return _candidates(hits, MatchStrategy.COMPOSITE_KEY, ConfidenceTier.STRONG)

    value_field = schema.value_field
    value = None if value_field is None else prepared.values.get(value_field)
    if value_field is None or not isinstance(value, Decimal):
        return ()
    hits = [
        entity
        for entity in reader.find_by_fuzzy_value(family, prepared.name_key, value, tolerance)
        if _within_tolerance(entity.field_value(value_field), value, tolerance)
        and not _addresses_conflict(prepared, entity)
    ]
    if hits:
        log.debug(
            "Row %s: %d weak candidate(s) by name and value", prepared.row_index, len(hits)
        )
    return _candidates(hits, MatchStrategy.FUZZY_VALUE, ConfidenceTier.WEAK)


def _candidates(
    entities: Iterable[TrackedEntity],
    strategy: MatchStrategy,
    tier: ConfidenceTier,
) -> tuple[MatchCandidate, ...]:
    seen: set[object] = set()
    candidates: list[MatchCandidate] = []
    for entity in entities:
        if entity.id in seen:
            continue
        seen.add(entity.id)
        candidates.append(
            MatchCandidate(entity_id=entity.id, strategy=strategy, tier=tier, entity=entity)
        )
    return tuple(candidates)


def _within_tolerance(existing: object, value: Decimal, tolerance: float) -> bool:
    # stores may pre-filter loosely; the tolerance rule is enforced here
    if existing is None:
        return False
    existing_value = Decimal(str(existing))
    return abs(existing_value - value) <= abs(value) * Decimal(str(tolerance))


def _addresses_conflict(prepared: PreparedRecord, entity: TrackedEntity) -> bool:
    incoming = normalize_text(prepared.values.get("address"))
    existing = normalize_text(entity.address)
    return bool(incoming and existing and incoming != existing)
