"""Decide what to do with one prepared record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from .contracts import (
    ConfidenceTier,
    Conflict,
    EntityDraft,
    Insert,
    SkipLocked,
    SkipUnchanged,
    Update,
)
from .errors import AmbiguousMatchError
from .merge import diff

if TYPE_CHECKING:
    from collections.abc import Sequence, Set
    from uuid import UUID

    from .contracts import Decision, IdentityKey, MatchCandidate, PreparedRecord
    from .families import FamilySchema

DUPLICATE_IN_BATCH: Final = "duplicate within import batch"
POSSIBLE_DUPLICATE: Final = "possible duplicate, needs review"
AMBIGUOUS_MATCH: Final = "ambiguous match"


def classify(
    prepared: PreparedRecord,
    candidates: Sequence[MatchCandidate],
    seen: Set[IdentityKey],
    *,
    schema: FamilySchema,
) -> Decision:
    """Map match candidates onto a ``Decision``.

    ``seen`` holds the identity keys claimed by earlier decisions in the same run;
    every decision that resolved to a stored entity claims it, skips included, so
    a re-run of the same file flags the same rows. It is only read here.
    """

    if not candidates:
        if any(key in seen for key in prepared.identity_keys):
            return Conflict(reason=DUPLICATE_IN_BATCH)
        return Insert(draft=EntityDraft(family=schema.family, values=schema.draft_values(prepared)))

    try:
        target = _single_target(candidates)
    except AmbiguousMatchError:
        return Conflict(reason=AMBIGUOUS_MATCH, candidates=tuple(candidates))

    if target is None:
        return Conflict(reason=POSSIBLE_DUPLICATE, candidates=tuple(candidates))

    if entity_key(target.entity_id) in seen:
        return Conflict(reason=DUPLICATE_IN_BATCH, candidates=(target,))

    result = diff(prepared, target.entity, schema=schema)
    if result.changes:
        return Update(
            target_id=target.entity_id,
            diff=result.changes,
            strategy=target.strategy,
            reason=f"matched by {target.strategy}",
        )
    if target.tier is ConfidenceTier.STRONG and result.blocked:
        return SkipLocked(target_id=target.entity_id, fields=result.blocked)
    return SkipUnchanged(target_id=target.entity_id, strategy=target.strategy)


def claimed_keys(prepared: PreparedRecord, decision: Decision) -> tuple[IdentityKey, ...]:
    """Identity keys a decision claims for the rest of the run."""

    match decision:
        case Insert():
            return prepared.identity_keys
        case Update() | SkipUnchanged() | SkipLocked():
            return (*prepared.identity_keys, entity_key(decision.target_id))
        case Conflict():
            return ()


def entity_key(entity_id: UUID) -> IdentityKey:
    return ("id", str(entity_id))


def _single_target(candidates: Sequence[MatchCandidate]) -> MatchCandidate | None:
    """Return the one auto-applicable candidate, ``None`` for weak-only matches."""

    best = max(candidate.tier for candidate in candidates)
    if best is ConfidenceTier.WEAK:
        return None
    top = [candidate for candidate in candidates if candidate.tier is best]
    if len(top) > 1:
        raise AmbiguousMatchError(tuple(candidate.entity_id for candidate in top))
    return top[0]
