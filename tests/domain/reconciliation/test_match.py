from __future__ import annotations

from typing import TYPE_CHECKING

from sitetrack.domain.model import EntityFamily
from sitetrack.domain.reconciliation import (
    ConfidenceTier,
    MatchCandidate,
    MatchStrategy,
    find_candidates,
    schema_for,
)
from tests.helpers.entities import FakeEntityStore, make_entity, make_record

if TYPE_CHECKING:
    from collections.abc import Sequence
    from decimal import Decimal

    from sitetrack.domain.model import TrackedEntity

JOB = schema_for(EntityFamily.JOB)


def _find(store: FakeEntityStore, **fields: object) -> tuple[MatchCandidate, ...]:
    prepared = JOB.prepare(make_record(**fields))
    return find_candidates(prepared, store, schema=JOB, tolerance=0.02)


def test_external_id_hit_short_circuits_lower_tiers() -> None:
    existing = make_entity("Oak St Tower", external_id="DGE-100", address="1 Main St")
    store = FakeEntityStore([existing])

    candidates = _find(store, external_id="DGE-100", name="Renamed Tower")

    assert [(c.entity_id, c.strategy, c.tier) for c in candidates] == [
        (existing.id, MatchStrategy.EXTERNAL_ID, ConfidenceTier.EXACT)
    ]
    assert store.reads == ["external_id"]


def test_unknown_external_id_falls_back_to_composite_key() -> None:
    existing = make_entity("Oak St Tower", address="1 Main St")
    store = FakeEntityStore([existing])

    candidates = _find(store, external_id="DGE-999", name="OAK ST  TOWER", address="1 main st")

    assert len(candidates) == 1
    candidate = candidates[0]
    assert candidate.tier is ConfidenceTier.STRONG
    assert candidate.strategy is MatchStrategy.COMPOSITE_KEY
    assert store.reads == ["external_id", "natural_key"]


def test_every_same_tier_hit_is_returned() -> None:
    first = make_entity("Main Depot", address="1 Main St")
    second = make_entity("Main Depot", address="1 Main St")
    store = FakeEntityStore([first, second])

    candidates = _find(store, name="Main Depot", address="1 Main St")

    assert {c.entity_id for c in candidates} == {first.id, second.id}


def test_same_name_and_close_value_is_a_weak_candidate() -> None:
    existing = make_entity("Oak St Tower", value=5_000_000)
    store = FakeEntityStore([existing])

    candidates = _find(store, name="oak st tower", address="1 Main St", value="5,050,000")

    assert [c.tier for c in candidates] == [ConfidenceTier.WEAK]
    assert store.reads == ["natural_key", "fuzzy_value"]


def test_value_outside_tolerance_is_not_a_candidate() -> None:
    store = FakeEntityStore([make_entity("Oak St Tower", value=5_000_000)])

    assert _find(store, name="Oak St Tower", address="1 Main St", value="5,250,000") == ()


def test_loose_store_prefilter_is_tightened_to_the_tolerance() -> None:
    class LooseStore(FakeEntityStore):
        def find_by_fuzzy_value(
            self, family: EntityFamily, name_key: str, value: Decimal, tolerance: float
        ) -> Sequence[TrackedEntity]:
            self.reads.append("fuzzy_value")
            return [e for e in self.entities.values() if e.name_key == name_key]

    close = make_entity("Oak St Tower", address="1 Main St", value=5_000_000)
    far = make_entity("Oak St Tower", address="1 Main St", value=9_000_000)
    unvalued = make_entity("Oak St Tower", address="1 Main St")
    store = LooseStore([close, far, unvalued])

    candidates = _find(store, name="Oak St Tower", value="5,050,000")

    assert [c.entity_id for c in candidates] == [close.id]


def test_conflicting_address_rules_out_a_weak_candidate() -> None:
    store = FakeEntityStore([make_entity("Oak St Tower", address="9 Elm St", value=5_000_000)])

    assert _find(store, name="Oak St Tower", address="1 Main St", value="5,000,000") == ()


def test_families_without_value_field_skip_fuzzy_lookup() -> None:
    office = schema_for(EntityFamily.OFFICE)
    store = FakeEntityStore([make_entity("HQ", family=EntityFamily.OFFICE, address="1 Main St")])
    prepared = office.prepare(make_record(1, EntityFamily.OFFICE, name="HQ", address="2 Main St"))

    assert find_candidates(prepared, store, schema=office, tolerance=0.02) == ()
    assert store.reads == ["natural_key"]


def test_other_families_are_never_matched() -> None:
    store = FakeEntityStore([make_entity("HQ", family=EntityFamily.OFFICE, address="1 Main St")])

    assert _find(store, name="HQ", address="1 Main St") == ()
