from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from sitetrack.domain.model import EntityFamily, InteractionType, JobStatus, Temperature
from sitetrack.domain.reconciliation import apply_user_edit, diff, schema_for
from tests.helpers.entities import make_entity, make_record

if TYPE_CHECKING:
    from sitetrack.domain.model import TrackedEntity

JOB = schema_for(EntityFamily.JOB)


def _diff(existing: TrackedEntity, **fields: object) -> tuple[dict[str, object], tuple[str, ...]]:
    result = diff(JOB.prepare(make_record(**fields)), existing, schema=JOB)
    return dict(result.changes), result.blocked


def test_changed_import_fields_are_written() -> None:
    existing = make_entity(
        "Oak St Tower", external_id="DGE-100", value=5_000_000, status=JobStatus.PLANNING
    )

    changes, blocked = _diff(
        existing, external_id="DGE-100", name="Oak St Tower", value="5250000", status="active"
    )

    assert changes == {"value": Decimal("5250000"), "status": JobStatus.ACTIVE}
    assert blocked == ()


def test_formatting_noise_is_not_a_change() -> None:
    existing = make_entity(
        "Oak St Tower",
        value=1_000_000,
        start_date=date(2024, 3, 15),
        contractor="Acme Builders",
    )

    changes, _ = _diff(
        existing,
        name="Oak St Tower",
        value="$1,000,000.00",
        start_date="03/15/2024",
        contractor="  Acme   Builders ",
    )

    assert changes == {}


def test_user_owned_field_with_a_value_is_never_overwritten() -> None:
    existing = make_entity("Oak St Tower", user_notes="called 3x", temperature=Temperature.HOT)

    changes, blocked = _diff(
        existing, name="Oak St Tower", user_notes="imported", temperature="cold"
    )

    assert changes == {}
    assert set(blocked) == {"user_notes", "temperature"}


def test_user_owned_field_at_default_may_be_filled() -> None:
    existing = make_entity("Oak St Tower")

    changes, _ = _diff(existing, name="Oak St Tower", user_notes="from sheet", is_favorite="yes")

    assert changes == {"user_notes": "from sheet", "is_favorite": True}


def test_blank_incoming_values_never_clear_fields() -> None:
    existing = make_entity("Oak St Tower", contractor="Acme", user_notes="called 3x")

    changes, blocked = _diff(existing, name="Oak St Tower", contractor="", user_notes="")

    assert (changes, blocked) == ({}, ())


@pytest.mark.parametrize("incoming", ["active", "planning", "pending"])
def test_status_never_leaves_completed(incoming: str) -> None:
    existing = make_entity("Oak St Tower", status=JobStatus.COMPLETED)

    changes, blocked = _diff(existing, name="Oak St Tower", status=incoming)

    assert "status" not in changes
    assert blocked == ("status",)


def test_status_may_become_completed() -> None:
    existing = make_entity("Oak St Tower", status=JobStatus.ACTIVE)

    changes, _ = _diff(existing, name="Oak St Tower", status="Completed")

    assert changes == {"status": JobStatus.COMPLETED}


def test_locked_import_field_is_blocked() -> None:
    existing = make_entity(
        "Oak St Tower", contractor="Hand Picked Co", locked_fields={"contractor"}
    )

    changes, blocked = _diff(existing, name="Oak St Tower", contractor="Sheet Co", owner="City")

    assert changes == {"owner": "City"}
    assert blocked == ("contractor",)


def test_external_id_is_fill_only() -> None:
    empty = make_entity("Oak St Tower")
    assigned = make_entity("Oak St Tower", external_id="DGE-1")

    assert _diff(empty, name="Oak St Tower", external_id="DGE-2")[0] == {"external_id": "DGE-2"}
    assert _diff(assigned, name="Oak St Tower", external_id="DGE-2") == ({}, ())


def test_last_interaction_never_moves_back() -> None:
    company = schema_for(EntityFamily.COMPANY)
    existing = make_entity(
        "Acme",
        family=EntityFamily.COMPANY,
        last_interaction_on=date(2024, 3, 4),
        last_interaction_type=InteractionType.EMAIL,
    )

    def run(on: str, kind: str) -> tuple[dict[str, object], tuple[str, ...]]:
        record = make_record(
            1,
            EntityFamily.COMPANY,
            name="Acme",
            last_interaction_on=on,
            last_interaction_type=kind,
        )
        result = diff(company.prepare(record), existing, schema=company)
        return dict(result.changes), result.blocked

    assert run("2024-01-10", "call") == ({}, ())
    assert run("2024-05-01", "call") == (
        {"last_interaction_on": date(2024, 5, 1), "last_interaction_type": InteractionType.CALL},
        (),
    )


def test_user_edit_locks_import_owned_fields_only() -> None:
    entity = make_entity("Oak St Tower", contractor="Acme")

    written = apply_user_edit(
        entity, {"contractor": "Hand Picked Co", "user_notes": "met on site"}, schema=JOB
    )

    assert written == {"contractor": "Hand Picked Co", "user_notes": "met on site"}
    assert entity.contractor == "Hand Picked Co"
    assert entity.locked_fields == {"contractor"}


def test_user_edit_resets_blank_user_fields_and_rejects_unknown_fields() -> None:
    entity = make_entity("Oak St Tower", user_notes="old", temperature=Temperature.HOT)

    apply_user_edit(entity, {"user_notes": "", "temperature": ""}, schema=JOB)

    assert entity.user_notes == ""
    assert entity.temperature is None
    with pytest.raises(ValueError, match="no field 'colour'"):
        apply_user_edit(entity, {"colour": "red"}, schema=JOB)
    with pytest.raises(ValueError, match="name can not be blank"):
        apply_user_edit(entity, {"name": " "}, schema=JOB)
