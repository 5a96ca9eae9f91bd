from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from sitetrack.domain.model import EntityFamily, InteractionType, JobStatus
from sitetrack.domain.reconciliation import FatalConfigurationError, RowError, schema_for
from tests.helpers.entities import make_entity, make_record


def test_prepare_types_values_and_builds_keys() -> None:
    schema = schema_for(EntityFamily.JOB)
    prepared = schema.prepare(
        make_record(
            3,
            name="  Oak St  Tower ",
            address="1 Main St",
            value="$5,000,000",
            status="Under construction",
            start_date="03/15/2024",
            contractor="",
            engineer="ignored column",
        )
    )

    assert prepared.row_index == 3
    assert dict(prepared.values) == {
        "name": "Oak St Tower",
        "address": "1 Main St",
        "value": Decimal("5000000"),
        "status": JobStatus.ACTIVE,
        "start_date": date(2024, 3, 15),
    }
    assert prepared.dedupe_key == "oak st tower|1 main st"
    assert prepared.name_key == "oak st tower"
    assert prepared.external_id is None
    assert prepared.identity_keys == (("natural_key", "oak st tower|1 main st"),)


def test_external_id_is_the_first_identity_key() -> None:
    prepared = schema_for("job").prepare(make_record(external_id="DGE-100", name="Oak St Tower"))

    assert prepared.external_id == "DGE-100"
    assert prepared.identity_keys[0] == ("external_id", "DGE-100")


def test_missing_name_is_a_row_error() -> None:
    with pytest.raises(RowError, match="Row 7: missing required field 'name'") as exc_info:
        schema_for("job").prepare(make_record(7, name="   ", address="1 Main St"))

    assert exc_info.value.row_index == 7


def test_malformed_cell_is_a_row_error_naming_the_field() -> None:
    with pytest.raises(RowError, match="value: Not a number"):
        schema_for("job").prepare(make_record(2, name="Depot", value="lots"))


def test_record_from_another_family_is_rejected() -> None:
    with pytest.raises(RowError, match="family"):
        schema_for("office").prepare(make_record(1, EntityFamily.JOB, name="Depot"))


def test_unknown_family_is_fatal() -> None:
    with pytest.raises(FatalConfigurationError, match="Unknown entity family"):
        schema_for("equipment")


def test_insert_defaults_fill_missing_values() -> None:
    schema = schema_for("job")
    values = schema.draft_values(schema.prepare(make_record(name="Depot")))

    assert values == {
        "name": "Depot",
        "address": "",
        "status": JobStatus.PLANNING,
        "category": "commercial",
    }


def test_company_keys_use_company_name_normalization() -> None:
    entity = make_entity("(Anvil Builders, Inc.)", family=EntityFamily.COMPANY)

    assert (entity.dedupe_key, entity.name_key) == ("ANVIL BUILDERS", "ANVIL BUILDERS")


def test_contact_key_is_name_and_company() -> None:
    prepared = schema_for("contact").prepare(
        make_record(
            1, EntityFamily.CONTACT, name="Jane  Doe", company_name="Anvil Builders Inc"
        )
    )

    assert prepared.dedupe_key == "jane doe|ANVIL BUILDERS"


def test_office_category_is_always_office() -> None:
    prepared = schema_for("office").prepare(
        make_record(1, EntityFamily.OFFICE, name="HQ", category="Retail")
    )

    assert prepared.values["category"] == "office"


def test_user_fields_are_declared_per_family() -> None:
    assert schema_for("job").user_fields == (
        "is_viewed",
        "user_notes",
        "is_favorite",
        "temperature",
        "is_cold",
    )
    assert schema_for("company").user_fields == ("user_notes", "is_favorite")


def test_interaction_key_treats_a_missing_type_as_a_note() -> None:
    schema = schema_for("interaction")
    fields = {"name": "Jane Doe", "company_name": "Acme Inc", "occurred_on": "2024-03-04"}

    untyped = schema.prepare(make_record(1, EntityFamily.INTERACTION, **fields))
    noted = schema.prepare(
        make_record(2, EntityFamily.INTERACTION, interaction_type="note", **fields)
    )

    assert untyped.dedupe_key == noted.dedupe_key
    assert schema.draft_values(untyped)["interaction_type"] is InteractionType.NOTE
