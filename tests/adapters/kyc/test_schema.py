from __future__ import annotations

import pytest

from sitetrack.adapters.kyc import KycRow, parse_contact


@pytest.mark.parametrize(
    ("contact", "role", "expected"),
    [
        ("Jane Doe", "Estimator", ("Jane Doe", "Estimator")),
        ("Jane Doe", "", ("Jane Doe", "Unknown")),
        ("Gloria: Purchasing", "", ("Gloria", "Purchasing")),
        ("Gloria: Purchasing Dannelle Graham: Owner", "Sales", ("Gloria", "Purchasing")),
        ("Gloria:", "Sales", ("Gloria", "Sales")),
        ("Front Desk", "Receptionist", ("Receptionist", "Receptionist")),
        ("?", "", ("Unknown", "Unknown")),
        ("", "", ("Unknown", "Unknown")),
    ],
)
def test_parse_contact(contact: str, role: str, expected: tuple[str, str]) -> None:
    assert parse_contact(contact, role) == expected


def test_row_accepts_either_header_case() -> None:
    upper = KycRow.model_validate({"Customer": " Acme ", "Contact": "Jane", "Role": None})
    lower = KycRow.model_validate({"customer": "Acme", "contact": "Jane"})

    assert upper == lower
    assert upper.role == ""


def test_company_name_drops_a_leading_parenthesised_wrapper() -> None:
    row = KycRow.model_validate({"Customer": "(Anvil Builders) Inc."})

    assert row.company_name == "Anvil Builders Inc."
