"""Pydantic model for rows of a KYC sales-log spreadsheet."""

from __future__ import annotations

import re
from typing import Final

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

GENERIC_CONTACTS: Final[frozenset[str]] = frozenset(
    {"front desk", "?", "no", "unknown", "n/a", ""}
)
UNKNOWN: Final = "Unknown"

_LEADING_PARENS = re.compile(r"^\s*\(([^)]+)\)\s*")
_NEXT_NAME = re.compile(r"\s+(?=[A-Z])")


def _to_text(value: object) -> object:
    if value is None:
        return ""
    return str(value).strip()


class KycRow(BaseModel):
    """One logged interaction with a customer contact."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    customer: str = Field(default="", validation_alias=AliasChoices("Customer", "customer"))
    contact: str = Field(default="", validation_alias=AliasChoices("Contact", "contact"))
    role: str = Field(default="", validation_alias=AliasChoices("Role", "role"))
    logged_on: str = Field(default="", validation_alias=AliasChoices("Date", "date"))
    kind: str = Field(default="", validation_alias=AliasChoices("Type", "type"))
    notes: str = Field(default="", validation_alias=AliasChoices("Notes", "notes"))

    _normalize_text = field_validator("*", mode="before")(_to_text)

    @property
    def company_name(self) -> str:
        """Customer name with a leading parenthesised wrapper removed."""

        return " ".join(_LEADING_PARENS.sub(r"\1 ", self.customer).split())


def parse_contact(contact: str, role: str) -> tuple[str, str]:
    """Split a contact cell into ``(full_name, role)``.

    Accepts ``"Name"``, ``"Name: Role"`` and ``"Name: Role Other: Role"`` (first
    entry wins). Generic entries such as ``"Front Desk"`` fall back to the role
    column for both values.
    """

    contact = contact.strip()
    role = role.strip()
    if contact.casefold() in GENERIC_CONTACTS:
        fallback = role or UNKNOWN
        return fallback, fallback

    name, colon, remainder = contact.partition(":")
    if colon and name.strip():
        remainder = remainder.strip()
        first_role = _NEXT_NAME.split(remainder, maxsplit=1)[0].strip() if remainder else ""
        return name.strip(), first_role or role or UNKNOWN

    return contact, role or UNKNOWN
