"""Pydantic model for rows of an office-address guide."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_OFFICE_NAME = "Office"


def _to_text(value: object) -> object:
    if value is None:
        return None
    text = " ".join(str(value).split())
    return text or None


class OfficeRow(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    name: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = Field(default=None, alias="zip")
    county: str | None = None
    phone: str | None = None

    _normalize_text = field_validator("*", mode="before")(_to_text)

    @property
    def display_name(self) -> str:
        return self.name or DEFAULT_OFFICE_NAME

    @property
    def full_address(self) -> str | None:
        """``"41152 Stealth St, Livermore, CA 94551"`` style address."""

        region = " ".join(part for part in (self.state, self.zip_code) if part)
        parts = [self.address, self.city, region]
        joined = ", ".join(part for part in parts if part)
        return joined or None
