"""Pydantic model for rows of a Dodge Data project export."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _to_text(value: object) -> object:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class DodgeRow(BaseModel):
    """One project row; unknown columns are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    project_name: str | None = Field(default=None, alias="Project Name")
    description: str | None = Field(default=None, alias="Project Description")
    address: str | None = Field(default=None, alias="Address")
    city: str | None = Field(default=None, alias="City")
    state: str | None = Field(default=None, alias="State")
    zip_code: str | None = Field(default=None, alias="ZIP")
    project_value: str | None = Field(default=None, alias="Project Value")
    project_type: str | None = Field(default=None, alias="Project Type")
    start_date: str | None = Field(default=None, alias="Start Date")
    end_date: str | None = Field(default=None, alias="End Date")
    owner: str | None = Field(default=None, alias="Owner")
    contractor: str | None = Field(default=None, alias="Contractor")
    architect: str | None = Field(default=None, alias="Architect")
    phone: str | None = Field(default=None, alias="Phone")
    email: str | None = Field(default=None, alias="Email")
    status: str | None = Field(default=None, alias="Status")
    project_id: str | None = Field(default=None, alias="Project ID")
    county: str | None = Field(default=None, alias="County")

    _normalize_text = field_validator("*", mode="before")(_to_text)

    @property
    def full_address(self) -> str | None:
        parts = [self.address, self.city, self.state, self.zip_code]
        joined = ", ".join(part for part in parts if part)
        return joined or None
