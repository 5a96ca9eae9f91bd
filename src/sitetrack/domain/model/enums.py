"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityFamily(StrEnum):
    """Kinds of tracked entities an import run can target."""

    JOB = "job"
    OFFICE = "office"
    COMPANY = "company"
    CONTACT = "contact"
    INTERACTION = "interaction"


class JobStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PLANNING = "planning"
    PENDING = "pending"


class JobType(StrEnum):
    COMMERCIAL = "commercial"
    RESIDENTIAL = "residential"
    INDUSTRIAL = "industrial"
    EQUIPMENT = "equipment"
    OTHER = "other"
    OFFICE = "office"


class Temperature(StrEnum):
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"
    GREEN = "green"


class CompanyType(StrEnum):
    CONTRACTOR = "contractor"
    OWNER = "owner"
    ARCHITECT = "architect"
    AGENCY = "agency"
    VENDOR = "vendor"
    SUBCONTRACTOR = "subcontractor"
    OTHER = "other"


class InteractionType(StrEnum):
    """How a logged sales touch happened."""

    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    SITE_VISIT = "site_visit"
    TEXT = "text"
    NOTE = "note"
