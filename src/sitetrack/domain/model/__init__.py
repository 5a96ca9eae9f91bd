"""Public domain model surface."""

from __future__ import annotations

from sitetrack.domain.model.entity import Entity, new_id
from sitetrack.domain.model.enums import (
    CompanyType,
    EntityFamily,
    InteractionType,
    JobStatus,
    JobType,
    Temperature,
)
from sitetrack.domain.model.tracked import TrackedEntity, utcnow

__all__ = [
    "CompanyType",
    "Entity",
    "EntityFamily",
    "InteractionType",
    "JobStatus",
    "JobType",
    "Temperature",
    "TrackedEntity",
    "new_id",
    "utcnow",
]
