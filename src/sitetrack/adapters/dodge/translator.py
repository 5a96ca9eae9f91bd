"""Translate Dodge export rows into incoming job records."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sitetrack.domain.model import EntityFamily
from sitetrack.domain.reconciliation import IncomingRecord

from .schema import DodgeRow

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

log = getLogger(__name__)


def _ensure_row(row: DodgeRow | Mapping[str, object]) -> DodgeRow:
    if isinstance(row, DodgeRow):
        return row
    return DodgeRow.model_validate(row)


def parse_dodge_row(row: DodgeRow | Mapping[str, object], *, row_index: int) -> IncomingRecord:
    payload = _ensure_row(row)
    return IncomingRecord(
        row_index=row_index,
        family=EntityFamily.JOB,
        fields={
            "external_id": payload.project_id,
            "name": payload.project_name,
            "description": payload.description,
            "address": payload.full_address,
            "value": payload.project_value,
            "category": payload.project_type,
            "status": payload.status,
            "start_date": payload.start_date,
            "end_date": payload.end_date,
            "owner": payload.owner,
            "contractor": payload.contractor,
            "architect": payload.architect,
            "phone": payload.phone,
            "email": payload.email,
            "county": payload.county,
        },
    )


def translate_dodge_rows(rows: Iterable[Mapping[str, object]]) -> list[IncomingRecord]:
    """Return one job record per data row, numbered from 1."""

    records = [parse_dodge_row(row, row_index=index) for index, row in enumerate(rows, start=1)]
    log.info("Translated %d Dodge rows", len(records))
    return records
