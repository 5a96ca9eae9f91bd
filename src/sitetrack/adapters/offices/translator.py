"""Translate office-guide rows into incoming office records."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sitetrack.domain.model import EntityFamily
from sitetrack.domain.reconciliation import IncomingRecord

from .schema import OfficeRow

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

log = getLogger(__name__)


def parse_office_row(row: OfficeRow | Mapping[str, object], *, row_index: int) -> IncomingRecord:
    payload = row if isinstance(row, OfficeRow) else OfficeRow.model_validate(row)
    return IncomingRecord(
        row_index=row_index,
        family=EntityFamily.OFFICE,
        fields={
            "name": payload.display_name,
            "address": payload.full_address,
            "county": payload.county,
            "phone": payload.phone,
        },
    )


def translate_office_rows(rows: Iterable[Mapping[str, object]]) -> list[IncomingRecord]:
    """Return one office record per row, numbered from 1.

    Repeated guide entries are left to the engine, which reports them as
    duplicates within the batch.
    """

    records = [parse_office_row(row, row_index=index) for index, row in enumerate(rows, start=1)]
    log.info("Translated %d office rows", len(records))
    return records
