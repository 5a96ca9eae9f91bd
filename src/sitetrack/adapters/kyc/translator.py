"""Translate KYC sales-log rows into company, contact and interaction records.

A sales log mentions the same company and contact on many rows. Each company and
each contact is emitted once, on the first row that mentions it, carrying the
latest dated interaction the log holds for it. Every row with a customer becomes
one interaction record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from sitetrack.domain.model import EntityFamily, InteractionType
from sitetrack.domain.reconciliation import IncomingRecord, schema_for
from sitetrack.domain.reconciliation.normalize import parse_date, parse_interaction_type

from .schema import KycRow, parse_contact

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import date

log = getLogger(__name__)

_COMPANIES = schema_for(EntityFamily.COMPANY)
_CONTACTS = schema_for(EntityFamily.CONTACT)


@dataclass(frozen=True, slots=True)
class _Touch:
    on: date
    kind: InteractionType


@dataclass(slots=True)
class _Pending:
    """First mention of a company or contact, plus its latest dated touch."""

    row_index: int
    fields: dict[str, object]
    latest: _Touch | None = None

    def observe(self, touch: _Touch | None) -> None:
        if touch is not None and (self.latest is None or touch.on > self.latest.on):
            self.latest = touch

    def record(self, family: EntityFamily) -> IncomingRecord:
        values = dict(self.fields)
        if self.latest is not None:
            values["last_interaction_on"] = self.latest.on
            values["last_interaction_type"] = self.latest.kind
        return IncomingRecord(row_index=self.row_index, family=family, fields=values)


@dataclass(slots=True)
class KycBatch:
    """Records for the company, contact and interaction runs of one sales log."""

    companies: list[IncomingRecord] = field(default_factory=list[IncomingRecord])
    contacts: list[IncomingRecord] = field(default_factory=list[IncomingRecord])
    interactions: list[IncomingRecord] = field(default_factory=list[IncomingRecord])
    skipped_rows: list[int] = field(default_factory=list[int])


def _touch(row: KycRow) -> _Touch | None:
    try:
        logged_on = parse_date(row.logged_on)
    except ValueError:
        # the interaction run reports the bad date for this row
        return None
    if logged_on is None:
        return None
    return _Touch(on=logged_on, kind=parse_interaction_type(row.kind) or InteractionType.NOTE)


def translate_kyc_rows(rows: Iterable[Mapping[str, object]]) -> KycBatch:
    batch = KycBatch()
    companies: dict[str, _Pending] = {}
    contacts: dict[str, _Pending] = {}

    for index, raw in enumerate(rows, start=1):
        row = KycRow.model_validate(raw)
        company_name = row.company_name
        company_key = _COMPANIES.dedupe_key({"name": company_name})
        if not company_key:
            batch.skipped_rows.append(index)
            continue

        full_name, role = parse_contact(row.contact, row.role)
        contact_fields: dict[str, object] = {
            "name": full_name,
            "company_name": company_name,
            "role": role,
        }
        contact_key = _CONTACTS.dedupe_key(contact_fields)
        touch = _touch(row)

        companies.setdefault(company_key, _Pending(index, {"name": company_name})).observe(touch)
        contacts.setdefault(contact_key, _Pending(index, contact_fields)).observe(touch)
        batch.interactions.append(
            IncomingRecord(
                row_index=index,
                family=EntityFamily.INTERACTION,
                fields={
                    "name": full_name,
                    "company_name": company_name,
                    "interaction_type": row.kind or InteractionType.NOTE.value,
                    "occurred_on": row.logged_on,
                    "description": row.notes,
                },
            )
        )

    batch.companies = [pending.record(EntityFamily.COMPANY) for pending in companies.values()]
    batch.contacts = [pending.record(EntityFamily.CONTACT) for pending in contacts.values()]
    log.info(
        "Translated KYC log: %d companies, %d contacts, %d interactions, "
        "%d rows without a customer",
        len(batch.companies),
        len(batch.contacts),
        len(batch.interactions),
        len(batch.skipped_rows),
    )
    return batch
