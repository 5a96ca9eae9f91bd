"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from sitetrack.adapters.dodge import translate_dodge_rows
from sitetrack.adapters.kyc import translate_kyc_rows
from sitetrack.adapters.offices import translate_office_rows
from sitetrack.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    is_started,
    startup,
)
from sitetrack.config import get_import_config
from sitetrack.domain.model import EntityFamily
from sitetrack.domain.ports.unit_of_work import ImportUnitOfWork
from sitetrack.domain.reconciliation import run_import, schema_for

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from uuid import UUID

    from sitetrack.domain.model import TrackedEntity
    from sitetrack.domain.reconciliation import IncomingRecord, RunReport

UnitOfWorkFactory = Callable[[], ImportUnitOfWork]
type RowSource = Iterable[Mapping[str, object]]

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class KycImportResult:
    """Reports of the company, contact and interaction runs of one sales log."""

    companies: RunReport
    contacts: RunReport
    interactions: RunReport
    skipped_rows: tuple[int, ...] = ()


def _resolve_factory(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyImportUnitOfWork


def import_records(
    records: Iterable[IncomingRecord],
    family: EntityFamily | str,
    *,
    dry_run: bool,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    tolerance: float | None = None,
) -> RunReport:
    """Reconcile ``records`` in one unit of work; commit unless ``dry_run``."""

    schema = schema_for(family)
    effective_tolerance = get_import_config().fuzzy_tolerance if tolerance is None else tolerance
    effective_uow = _resolve_factory(unit_of_work_factory)
    log.info(
        "Starting %s import: dry_run=%s, tolerance=%s",
        schema.family,
        dry_run,
        effective_tolerance,
    )

    with effective_uow() as uow:
        entities = uow.repositories.entities
        report = run_import(
            records,
            schema.family,
            dry_run=dry_run,
            reader=entities,
            writer=None if dry_run else entities,
            tolerance=effective_tolerance,
        )
        if dry_run:
            uow.rollback()
        else:
            uow.commit()

    log.info(
        f"Finished {schema.family} import: inserted={report.inserted}, updated={report.updated}, "
        f"unchanged={report.unchanged}, conflicts={report.conflicts}, errors={len(report.errors)}"
    )
    return report


def import_dodge_rows(
    rows: RowSource,
    *,
    dry_run: bool,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> RunReport:
    return import_records(
        translate_dodge_rows(rows),
        EntityFamily.JOB,
        dry_run=dry_run,
        unit_of_work_factory=unit_of_work_factory,
    )


def import_office_rows(
    rows: RowSource,
    *,
    dry_run: bool,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> RunReport:
    return import_records(
        translate_office_rows(rows),
        EntityFamily.OFFICE,
        dry_run=dry_run,
        unit_of_work_factory=unit_of_work_factory,
    )


def import_kyc_rows(
    rows: RowSource,
    *,
    dry_run: bool,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> KycImportResult:
    """Import the companies, then the contacts, then the interactions of a sales log.

    Each family is its own run and its own unit of work.
    """

    batch = translate_kyc_rows(rows)
    companies = import_records(
        batch.companies,
        EntityFamily.COMPANY,
        dry_run=dry_run,
        unit_of_work_factory=unit_of_work_factory,
    )
    contacts = import_records(
        batch.contacts,
        EntityFamily.CONTACT,
        dry_run=dry_run,
        unit_of_work_factory=unit_of_work_factory,
    )
    interactions = import_records(
        batch.interactions,
        EntityFamily.INTERACTION,
        dry_run=dry_run,
        unit_of_work_factory=unit_of_work_factory,
    )
    return KycImportResult(
        companies=companies,
        contacts=contacts,
        interactions=interactions,
        skipped_rows=tuple(batch.skipped_rows),
    )


def edit_entity(
    entity_id: UUID,
    changes: Mapping[str, object],
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> TrackedEntity:
    """Apply a manual edit; edited import-owned fields become locked."""

    effective_uow = _resolve_factory(unit_of_work_factory)
    with effective_uow() as uow:
        entity = uow.repositories.entities.record_user_edit(entity_id, changes)
        uow.commit()
    log.info("Edited %s %s: %s", entity.family, entity_id, ", ".join(sorted(changes)))
    return entity


def unlock_fields(
    entity_id: UUID,
    fields: Sequence[str] | None = None,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> set[str]:
    """Release locks so later imports may update those fields again."""

    effective_uow = _resolve_factory(unit_of_work_factory)
    with effective_uow() as uow:
        remaining = uow.repositories.entities.unlock_fields(entity_id, fields)
        uow.commit()
    log.info("Unlocked %s on %s; still locked: %s", fields or "all fields", entity_id, remaining)
    return remaining
