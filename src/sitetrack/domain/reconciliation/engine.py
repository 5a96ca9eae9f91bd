"""Run executor: classify every row, then (unless dry run) commit the writes.

States::

    Idle -> Processing(row) ... -> Committing -> Done

``Failed(row, error)`` can be entered from any state.

Classification never writes, so a dry run and a real run over the same input and
store produce the same decisions. Writes happen only in the commit phase, in row
order; a failed write is recorded and the remaining writes still go through.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from sitetrack.config.imports import DEFAULT_FUZZY_TOLERANCE

from .classify import claimed_keys, classify
from .contracts import Conflict, Insert, SkipLocked, SkipUnchanged, Update
from .errors import FatalConfigurationError, ReconciliationError, RowError
from .families import schema_for
from .match import find_candidates
from .report import ErrorPhase, RunReport

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sitetrack.domain.model import EntityFamily
    from sitetrack.domain.ports import EntityReader, EntityWriter

    from .contracts import Decision, IdentityKey, IncomingRecord
    from .families import FamilySchema

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Idle:
    name: Literal["idle"] = "idle"


@dataclass(frozen=True, slots=True)
class Processing:
    row_index: int
    name: Literal["processing"] = "processing"


@dataclass(frozen=True, slots=True)
class Committing:
    name: Literal["committing"] = "committing"


@dataclass(frozen=True, slots=True)
class Done:
    name: Literal["done"] = "done"


@dataclass(frozen=True, slots=True)
class Failed:
    row_index: int | None
    error: BaseException
    name: Literal["failed"] = "failed"


type RunState = Idle | Processing | Committing | Done | Failed


@dataclass(frozen=True, slots=True)
class _Planned:
    row_index: int
    decision: Decision


@dataclass(slots=True)
class ImportRun:
    """One reconciliation run over a single entity family.

    Create a fresh instance per run; ``history`` keeps every state entered.
    """

    family: EntityFamily
    reader: EntityReader
    writer: EntityWriter | None = None
    dry_run: bool = True
    tolerance: float = DEFAULT_FUZZY_TOLERANCE
    state: RunState = field(default_factory=Idle)
    history: list[RunState] = field(default_factory=list[RunState])
    schema: FamilySchema = field(init=False)

    def __post_init__(self) -> None:
        # fails before any row is looked at
        self.schema = schema_for(self.family)
        self.family = self.schema.family
        if not self.dry_run and self.writer is None:
            raise FatalConfigurationError("A writer is required unless the run is a dry run")
        self.history.append(self.state)

    def execute(self, records: Iterable[IncomingRecord]) -> RunReport:
        if not isinstance(self.state, Idle):
            raise RuntimeError(f"Import run already started (state={self.state.name})")

        report = RunReport(family=self.family, dry_run=self.dry_run)
        log.info("Starting %s import (dry_run=%s)", self.family, self.dry_run)

        planned = self._classify_all(records, report)
        if not self.dry_run and self.writer is not None:
            self._commit_all(planned, report, self.writer)

        self._enter(Done())
        log.info(report.summary())
        return report

    # -- classification ----------------------------------------------------

    def _classify_all(self, records: Iterable[IncomingRecord], report: RunReport) -> list[_Planned]:
        seen: set[IdentityKey] = set()
        planned: list[_Planned] = []
        for record in records:
            self._enter(Processing(record.row_index))
            try:
                prepared = self.schema.prepare(record)
                candidates = find_candidates(
                    prepared, self.reader, schema=self.schema, tolerance=self.tolerance
                )
                decision = classify(prepared, candidates, seen, schema=self.schema)
            except FatalConfigurationError as exc:
                self._fail(record.row_index, exc)
                raise
            except ReconciliationError as exc:
                log.warning("Row %s skipped: %s", record.row_index, exc)
                report.record_error(record.row_index, _message(exc))
                continue
            except Exception as exc:
                log.warning("Row %s failed during classification", record.row_index, exc_info=True)
                report.record_error(record.row_index, _message(exc))
                continue

            log.debug("Row %s: %s", record.row_index, type(decision).__name__)
            report.record(record.row_index, decision)
            seen.update(claimed_keys(prepared, decision))
            if _writes(decision):
                planned.append(_Planned(record.row_index, decision))
        return planned

    # -- commit ------------------------------------------------------------

    def _commit_all(
        self, planned: list[_Planned], report: RunReport, writer: EntityWriter
    ) -> None:
        self._enter(Committing())
        for item in planned:
            try:
                _apply(item.decision, writer)
            except FatalConfigurationError as exc:
                self._fail(item.row_index, exc)
                raise
            except Exception as exc:
                log.warning(
                    "Row %s could not be written: %s", item.row_index, exc, exc_info=True
                )
                report.record_error(item.row_index, _message(exc), phase=ErrorPhase.COMMIT)
                continue
            report.committed += 1

    # -- state -------------------------------------------------------------

    def _enter(self, state: RunState) -> None:
        log.debug("Import run %s -> %s", self.state.name, state.name)
        self.state = state
        self.history.append(state)

    def _fail(self, row_index: int | None, error: BaseException) -> None:
        log.error("Import run failed at row %s: %s", row_index, error)
        self._enter(Failed(row_index, error))


def _apply(decision: Decision, writer: EntityWriter) -> None:
    match decision:
        case Insert(draft=draft):
            writer.insert(draft)
        case Update(target_id=target_id, diff=changes):
            writer.apply_diff(target_id, changes)
        case SkipUnchanged() | SkipLocked() | Conflict():
            pass


def run_import(
    records: Iterable[IncomingRecord],
    family: EntityFamily | str,
    *,
    dry_run: bool,
    reader: EntityReader,
    writer: EntityWriter | None = None,
    tolerance: float = DEFAULT_FUZZY_TOLERANCE,
) -> RunReport:
    """Reconcile ``records`` against the store and return the run report.

    Only ``FatalConfigurationError`` propagates; every row-level problem ends up
    in ``RunReport.errors``.
    """

    run = ImportRun(
        family=schema_for(family).family,
        reader=reader,
        writer=writer,
        dry_run=dry_run,
        tolerance=tolerance,
    )
    return run.execute(records)


def _writes(decision: Decision) -> bool:
    return isinstance(decision, Insert | Update)


def _message(exc: BaseException) -> str:
    if isinstance(exc, RowError):
        return exc.message
    return str(exc) or type(exc).__name__
