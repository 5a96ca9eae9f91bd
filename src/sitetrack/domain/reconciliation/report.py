"""Run report returned by every import, dry run or not."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final

from sitetrack.domain.model import EntityFamily

from .contracts import Conflict, DecisionKind, Insert, SkipLocked, SkipUnchanged, Update

if TYPE_CHECKING:
    from uuid import UUID

    from .contracts import Decision

_PLURALS: Final[dict[EntityFamily, str]] = {
    EntityFamily.JOB: "jobs",
    EntityFamily.OFFICE: "offices",
    EntityFamily.COMPANY: "companies",
    EntityFamily.CONTACT: "contacts",
    EntityFamily.INTERACTION: "interactions",
}


class ErrorPhase(StrEnum):
    CLASSIFY = "classify"
    COMMIT = "commit"


@dataclass(frozen=True, slots=True, kw_only=True)
class RowOutcome:
    row_index: int
    decision: Decision

    @property
    def kind(self) -> DecisionKind:
        return self.decision.kind

    @property
    def reason(self) -> str:
        return self.decision.reason

    @property
    def target_id(self) -> UUID | None:
        match self.decision:
            case Update(target_id=target_id) | SkipUnchanged(target_id=target_id):
                return target_id
            case SkipLocked(target_id=target_id):
                return target_id
            case Insert() | Conflict():
                return None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"row": self.row_index, "reason": self.reason}
        if self.target_id is not None:
            payload["target_id"] = str(self.target_id)
        match self.decision:
            case Update(diff=changes):
                payload["fields"] = sorted(changes)
            case Insert(draft=draft):
                payload["name"] = draft.values.get("name")
            case SkipLocked(fields=fields):
                payload["fields"] = list(fields)
            case Conflict(candidates=candidates) if candidates:
                payload["candidates"] = [str(candidate.entity_id) for candidate in candidates]
            case _:
                pass
        return payload


@dataclass(frozen=True, slots=True, kw_only=True)
class RowErrorEntry:
    row_index: int
    message: str
    phase: ErrorPhase = ErrorPhase.CLASSIFY

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row_index, "message": self.message, "phase": str(self.phase)}


@dataclass(slots=True, kw_only=True)
class RunReport:
    """Counts, per-row outcomes and errors for one import run.

    Counts are derived from decisions, so a dry run and a real run over the same
    input and store report the same numbers. ``committed`` counts the writes that
    actually reached the store.
    """

    family: EntityFamily
    dry_run: bool
    outcomes: list[RowOutcome] = field(default_factory=list[RowOutcome])
    errors: list[RowErrorEntry] = field(default_factory=list[RowErrorEntry])
    committed: int = 0

    def record(self, row_index: int, decision: Decision) -> RowOutcome:
        outcome = RowOutcome(row_index=row_index, decision=decision)
        self.outcomes.append(outcome)
        return outcome

    def record_error(
        self, row_index: int, message: str, *, phase: ErrorPhase = ErrorPhase.CLASSIFY
    ) -> RowErrorEntry:
        entry = RowErrorEntry(row_index=row_index, message=message, phase=phase)
        self.errors.append(entry)
        return entry

    def count(self, kind: DecisionKind) -> int:
        return sum(1 for outcome in self.outcomes if outcome.kind is kind)

    @property
    def inserted(self) -> int:
        return self.count(DecisionKind.INSERT)

    @property
    def updated(self) -> int:
        return self.count(DecisionKind.UPDATE)

    @property
    def unchanged(self) -> int:
        return self.count(DecisionKind.SKIP_UNCHANGED)

    @property
    def skipped_locked(self) -> int:
        return self.count(DecisionKind.SKIP_LOCKED)

    @property
    def conflicts(self) -> int:
        return self.count(DecisionKind.CONFLICT)

    @property
    def decisions(self) -> tuple[Decision, ...]:
        return tuple(outcome.decision for outcome in self.outcomes)

    @property
    def details(self) -> dict[str, list[dict[str, Any]]]:
        grouped: dict[str, list[dict[str, Any]]] = {str(kind): [] for kind in DecisionKind}
        for outcome in self.outcomes:
            grouped[str(outcome.kind)].append(outcome.to_dict())
        return grouped

    def summary(self) -> str:
        skipped = self.skipped_locked + self.conflicts
        if self.dry_run:
            text = (
                f"Dry-run completed: {self.inserted} would be imported, "
                f"{self.updated} would be updated, {self.unchanged} unchanged, {skipped} skipped"
            )
        else:
            text = (
                f"Import completed: {self.inserted} new {_PLURALS[self.family]}, "
                f"{self.updated} updated, {self.unchanged} unchanged, {skipped} skipped"
            )
        if self.errors:
            text += f", {len(self.errors)} errors"
        return text

    def to_dict(self) -> dict[str, Any]:
        return {
            "family": str(self.family),
            "dry_run": self.dry_run,
            "inserted": self.inserted,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "skipped_locked": self.skipped_locked,
            "conflicts": self.conflicts,
            "committed": self.committed,
            "errors": [entry.to_dict() for entry in self.errors],
            "details": self.details,
            "message": self.summary(),
        }
