"""Import reconciliation: match, classify, merge and commit incoming records."""

from __future__ import annotations

from .classify import classify
from .contracts import (
    ConfidenceTier,
    Conflict,
    Decision,
    DecisionKind,
    EntityDraft,
    FieldDiff,
    IdentityKey,
    IncomingRecord,
    Insert,
    MatchCandidate,
    MatchStrategy,
    PreparedRecord,
    SkipLocked,
    SkipUnchanged,
    Update,
)
from .engine import Committing, Done, Failed, Idle, ImportRun, Processing, RunState, run_import
from .errors import (
    AmbiguousMatchError,
    FatalConfigurationError,
    ReconciliationError,
    RowError,
    StoreWriteError,
)
from .families import FAMILY_SCHEMAS, FamilySchema, FieldKind, FieldOwner, schema_for
from .match import find_candidates
from .merge import MergeResult, apply_user_edit, diff
from .report import ErrorPhase, RowErrorEntry, RowOutcome, RunReport

__all__ = [
    "FAMILY_SCHEMAS",
    "AmbiguousMatchError",
    "Committing",
    "ConfidenceTier",
    "Conflict",
    "Decision",
    "DecisionKind",
    "Done",
    "EntityDraft",
    "ErrorPhase",
    "Failed",
    "FamilySchema",
    "FatalConfigurationError",
    "FieldDiff",
    "FieldKind",
    "FieldOwner",
    "IdentityKey",
    "Idle",
    "ImportRun",
    "IncomingRecord",
    "Insert",
    "MatchCandidate",
    "MatchStrategy",
    "MergeResult",
    "PreparedRecord",
    "Processing",
    "ReconciliationError",
    "RowError",
    "RowErrorEntry",
    "RowOutcome",
    "RunReport",
    "RunState",
    "SkipLocked",
    "SkipUnchanged",
    "StoreWriteError",
    "Update",
    "apply_user_edit",
    "classify",
    "diff",
    "find_candidates",
    "run_import",
    "schema_for",
]
