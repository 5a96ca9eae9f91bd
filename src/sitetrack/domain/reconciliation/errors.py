"""Error taxonomy for import reconciliation.

Only ``FatalConfigurationError`` escapes ``run_import``; every other error is
captured per row in the run report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sitetrack.config.errors import ConfigurationError

if TYPE_CHECKING:
    from uuid import UUID


class ReconciliationError(Exception):
    """Base class for recoverable, row-scoped reconciliation failures."""


class RowError(ReconciliationError):
    """Raised when an incoming record is malformed or cannot be interpreted."""

    def __init__(self, row_index: int, message: str) -> None:
        self.row_index = row_index
        self.message = message
        super().__init__(f"Row {row_index}: {message}")


class AmbiguousMatchError(ReconciliationError):
    """Raised when more than one high-confidence candidate matches one record."""

    def __init__(self, candidate_ids: tuple[UUID, ...]) -> None:
        self.candidate_ids = candidate_ids
        super().__init__(f"ambiguous match between {len(candidate_ids)} existing entities")


class StoreWriteError(ReconciliationError):
    """Raised by store adapters when a single insert or update cannot be written."""


class FatalConfigurationError(ConfigurationError):
    """Raised when a run cannot start (or continue) because it is misconfigured."""
