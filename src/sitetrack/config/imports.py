"""Import reconciliation defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_float_env
from .errors import ConfigurationError

DEFAULT_FUZZY_TOLERANCE = 0.02


@dataclass(frozen=True, slots=True)
class ImportConfig:
    """Tunables for the import reconciliation engine.

    ``fuzzy_tolerance`` is the relative distance (fraction of the incoming value)
    within which two project values count as "the same" for weak matches.
    """

    fuzzy_tolerance: float = DEFAULT_FUZZY_TOLERANCE

    def __post_init__(self) -> None:
        if not 0.0 <= self.fuzzy_tolerance < 1.0:
            raise ConfigurationError(
                f"Fuzzy tolerance must be within [0, 1), got {self.fuzzy_tolerance}"
            )


def get_import_config() -> ImportConfig:
    tolerance = optional_float_env("SITETRACK_FUZZY_TOLERANCE", default=DEFAULT_FUZZY_TOLERANCE)
    return ImportConfig(fuzzy_tolerance=tolerance)
