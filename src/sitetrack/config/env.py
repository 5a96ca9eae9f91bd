"""Readers for the ``SITETRACK_*`` and ``DATABASE_URI`` environment variables.

Blank values count as unset everywhere, so an empty line in ``.env`` falls back
to the default instead of producing an empty path or URI.
"""

from __future__ import annotations

import os
from pathlib import Path

from .errors import ConfigurationError


def env_value(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip() or None


def optional_path_env(name: str) -> Path | None:
    value = env_value(name)
    return None if value is None else Path(value).expanduser()


def optional_float_env(name: str, *, default: float) -> float:
    """Return a float environment variable, or ``default`` when it is unset."""

    value = env_value(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from exc
