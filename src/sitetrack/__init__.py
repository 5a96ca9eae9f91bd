"""Reconcile spreadsheet exports into the tracked-entity store."""

from __future__ import annotations

from importlib import metadata

try:
    __version__ = metadata.version("sitetrack")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"
