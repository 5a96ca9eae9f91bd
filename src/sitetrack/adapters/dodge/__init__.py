"""Dodge Data project export adapter."""

from __future__ import annotations

from .schema import DodgeRow
from .translator import parse_dodge_row, translate_dodge_rows

__all__ = ["DodgeRow", "parse_dodge_row", "translate_dodge_rows"]
