"""Office-address guide adapter."""

from __future__ import annotations

from .schema import DEFAULT_OFFICE_NAME, OfficeRow
from .translator import parse_office_row, translate_office_rows

__all__ = ["DEFAULT_OFFICE_NAME", "OfficeRow", "parse_office_row", "translate_office_rows"]
