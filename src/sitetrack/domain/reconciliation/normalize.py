"""Value normalization for incoming spreadsheet cells.

Responsibilities of this module:
- derive deterministic, case-insensitive lookup text for natural keys
- parse numeric, date, flag and enum cells into typed values
- avoid any persistence side effects

Parsers return ``None`` for blank cells and raise ``ValueError`` for cells that
carry a value that cannot be interpreted.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final

from sitetrack.domain.model import (
    CompanyType,
    InteractionType,
    JobStatus,
    JobType,
    Temperature,
)

_WHITESPACE = re.compile(r"\s+")
_NUMERIC_NOISE = re.compile(r"[$,\s]")
_WRAPPING_PARENS = re.compile(r"^\(([^)]+)\)$")
_INNER_PARENS = re.compile(r"\s*\([^)]+\)\s*")
_COMPANY_SUFFIX = re.compile(r"\b(INC|LLC|CORP|CO|LTD)\.?$", re.IGNORECASE)
_NON_WORD = re.compile(r"[^\w\s]")

_DATE_FORMATS: Final[tuple[str, ...]] = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%b %d, %Y",
    "%B %d, %Y",
)
_TRUE_FLAGS: Final[frozenset[str]] = frozenset({"true", "yes", "y", "1", "x"})
_FALSE_FLAGS: Final[frozenset[str]] = frozenset({"false", "no", "n", "0"})

# stored values keep two decimal places; incoming values are rounded the same way
VALUE_DECIMAL_PLACES: Final = 2
_VALUE_QUANTUM: Final = Decimal(1).scaleb(-VALUE_DECIMAL_PLACES)


def is_blank(raw: object) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def clean_text(raw: object) -> str | None:
    """Trim and collapse internal whitespace; blank cells become ``None``."""

    if is_blank(raw):
        return None
    return _WHITESPACE.sub(" ", str(raw)).strip()


def normalize_text(raw: object) -> str:
    """Case-insensitive, whitespace-collapsed form used for natural keys."""

    return (clean_text(raw) or "").casefold()


def normalize_company_name(raw: object) -> str:
    """Canonical company spelling: ``"(Anvil Builders, Inc.)"`` -> ``"ANVIL BUILDERS"``."""

    text = clean_text(raw) or ""
    text = _WRAPPING_PARENS.sub(r"\1", text)
    text = _INNER_PARENS.sub(" ", text)
    text = text.upper().strip()
    text = _COMPANY_SUFFIX.sub("", text)
    text = _NON_WORD.sub("", text)
    text = _WHITESPACE.sub(" ", text).strip()
    # a trailing suffix hidden behind punctuation ("ACME, INC.") only surfaces now
    return _WHITESPACE.sub(" ", _COMPANY_SUFFIX.sub("", text)).strip()


def parse_decimal(raw: object) -> Decimal | None:
    """Parse currency-ish cells: ``"$1,000,000"`` and ``"1000000.00"`` are equal.

    The result is rounded half-up to ``VALUE_DECIMAL_PLACES`` so it compares equal
    to what the store reads back.
    """

    if is_blank(raw):
        return None
    if isinstance(raw, bool):
        raise ValueError(f"Not a number: {raw!r}")
    numeric = isinstance(raw, int | float | Decimal)
    text = str(raw) if numeric else _NUMERIC_NOISE.sub("", str(raw))
    try:
        number = Decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"Not a number: {raw!r}") from exc
    if not number.is_finite():
        raise ValueError(f"Not a number: {raw!r}")
    try:
        return number.quantize(_VALUE_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"Number out of range: {raw!r}") from exc


def parse_date(raw: object) -> date | None:
    if is_blank(raw):
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()  # noqa: DTZ007
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text).date()
    except ValueError as exc:
        raise ValueError(f"Unrecognised date: {raw!r}") from exc


def parse_flag(raw: object) -> bool | None:
    if is_blank(raw):
        return None
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE_FLAGS:
        return True
    if text in _FALSE_FLAGS:
        return False
    raise ValueError(f"Not a yes/no value: {raw!r}")


def parse_temperature(raw: object) -> Temperature | None:
    if is_blank(raw):
        return None
    try:
        return Temperature(str(raw).strip().lower())
    except ValueError as exc:
        raise ValueError(f"Unknown temperature: {raw!r}") from exc


def normalize_status(raw: object) -> JobStatus | None:
    """Map free-form project status text onto the job status enum."""

    if is_blank(raw):
        return None
    text = str(raw).strip().lower()
    if any(word in text for word in ("active", "construction", "building")):
        return JobStatus.ACTIVE
    if any(word in text for word in ("planning", "design", "permit")):
        return JobStatus.PLANNING
    if any(word in text for word in ("complete", "finished", "done")):
        return JobStatus.COMPLETED
    if any(word in text for word in ("pending", "review", "approval")):
        return JobStatus.PENDING
    return JobStatus.PLANNING


def normalize_project_type(raw: object) -> str | None:
    if is_blank(raw):
        return None
    text = str(raw).strip().lower()
    if any(word in text for word in ("commercial", "office", "retail")):
        return JobType.COMMERCIAL.value
    if any(word in text for word in ("residential", "housing", "apartment")):
        return JobType.RESIDENTIAL.value
    if any(word in text for word in ("industrial", "warehouse", "manufacturing")):
        return JobType.INDUSTRIAL.value
    if any(word in text for word in ("equipment", "machinery")):
        return JobType.EQUIPMENT.value
    return JobType.COMMERCIAL.value


def normalize_company_type(raw: object) -> str | None:
    if is_blank(raw):
        return None
    text = str(raw).strip().lower()
    try:
        return CompanyType(text).value
    except ValueError:
        return CompanyType.OTHER.value


def office_category(raw: object) -> str | None:
    _ = raw
    return JobType.OFFICE.value


_INTERACTION_ALIASES: Final[dict[str, InteractionType]] = {
    "call": InteractionType.CALL,
    "phone call": InteractionType.CALL,
    "in person": InteractionType.SITE_VISIT,
    "site visit": InteractionType.SITE_VISIT,
    "email": InteractionType.EMAIL,
    "meeting": InteractionType.MEETING,
    "text": InteractionType.TEXT,
}


def parse_interaction_type(raw: object) -> InteractionType | None:
    """Map a sales-log ``Type`` cell; anything unrecognised is a note."""

    if is_blank(raw):
        return None
    if isinstance(raw, InteractionType):
        return raw
    text = _WHITESPACE.sub(" ", str(raw).strip().lower().replace("_", " "))
    return _INTERACTION_ALIASES.get(text, InteractionType.NOTE)
