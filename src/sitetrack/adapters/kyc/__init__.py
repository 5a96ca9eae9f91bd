"""KYC sales-log adapter."""

from __future__ import annotations

from .schema import GENERIC_CONTACTS, KycRow, parse_contact
from .translator import KycBatch, translate_kyc_rows

__all__ = ["GENERIC_CONTACTS", "KycBatch", "KycRow", "parse_contact", "translate_kyc_rows"]
