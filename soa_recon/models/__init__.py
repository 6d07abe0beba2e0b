"""Data models for statement matching."""

from .statement import (
    DEFAULT_CURRENCY,
    CanonicalInvoice,
    MatchMode,
    StatementLine,
    canonicalize_invoice,
    parse_amount,
    parse_date,
)

__all__ = [
    "DEFAULT_CURRENCY",
    "CanonicalInvoice",
    "MatchMode",
    "StatementLine",
    "canonicalize_invoice",
    "parse_amount",
    "parse_date",
]
