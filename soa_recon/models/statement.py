"""Statement lines and canonical invoice records used by the matching engine."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "USD"

_CENT = Decimal("0.01")

# Source field aliases, canonical name first
INVOICE_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "invoice_number": ("invoice_number", "invoice_num"),
    "total_amount": ("total_amount", "amount"),
    "currency": ("currency", "currency_code"),
    "invoice_date": ("invoice_date", "date"),
}


class MatchMode(str, Enum):
    """How a statement line may be matched."""

    STANDARD = "standard"
    PARTIAL = "partial"


@dataclass(frozen=True)
class StatementLine:
    """A single line item from a vendor Statement of Account."""

    invoice_number: str | None
    amount: Decimal | None
    currency: str = DEFAULT_CURRENCY
    invoice_date: date | None = None
    allow_partial: bool | None = None
    match_mode: MatchMode | None = None
    line_id: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "StatementLine":
        """Build a statement line from a raw record.

        Accepts ``currency_code`` as an alias for ``currency`` and ``id`` for
        ``line_id``. Unparseable amounts, dates and modes become None.
        """
        line_id = data.get("line_id", data.get("id"))
        match_mode = data.get("match_mode")
        try:
            mode = MatchMode(match_mode) if match_mode is not None else None
        except ValueError:
            logger.debug(f"Ignoring unknown match mode {match_mode!r}")
            mode = None

        allow_partial = data.get("allow_partial")

        return cls(
            invoice_number=_parse_text(data.get("invoice_number")),
            amount=parse_amount(data.get("amount")),
            currency=_parse_currency(data.get("currency_code") or data.get("currency")),
            invoice_date=parse_date(data.get("invoice_date")),
            allow_partial=allow_partial if isinstance(allow_partial, bool) else None,
            match_mode=mode,
            line_id=str(line_id) if line_id is not None else None,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "line_id": self.line_id,
            "invoice_number": self.invoice_number,
            "amount": str(self.amount) if self.amount is not None else None,
            "currency": self.currency,
            "invoice_date": self.invoice_date.isoformat() if self.invoice_date else None,
            "allow_partial": self.allow_partial,
            "match_mode": self.match_mode.value if self.match_mode else None,
        }


@dataclass(frozen=True)
class CanonicalInvoice:
    """Candidate invoice with source field aliasing resolved.

    Matching passes only ever see this shape. ``raw`` keeps the record as the
    collaborator returned it so callers can reference the original.
    """

    invoice_number: str | None
    total_amount: Decimal | None
    currency: str = DEFAULT_CURRENCY
    invoice_date: date | None = None
    status: str | None = None
    invoice_id: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "invoice_id": self.invoice_id,
            "invoice_number": self.invoice_number,
            "total_amount": str(self.total_amount) if self.total_amount is not None else None,
            "currency": self.currency,
            "invoice_date": self.invoice_date.isoformat() if self.invoice_date else None,
            "status": self.status,
        }


def canonicalize_invoice(record: Mapping[str, Any] | CanonicalInvoice) -> CanonicalInvoice:
    """Normalize an invoice record into the canonical shape.

    Canonical field names take precedence over their aliases. Missing or
    malformed values become None (currency falls back to USD); this never
    raises on bad data.
    """
    if isinstance(record, CanonicalInvoice):
        return record

    values = {name: _first_present(record, aliases) for name, aliases in INVOICE_FIELD_ALIASES.items()}
    invoice_id = record.get("id", record.get("invoice_id"))
    status = record.get("status")

    return CanonicalInvoice(
        invoice_number=_parse_text(values["invoice_number"]),
        total_amount=parse_amount(values["total_amount"]),
        currency=_parse_currency(values["currency"]),
        invoice_date=parse_date(values["invoice_date"]),
        status=str(status) if status is not None else None,
        invoice_id=str(invoice_id) if invoice_id is not None else None,
        raw=dict(record),
    )


def parse_amount(value: Any) -> Decimal | None:
    """Parse a monetary amount into a Decimal, or None if not parseable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        amount = value
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            logger.debug(f"Unparseable amount {value!r}")
            return None

    if not amount.is_finite():
        return None
    try:
        amount.quantize(_CENT)
    except InvalidOperation:
        logger.debug(f"Amount out of range {value!r}")
        return None
    return amount


def parse_date(value: Any) -> date | None:
    """Parse a calendar date from a date, datetime or ISO-8601 string."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return _utc_date(value)
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None
    try:
        return _utc_date(datetime.fromisoformat(text))
    except ValueError:
        logger.debug(f"Unparseable date {value!r}")
        return None


def _utc_date(value: datetime) -> date:
    # Aware timestamps take their UTC calendar day
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.date()


def _first_present(record: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _parse_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _parse_currency(value: Any) -> str:
    if value is None or value == "":
        return DEFAULT_CURRENCY
    return str(value)
