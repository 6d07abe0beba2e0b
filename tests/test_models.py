"""Tests for statement lines and invoice canonicalization."""

from dataclasses import FrozenInstanceError
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from soa_recon.models import (
    CanonicalInvoice,
    MatchMode,
    StatementLine,
    canonicalize_invoice,
    parse_amount,
    parse_date,
)


class TestCanonicalizeInvoice:
    """Tests for canonicalize_invoice."""

    def test_canonical_fields(self, sample_invoice_record):
        """Test a record already using canonical names."""
        invoice = canonicalize_invoice(sample_invoice_record)

        assert invoice.invoice_number == "INV-001"
        assert invoice.total_amount == Decimal("1000.00")
        assert invoice.currency == "USD"
        assert invoice.invoice_date == date(2025, 1, 1)
        assert invoice.status == "pending"
        assert invoice.invoice_id == "inv-1"
        assert invoice.raw == sample_invoice_record

    def test_aliased_fields(self):
        """Test alternate field names are mapped."""
        invoice = canonicalize_invoice(
            {
                "invoice_id": 42,
                "invoice_num": "INV-9",
                "amount": 250.5,
                "currency_code": "EUR",
                "date": "2025-02-03",
            }
        )

        assert invoice.invoice_number == "INV-9"
        assert invoice.total_amount == Decimal("250.5")
        assert invoice.currency == "EUR"
        assert invoice.invoice_date == date(2025, 2, 3)
        assert invoice.invoice_id == "42"

    def test_canonical_name_wins(self):
        """Test canonical names take precedence over aliases."""
        invoice = canonicalize_invoice(
            {
                "invoice_number": "A-1",
                "invoice_num": "B-2",
                "total_amount": "10.00",
                "amount": "99.00",
            }
        )

        assert invoice.invoice_number == "A-1"
        assert invoice.total_amount == Decimal("10.00")

    def test_missing_fields(self):
        """Test an empty record canonicalizes without raising."""
        invoice = canonicalize_invoice({})

        assert invoice.invoice_number is None
        assert invoice.total_amount is None
        assert invoice.invoice_date is None
        assert invoice.invoice_id is None
        assert invoice.currency == "USD"

    def test_malformed_values(self):
        """Test unparseable amounts and dates become None."""
        invoice = canonicalize_invoice(
            {"invoice_number": "INV-1", "total_amount": "abc", "invoice_date": "not a date"}
        )

        assert invoice.total_amount is None
        assert invoice.invoice_date is None

    def test_canonical_invoice_passthrough(self, sample_invoice):
        """Test already-canonical invoices are returned unchanged."""
        assert canonicalize_invoice(sample_invoice) is sample_invoice

    def test_raw_excluded_from_equality(self, sample_invoice_record):
        """Test two records with the same content compare equal."""
        first = canonicalize_invoice(sample_invoice_record)
        second = canonicalize_invoice({**sample_invoice_record, "extra": "ignored"})

        assert first == second

    def test_to_dict(self, sample_invoice):
        """Test serializing an invoice."""
        assert sample_invoice.to_dict() == {
            "invoice_id": "inv-1",
            "invoice_number": "INV-001",
            "total_amount": "1000.00",
            "currency": "USD",
            "invoice_date": "2025-01-01",
            "status": "pending",
        }


class TestParsers:
    """Tests for amount and date parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1000.00", Decimal("1000.00")),
            ("1,234.50", Decimal("1234.50")),
            (" 12.5 ", Decimal("12.5")),
            (100, Decimal("100")),
            (Decimal("7.25"), Decimal("7.25")),
            ("-40.00", Decimal("-40.00")),
        ],
    )
    def test_parse_amount(self, value, expected):
        """Test parseable amounts."""
        assert parse_amount(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", "NaN", "Infinity", True])
    def test_parse_amount_invalid(self, value):
        """Test unparseable amounts become None."""
        assert parse_amount(value) is None

    def test_parse_date(self):
        """Test dates, datetimes and ISO strings."""
        assert parse_date(date(2025, 1, 1)) == date(2025, 1, 1)
        assert parse_date(datetime(2025, 1, 1, 15, 30)) == date(2025, 1, 1)
        assert parse_date("2025-01-01") == date(2025, 1, 1)
        assert parse_date("2025-01-01T10:30:00Z") == date(2025, 1, 1)

    def test_parse_date_uses_utc_day(self):
        """Test offset timestamps resolve to their UTC calendar day."""
        assert parse_date("2025-01-01T23:30:00-05:00") == date(2025, 1, 2)
        assert parse_date("2025-01-02T01:00:00+03:00") == date(2025, 1, 1)
        assert parse_date(datetime(2025, 1, 1, 23, 30, tzinfo=timezone(timedelta(hours=-5)))) == date(
            2025, 1, 2
        )

    def test_parse_amount_out_of_range(self):
        """Test amounts too large to express in cents become None."""
        assert parse_amount("1E+40") is None
        assert parse_amount(Decimal("1E+40")) is None
        assert parse_amount("1E+20") == Decimal("1E+20")

    def test_out_of_range_invoice_amount(self):
        """Test canonicalization absorbs an out-of-range amount."""
        invoice = canonicalize_invoice({"invoice_number": "INV-001", "total_amount": "1E+40"})

        assert invoice.invoice_number == "INV-001"
        assert invoice.total_amount is None

    @pytest.mark.parametrize("value", [None, "", "01/02/2025", "2025-13-01"])
    def test_parse_date_invalid(self, value):
        """Test unparseable dates become None."""
        assert parse_date(value) is None


class TestStatementLine:
    """Tests for StatementLine."""

    def test_from_dict(self):
        """Test building a line from a raw record."""
        line = StatementLine.from_dict(
            {
                "id": 7,
                "invoice_number": "INV-1",
                "amount": "600",
                "currency_code": "MYR",
                "invoice_date": "2025-03-01",
                "allow_partial": True,
                "match_mode": "partial",
            }
        )

        assert line.line_id == "7"
        assert line.invoice_number == "INV-1"
        assert line.amount == Decimal("600")
        assert line.currency == "MYR"
        assert line.invoice_date == date(2025, 3, 1)
        assert line.allow_partial is True
        assert line.match_mode == MatchMode.PARTIAL

    def test_from_dict_defaults(self):
        """Test defaults for missing optional fields."""
        line = StatementLine.from_dict({"invoice_number": "INV-1", "amount": "10.00"})

        assert line.currency == "USD"
        assert line.invoice_date is None
        assert line.allow_partial is None
        assert line.match_mode is None
        assert line.line_id is None

    def test_from_dict_ignores_unknown_mode(self):
        """Test unknown match modes and non-boolean flags are dropped."""
        line = StatementLine.from_dict(
            {"invoice_number": "INV-1", "amount": "10", "match_mode": "bogus", "allow_partial": "yes"}
        )

        assert line.match_mode is None
        assert line.allow_partial is None

    def test_frozen(self, sample_line):
        """Test lines are immutable."""
        with pytest.raises(FrozenInstanceError):
            sample_line.amount = Decimal("1.00")

    def test_to_dict(self, sample_line):
        """Test serializing a line."""
        data = sample_line.to_dict()

        assert data["line_id"] == "SOA-LINE-1"
        assert data["amount"] == "1000.00"
        assert data["invoice_date"] == "2025-01-01"
        assert data["match_mode"] is None

    def test_canonical_invoice_default_currency(self):
        """Test invoice currency defaults to USD."""
        assert CanonicalInvoice(invoice_number="X", total_amount=Decimal("1")).currency == "USD"
