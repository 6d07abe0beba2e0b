"""Exact matching for statement lines."""

import logging

from soa_recon.models import CanonicalInvoice, StatementLine

from .confidence import ConfidenceScorer, MatchResult
from .normalize import exact_doc_key
from .tolerance import amounts_equal, date_difference_days

logger = logging.getLogger(__name__)


def exact_fields_match(line: StatementLine, invoice: CanonicalInvoice) -> bool:
    """Document (case/padding-insensitive), amount and currency all exact."""
    line_doc = exact_doc_key(line.invoice_number)
    if not line_doc or line_doc != exact_doc_key(invoice.invoice_number):
        return False
    if not amounts_equal(line.amount, invoice.total_amount):
        return False
    return line.currency == invoice.currency


class ExactMatcher:
    """Pass 1: exact match with confidence 1.00.

    - Document number equal after trim + uppercase
    - Amount equal to the cent
    - Currency equal
    - Same calendar day, when both sides carry a date
    """

    PASS_NUMBER = 1

    def __init__(self, scorer: ConfidenceScorer | None = None):
        self.scorer = scorer or ConfidenceScorer()

    def match(self, line: StatementLine, invoices: list[CanonicalInvoice]) -> MatchResult | None:
        """Return the first invoice that matches the line exactly."""
        for invoice in invoices:
            result = self._try_match(line, invoice)
            if result is not None:
                return result

        return None

    def _try_match(self, line: StatementLine, invoice: CanonicalInvoice) -> MatchResult | None:
        if not exact_fields_match(line, invoice):
            return None

        have_both_dates = line.invoice_date is not None and invoice.invoice_date is not None
        if have_both_dates and line.invoice_date != invoice.invoice_date:
            return None

        logger.debug(f"Exact match: {line.invoice_number} -> {invoice.invoice_number}")
        return self.scorer.build_result(
            self.PASS_NUMBER,
            invoice,
            {
                "invoice_number": True,
                "amount": True,
                "currency": True,
                "date": have_both_dates,
            },
        )


class DateToleranceMatcher:
    """Pass 2: exact match with date drift, confidence 0.95.

    Same document, amount and currency rules as Pass 1, but both dates must be
    present and no more than ``max_date_diff_days`` apart.
    """

    PASS_NUMBER = 2

    # Maximum date difference
    MAX_DATE_DIFF_DAYS = 7

    def __init__(
        self,
        max_date_diff_days: int = MAX_DATE_DIFF_DAYS,
        scorer: ConfidenceScorer | None = None,
    ):
        self.max_date_diff_days = max_date_diff_days
        self.scorer = scorer or ConfidenceScorer()

    def match(self, line: StatementLine, invoices: list[CanonicalInvoice]) -> MatchResult | None:
        """Return the first invoice that matches within the date window."""
        for invoice in invoices:
            result = self._try_match(line, invoice)
            if result is not None:
                return result

        return None

    def _try_match(self, line: StatementLine, invoice: CanonicalInvoice) -> MatchResult | None:
        if not exact_fields_match(line, invoice):
            return None

        diff = date_difference_days(line.invoice_date, invoice.invoice_date)
        if diff is None or diff > self.max_date_diff_days:
            return None

        logger.debug(
            f"Date tolerance match: {line.invoice_number} -> {invoice.invoice_number} "
            f"({diff} days)"
        )
        return self.scorer.build_result(
            self.PASS_NUMBER,
            invoice,
            {
                "invoice_number": True,
                "amount": True,
                "currency": True,
                "date": True,
                "date_tolerance_days": diff,
            },
        )
