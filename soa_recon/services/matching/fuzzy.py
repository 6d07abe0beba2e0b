"""Fuzzy matching for statement lines."""

import logging
from decimal import Decimal

from soa_recon.models import CanonicalInvoice, StatementLine

from .confidence import ConfidenceScorer, MatchResult
from .normalize import normalize_doc_number
from .tolerance import ABSOLUTE_TOLERANCE, PERCENTAGE_TOLERANCE, amount_within_tolerance, amounts_equal

logger = logging.getLogger(__name__)


def fuzzy_doc_match(line: StatementLine, invoice: CanonicalInvoice) -> bool:
    """Document numbers equal once spacing and punctuation are stripped."""
    line_doc = normalize_doc_number(line.invoice_number)
    return bool(line_doc) and line_doc == normalize_doc_number(invoice.invoice_number)


class FuzzyDocMatcher:
    """Pass 3: normalized document number, confidence 0.90.

    Tolerates structural noise in the document number ("INV-001" vs
    "inv 001") but still requires exact amount and currency. Dates are not
    checked.
    """

    PASS_NUMBER = 3

    def __init__(self, scorer: ConfidenceScorer | None = None):
        self.scorer = scorer or ConfidenceScorer()

    def match(self, line: StatementLine, invoices: list[CanonicalInvoice]) -> MatchResult | None:
        """Return the first invoice whose normalized document matches."""
        for invoice in invoices:
            result = self._try_match(line, invoice)
            if result is not None:
                return result

        return None

    def _try_match(self, line: StatementLine, invoice: CanonicalInvoice) -> MatchResult | None:
        if not fuzzy_doc_match(line, invoice):
            return None
        if not amounts_equal(line.amount, invoice.total_amount):
            return None
        if line.currency != invoice.currency:
            return None

        logger.debug(f"Fuzzy document match: {line.invoice_number!r} -> {invoice.invoice_number!r}")
        return self.scorer.build_result(
            self.PASS_NUMBER,
            invoice,
            {
                "invoice_number": True,
                "amount": True,
                "currency": True,
                "date": False,
                "fuzzy_doc": True,
            },
        )


class AmountToleranceMatcher:
    """Pass 4: normalized document with amount drift, confidence 0.85.

    Amounts match when they differ by at most ``absolute_tolerance`` or by at
    most ``percentage_tolerance`` of their mean.
    """

    PASS_NUMBER = 4

    def __init__(
        self,
        absolute_tolerance: Decimal = ABSOLUTE_TOLERANCE,
        percentage_tolerance: Decimal = PERCENTAGE_TOLERANCE,
        scorer: ConfidenceScorer | None = None,
    ):
        self.absolute_tolerance = absolute_tolerance
        self.percentage_tolerance = percentage_tolerance
        self.scorer = scorer or ConfidenceScorer()

    def match(self, line: StatementLine, invoices: list[CanonicalInvoice]) -> MatchResult | None:
        """Return the first invoice within amount tolerance."""
        for invoice in invoices:
            result = self._try_match(line, invoice)
            if result is not None:
                return result

        return None

    def _try_match(self, line: StatementLine, invoice: CanonicalInvoice) -> MatchResult | None:
        if not fuzzy_doc_match(line, invoice):
            return None
        if line.currency != invoice.currency:
            return None
        if not amount_within_tolerance(
            line.amount,
            invoice.total_amount,
            self.absolute_tolerance,
            self.percentage_tolerance,
        ):
            return None

        amount_diff = abs(line.amount - invoice.total_amount)
        logger.debug(
            f"Amount tolerance match: {line.invoice_number!r} -> {invoice.invoice_number!r} "
            f"(diff {amount_diff})"
        )
        return self.scorer.build_result(
            self.PASS_NUMBER,
            invoice,
            {
                "invoice_number": True,
                "amount": True,
                "currency": True,
                "date": False,
                "amount_tolerance": amount_diff,
            },
        )
