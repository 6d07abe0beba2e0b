"""Partial (split payment) matching for statement lines."""

import logging

from soa_recon.models import CanonicalInvoice, StatementLine

from .confidence import ConfidenceScorer, MatchResult
from .fuzzy import fuzzy_doc_match

logger = logging.getLogger(__name__)


class PartialMatcher:
    """Pass 5: partial settlement of an invoice, confidence 0.75.

    The line covers part of an invoice: normalized document and currency
    match, and the line amount is positive and strictly below the invoice
    total. Only run when the caller opted in to partial matching.
    """

    PASS_NUMBER = 5

    def __init__(self, scorer: ConfidenceScorer | None = None):
        self.scorer = scorer or ConfidenceScorer()

    def match(self, line: StatementLine, invoices: list[CanonicalInvoice]) -> MatchResult | None:
        """Return the first invoice the line partially settles."""
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
        if line.amount is None or invoice.total_amount is None:
            return None
        if not (0 < line.amount < invoice.total_amount):
            return None

        remaining = invoice.total_amount - line.amount
        logger.debug(
            f"Partial match: {line.invoice_number!r} -> {invoice.invoice_number!r} "
            f"({line.amount} of {invoice.total_amount}, {remaining} remaining)"
        )
        return self.scorer.build_result(
            self.PASS_NUMBER,
            invoice,
            {
                "invoice_number": True,
                "amount": False,
                "currency": True,
                "date": False,
                "partial_match": True,
                "remaining_amount": remaining,
            },
            partial_amount=line.amount,
            remaining_amount=remaining,
        )
