"""Statement matching orchestrator - pass pipeline and batch runs."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from soa_recon.config import settings
from soa_recon.models import CanonicalInvoice, MatchMode, StatementLine, canonicalize_invoice
from soa_recon.services.invoices import InvoiceSource
from soa_recon.services.matching import (
    AmountToleranceMatcher,
    ConfidenceScorer,
    DateToleranceMatcher,
    ExactMatcher,
    FuzzyDocMatcher,
    MatchResult,
    PartialMatcher,
)

logger = logging.getLogger(__name__)

REASON_NO_INVOICES = "no invoices available for matching"
REASON_NO_MATCH = "no match found after all passes"
REASON_ERROR = "error during matching"
REASON_PARTIAL = "partial match found"


@dataclass
class MatchOutcome:
    """Outcome of matching one statement line."""

    match: MatchResult | None
    pass_number: int
    reason: str

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "match": self.match.to_dict() if self.match else None,
            "pass": self.pass_number,
            "reason": self.reason,
        }


@dataclass
class LineOutcome(MatchOutcome):
    """Batch entry: the outcome plus the line it belongs to."""

    line: StatementLine | Mapping[str, Any] | None = None
    error: str | None = None

    @property
    def line_id(self) -> str | None:
        if isinstance(self.line, StatementLine):
            return self.line.line_id
        if isinstance(self.line, Mapping):
            line_id = self.line.get("line_id", self.line.get("id"))
            return str(line_id) if line_id is not None else None
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        data = super().to_dict()
        data["line_id"] = self.line_id
        data["line"] = self.line.to_dict() if isinstance(self.line, StatementLine) else self.line
        data["error"] = self.error
        return data


@dataclass
class BatchSummary:
    """Statistics for a batch matching run."""

    vendor_id: str
    company_id: str | None
    lines_processed: int = 0
    matches_by_pass: dict[int, int] = field(default_factory=dict)
    unmatched: int = 0
    auto_approved: int = 0
    errors: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def matched(self) -> int:
        return sum(self.matches_by_pass.values())


def resolve_partial_gate(line: StatementLine, allow_partial: bool | None = None) -> bool:
    """Collapse the partial-match opt-in flags into one decision.

    Partial matching is enabled by the caller's ``allow_partial`` option, by
    ``line.allow_partial``, or by ``line.match_mode == MatchMode.PARTIAL``.
    """
    if allow_partial is True:
        return True
    if line.allow_partial is True:
        return True
    return line.match_mode == MatchMode.PARTIAL


class MatchOrchestrator:
    """Matches statement lines against candidate invoices.

    Flow per line:
    1. Fetch candidate invoices for the vendor/company scope
    2. Canonicalize invoice records
    3. Run passes in priority order (exact -> date tolerance -> fuzzy doc ->
       amount tolerance -> partial), stopping at the first match
    """

    def __init__(
        self,
        invoice_source: InvoiceSource,
        statuses: list[str] | None = None,
        date_tolerance_days: int | None = None,
        amount_tolerance_absolute: Decimal | None = None,
        amount_tolerance_percent: Decimal | None = None,
        share_invoice_pool: bool | None = None,
    ):
        """Initialize orchestrator.

        Args:
            invoice_source: Collaborator supplying candidate invoices
            statuses: Invoice statuses to request (defaults from settings)
            date_tolerance_days: Pass 2 day window (defaults from settings)
            amount_tolerance_absolute: Pass 4 absolute tolerance
            amount_tolerance_percent: Pass 4 relative tolerance (0.005 = 0.5%)
            share_invoice_pool: Fetch once per batch instead of once per line
        """
        self.invoice_source = invoice_source
        self.statuses = list(statuses if statuses is not None else settings.candidate_statuses)
        self.share_invoice_pool = (
            settings.share_invoice_pool if share_invoice_pool is None else share_invoice_pool
        )

        self.confidence_scorer = ConfidenceScorer()
        self.passes: list[tuple[Any, str]] = [
            (ExactMatcher(self.confidence_scorer), "exact match found"),
            (
                DateToleranceMatcher(
                    max_date_diff_days=(
                        settings.date_tolerance_days
                        if date_tolerance_days is None
                        else date_tolerance_days
                    ),
                    scorer=self.confidence_scorer,
                ),
                "date tolerance match found",
            ),
            (FuzzyDocMatcher(self.confidence_scorer), "fuzzy document match found"),
            (
                AmountToleranceMatcher(
                    absolute_tolerance=(
                        settings.amount_tolerance_absolute
                        if amount_tolerance_absolute is None
                        else amount_tolerance_absolute
                    ),
                    percentage_tolerance=(
                        settings.amount_tolerance_percent
                        if amount_tolerance_percent is None
                        else amount_tolerance_percent
                    ),
                    scorer=self.confidence_scorer,
                ),
                "amount tolerance match found",
            ),
        ]
        self.partial_matcher = PartialMatcher(self.confidence_scorer)

    def run_passes(
        self,
        line: StatementLine,
        invoices: Iterable[Mapping[str, Any] | CanonicalInvoice],
        allow_partial: bool = False,
    ) -> MatchOutcome:
        """Run the pass pipeline for one line over an in-memory invoice pool.

        Pure and synchronous; the first pass with a qualifying invoice wins.
        """
        candidates = [canonicalize_invoice(invoice) for invoice in invoices or []]
        if not candidates:
            return MatchOutcome(match=None, pass_number=0, reason=REASON_NO_INVOICES)

        for matcher, reason in self.passes:
            match = matcher.match(line, candidates)
            if match is not None:
                logger.info(f"Line {_describe(line)}: pass {match.pass_number} - {reason}")
                return MatchOutcome(match=match, pass_number=match.pass_number, reason=reason)

        if allow_partial:
            match = self.partial_matcher.match(line, candidates)
            if match is not None:
                logger.info(f"Line {_describe(line)}: pass {match.pass_number} - {REASON_PARTIAL}")
                return MatchOutcome(match=match, pass_number=match.pass_number, reason=REASON_PARTIAL)

        logger.debug(f"Line {_describe(line)}: {REASON_NO_MATCH} ({len(candidates)} candidates)")
        return MatchOutcome(match=None, pass_number=0, reason=REASON_NO_MATCH)

    async def fetch_candidates(
        self,
        vendor_id: str,
        company_id: str | None = None,
    ) -> list[CanonicalInvoice]:
        """Fetch and canonicalize candidate invoices for a scope."""
        try:
            invoices = await self.invoice_source.get_invoices(vendor_id, company_id, self.statuses)
        except Exception as e:
            logger.error(
                f"Invoice fetch failed (vendor={vendor_id}, company={company_id}, "
                f"statuses={self.statuses}): {e}"
            )
            raise

        return [canonicalize_invoice(invoice) for invoice in invoices or []]

    async def match_line(
        self,
        line: StatementLine | Mapping[str, Any],
        vendor_id: str,
        company_id: str | None = None,
        allow_partial: bool | None = None,
    ) -> MatchOutcome:
        """Match a single statement line.

        Args:
            line: Statement line (or raw line record)
            vendor_id: Vendor that issued the statement
            company_id: Optional company scope
            allow_partial: Enable partial matching for this call

        Returns:
            MatchOutcome with the match (or None), pass number and reason

        Raises:
            Whatever the invoice source raises when the fetch fails
        """
        line = _coerce_line(line)
        partial_enabled = resolve_partial_gate(line, allow_partial)
        invoices = await self.fetch_candidates(vendor_id, company_id)
        return self.run_passes(line, invoices, allow_partial=partial_enabled)

    async def match_lines(
        self,
        lines: Iterable[StatementLine | Mapping[str, Any]],
        vendor_id: str,
        company_id: str | None = None,
        allow_partial: bool | None = None,
    ) -> list[LineOutcome]:
        """Match a batch of statement lines in order.

        One failing line never aborts the batch: its entry records the error
        and matching continues with the next line. With a shared pool, the
        candidate fetch is reused once it succeeds; a failed fetch is retried
        by the next line.
        """
        results: list[LineOutcome] = []
        pool: list[CanonicalInvoice] | None = None

        for raw_line in lines:
            try:
                line = _coerce_line(raw_line)
                if self.share_invoice_pool:
                    if pool is None:
                        pool = await self.fetch_candidates(vendor_id, company_id)
                    outcome = self.run_passes(
                        line, pool, allow_partial=resolve_partial_gate(line, allow_partial)
                    )
                else:
                    outcome = await self.match_line(line, vendor_id, company_id, allow_partial)

                results.append(
                    LineOutcome(
                        match=outcome.match,
                        pass_number=outcome.pass_number,
                        reason=outcome.reason,
                        line=raw_line,
                    )
                )
            except Exception as e:
                entry = LineOutcome(
                    match=None,
                    pass_number=0,
                    reason=REASON_ERROR,
                    line=raw_line,
                    error=str(e),
                )
                logger.error(f"match_lines: error matching line {entry.line_id}: {e}")
                results.append(entry)

        return results

    async def match_lines_with_summary(
        self,
        lines: Iterable[StatementLine | Mapping[str, Any]],
        vendor_id: str,
        company_id: str | None = None,
        allow_partial: bool | None = None,
    ) -> tuple[list[LineOutcome], BatchSummary]:
        """Match a batch and collect run statistics."""
        start_time = datetime.now(UTC)
        summary = BatchSummary(vendor_id=vendor_id, company_id=company_id)

        logger.info(f"Matching statement lines for vendor {vendor_id}")
        results = await self.match_lines(lines, vendor_id, company_id, allow_partial)

        for entry in results:
            summary.lines_processed += 1
            if entry.error is not None:
                summary.errors.append(f"{entry.line_id}: {entry.error}")
            elif entry.match is None:
                summary.unmatched += 1
            else:
                summary.matches_by_pass[entry.pass_number] = (
                    summary.matches_by_pass.get(entry.pass_number, 0) + 1
                )
                if entry.match.recommended_action == "auto_approve":
                    summary.auto_approved += 1

        summary.duration_seconds = (datetime.now(UTC) - start_time).total_seconds()
        logger.info(
            f"Matched {summary.matched}/{summary.lines_processed} lines for vendor {vendor_id} "
            f"({summary.unmatched} unmatched, {len(summary.errors)} errors)"
        )
        return results, summary


def _coerce_line(line: StatementLine | Mapping[str, Any]) -> StatementLine:
    if isinstance(line, StatementLine):
        return line
    return StatementLine.from_dict(line)


def _describe(line: StatementLine) -> str:
    return line.line_id or repr(line.invoice_number)
