"""Confidence scoring for statement line matches."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from soa_recon.models import CanonicalInvoice


class MatchType(str, Enum):
    """Types of matches."""

    DETERMINISTIC = "deterministic"
    PROBABILISTIC = "probabilistic"


@dataclass
class MatchResult:
    """Result of a successful matching pass."""

    invoice: CanonicalInvoice
    match_type: MatchType
    confidence: Decimal
    match_score: int
    pass_number: int
    match_criteria: dict[str, Any] = field(default_factory=dict)
    partial_amount: Decimal | None = None
    remaining_amount: Decimal | None = None

    @property
    def is_exact_match(self) -> bool:
        """Whether the match passed the exact (deterministic) criteria."""
        return self.match_type == MatchType.DETERMINISTIC

    @property
    def recommended_action(self) -> str:
        """Downstream action suggested by the confidence level."""
        return ConfidenceScorer().get_action(self.confidence)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "invoice": self.invoice.to_dict(),
            "match_type": self.match_type.value,
            "is_exact_match": self.is_exact_match,
            "confidence": str(self.confidence),
            "match_score": self.match_score,
            "match_criteria": {
                key: str(value) if isinstance(value, Decimal) else value
                for key, value in self.match_criteria.items()
            },
            "pass": self.pass_number,
            "partial_amount": str(self.partial_amount) if self.partial_amount is not None else None,
            "remaining_amount": (
                str(self.remaining_amount) if self.remaining_amount is not None else None
            ),
            "recommended_action": self.recommended_action,
        }


class ConfidenceScorer:
    """Fixed per-pass confidence and the action ladder built on it."""

    # Confidence by pass; a later pass never scores higher than an earlier one
    PASS_CONFIDENCE: dict[int, Decimal] = {
        1: Decimal("1.00"),
        2: Decimal("0.95"),
        3: Decimal("0.90"),
        4: Decimal("0.85"),
        5: Decimal("0.75"),
    }

    # Thresholds
    THRESHOLDS = {
        "auto_approve": Decimal("0.95"),
        "suggest": Decimal("0.80"),
        "review": Decimal("0.60"),
        "manual": Decimal("0.00"),
    }

    def get_confidence(self, pass_number: int) -> Decimal:
        """Get confidence for the pass that produced a match."""
        try:
            return self.PASS_CONFIDENCE[pass_number]
        except KeyError:
            raise ValueError(f"Unknown matching pass: {pass_number}") from None

    def get_match_score(self, pass_number: int) -> int:
        """Integer 0-100 view of the pass confidence."""
        return int(self.get_confidence(pass_number) * 100)

    def get_match_type(self, pass_number: int) -> MatchType:
        """Only the first pass is deterministic."""
        return MatchType.DETERMINISTIC if pass_number == 1 else MatchType.PROBABILISTIC

    def build_result(
        self,
        pass_number: int,
        invoice: CanonicalInvoice,
        match_criteria: dict[str, Any],
        **extra: Any,
    ) -> MatchResult:
        """Build a MatchResult carrying the fixed score for ``pass_number``."""
        return MatchResult(
            invoice=invoice,
            match_type=self.get_match_type(pass_number),
            confidence=self.get_confidence(pass_number),
            match_score=self.get_match_score(pass_number),
            pass_number=pass_number,
            match_criteria=match_criteria,
            **extra,
        )

    def get_action(self, confidence: Decimal) -> str:
        """Determine action based on confidence score.

        Returns:
            One of: 'auto_approve', 'suggest', 'review', 'manual'
        """
        if confidence >= self.THRESHOLDS["auto_approve"]:
            return "auto_approve"
        elif confidence >= self.THRESHOLDS["suggest"]:
            return "suggest"
        elif confidence >= self.THRESHOLDS["review"]:
            return "review"
        else:
            return "manual"
