"""Statement line matching engine."""

from .confidence import ConfidenceScorer, MatchResult, MatchType
from .exact import DateToleranceMatcher, ExactMatcher
from .fuzzy import AmountToleranceMatcher, FuzzyDocMatcher
from .normalize import exact_doc_key, normalize_doc_number
from .partial import PartialMatcher
from .tolerance import amount_within_tolerance, amounts_equal, date_difference_days, to_minor_units

__all__ = [
    "ExactMatcher",
    "DateToleranceMatcher",
    "FuzzyDocMatcher",
    "AmountToleranceMatcher",
    "PartialMatcher",
    "ConfidenceScorer",
    "MatchResult",
    "MatchType",
    "normalize_doc_number",
    "exact_doc_key",
    "date_difference_days",
    "amount_within_tolerance",
    "amounts_equal",
    "to_minor_units",
]
