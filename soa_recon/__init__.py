"""Statement of Account matching engine."""

from .models import CanonicalInvoice, MatchMode, StatementLine, canonicalize_invoice
from .services import InvoiceClient, LineOutcome, MatchOrchestrator, MatchOutcome
from .services.matching import MatchResult, MatchType

__version__ = "1.0.0"

__all__ = [
    "StatementLine",
    "CanonicalInvoice",
    "MatchMode",
    "canonicalize_invoice",
    "MatchOrchestrator",
    "MatchOutcome",
    "LineOutcome",
    "MatchResult",
    "MatchType",
    "InvoiceClient",
]
