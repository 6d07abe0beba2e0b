"""Services for statement reconciliation."""

from .invoices import InvoiceAPIError, InvoiceClient, InvoiceClientError, InvoiceSource
from .reconcile import BatchSummary, LineOutcome, MatchOrchestrator, MatchOutcome, resolve_partial_gate

__all__ = [
    "InvoiceClient",
    "InvoiceSource",
    "InvoiceClientError",
    "InvoiceAPIError",
    "MatchOrchestrator",
    "MatchOutcome",
    "LineOutcome",
    "BatchSummary",
    "resolve_partial_gate",
]
