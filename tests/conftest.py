"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from soa_recon.models import StatementLine, canonicalize_invoice
from soa_recon.services.reconcile import MatchOrchestrator


@pytest.fixture
def sample_line():
    """Create a sample statement line."""
    return StatementLine(
        invoice_number="INV-001",
        amount=Decimal("1000.00"),
        currency="USD",
        invoice_date=date(2025, 1, 1),
        line_id="SOA-LINE-1",
    )


@pytest.fixture
def sample_invoice_record():
    """Create a raw invoice record as the data store returns it."""
    return {
        "id": "inv-1",
        "invoice_number": "INV-001",
        "total_amount": "1000.00",
        "currency": "USD",
        "invoice_date": "2025-01-01",
        "status": "pending",
    }


@pytest.fixture
def sample_invoice(sample_invoice_record):
    """Create a canonical invoice."""
    return canonicalize_invoice(sample_invoice_record)


@pytest.fixture
def invoice_source(sample_invoice_record):
    """Invoice source returning the sample invoice."""
    source = AsyncMock()
    source.get_invoices.return_value = [sample_invoice_record]
    return source


@pytest.fixture
def orchestrator(invoice_source):
    """Create orchestrator with explicit contract tolerances."""
    return MatchOrchestrator(
        invoice_source,
        statuses=["pending", "approved", "paid"],
        date_tolerance_days=7,
        amount_tolerance_absolute=Decimal("1.00"),
        amount_tolerance_percent=Decimal("0.005"),
        share_invoice_pool=True,
    )
