"""
Pytest configuration for Food Cost backend tests.

Sets up test environment and global fixtures.
"""
import os
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from unittest.mock import MagicMock

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")
os.environ.setdefault("LOCAL_TIMEZONE", "UTC")

from foodcost.schemas.invoices import ConfirmedInvoice, InvoiceDraft, LineItem  # noqa: E402


@pytest.fixture
def supabase_client():
    """
    Mock Supabase client for testing the invoice store.
    Returns a MagicMock that simulates Supabase client behavior.
    """
    mock_client = MagicMock()
    return mock_client


@pytest.fixture
def today():
    """Fixed 'today' so window arithmetic is reproducible."""
    return date(2026, 10, 19)


def _make_item(item_id="1", quantity="1", unit_price="10.00", disposition="normal", name=None):
    return LineItem(
        id=item_id,
        name=name or f"Item {item_id}",
        quantity=Decimal(quantity),
        unit="kg",
        unit_price=Decimal(unit_price),
        disposition=disposition,
    )


def _make_invoice(vendor, total, confirmed_at, invoice_id=None, items=()):
    return ConfirmedInvoice(
        id=invoice_id or f"inv-{vendor}-{confirmed_at.isoformat()}-{total}",
        vendor=vendor,
        invoice_date=confirmed_at.date(),
        items=tuple(items),
        confirmed_total=Decimal(str(total)),
        confirmed_at=confirmed_at,
    )


def _at_noon(day):
    """UTC noon on a calendar day."""
    return datetime(day.year, day.month, day.day, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_item():
    """Factory for frozen LineItem values."""
    return _make_item


@pytest.fixture
def make_invoice():
    """Factory for ConfirmedInvoice values with an explicit total."""
    return _make_invoice


@pytest.fixture
def at_noon():
    """Factory for UTC noon timestamps on a given day."""
    return _at_noon


@pytest.fixture
def sample_draft():
    """The draft the capture screen produces for a typical produce delivery."""
    return InvoiceDraft(
        vendor="Fresh Foods Supplier",
        invoice_date=date(2026, 10, 19),
        items=[
            _make_item("1", "5", "12.50", name="Organic Tomatoes"),
            _make_item("2", "2", "28.00", name="Premium Olive Oil"),
            _make_item("3", "3", "8.75", name="Fresh Basil"),
            _make_item("4", "1", "15.20", name="Mozzarella Cheese"),
        ],
    )
