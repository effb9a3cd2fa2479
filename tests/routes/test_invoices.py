"""
Tests for the /invoices endpoints.

Covers:
- Draft reconciliation and edits (no persistence)
- Confirmation (freezes the total, appends to the store)
- Listing and retrieval of confirmed invoices
- Error cases (malformed items, storage failures, unknown ids)
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from foodcost.main import app

client = TestClient(app)


@pytest.fixture
def draft_payload():
    """Draft as the capture collaborator sends it."""
    return {
        "vendor": "Fresh Foods Supplier",
        "invoice_date": "2026-10-19",
        "items": [
            {"id": "1", "name": "Organic Tomatoes", "quantity": 5, "unit": "kg", "unit_price": "12.50"},
            {"id": "2", "name": "Premium Olive Oil", "quantity": 2, "unit": "bottles", "unit_price": "28.00"},
            {"id": "3", "name": "Fresh Basil", "quantity": 3, "unit": "bunches", "unit_price": "8.75",
             "disposition": "returned"},
            {"id": "4", "name": "Mozzarella Cheese", "quantity": 1, "unit": "kg", "unit_price": "15.20",
             "disposition": "credited"},
        ],
    }


@pytest.fixture
def mock_get_supabase_client():
    """Mock get_supabase_client to return a fake client."""
    with patch("foodcost.routes.invoices.get_supabase_client") as mock:
        yield mock


class TestDraftReconcile:
    """POST /invoices/draft/reconcile"""

    def test_returns_line_totals_and_net_total(self, draft_payload, mock_get_supabase_client):
        response = client.post("/invoices/draft/reconcile", json=draft_payload)

        assert response.status_code == 200
        data = response.json()
        assert [Decimal(line["line_total"]) for line in data["items"]] == [
            Decimal("62.50"), Decimal("56.00"), Decimal("26.25"), Decimal("15.20"),
        ]
        # 62.50 + 56.00 - 15.20
        assert Decimal(data["net_total"]) == Decimal("103.30")
        mock_get_supabase_client.assert_not_called()

    def test_empty_draft_totals_zero(self):
        response = client.post(
            "/invoices/draft/reconcile",
            json={"vendor": "Acme", "invoice_date": "2026-10-19", "items": []},
        )

        assert response.status_code == 200
        assert Decimal(response.json()["net_total"]) == 0

    def test_negative_price_rejected(self, draft_payload):
        draft_payload["items"][0]["unit_price"] = "-1"

        response = client.post("/invoices/draft/reconcile", json=draft_payload)

        assert response.status_code == 422

    def test_duplicate_item_ids_rejected(self, draft_payload):
        draft_payload["items"][1]["id"] = "1"

        response = client.post("/invoices/draft/reconcile", json=draft_payload)

        assert response.status_code == 422


class TestDraftEdit:
    """POST /invoices/draft/edit"""

    def test_applies_edits_in_order(self, draft_payload):
        response = client.post(
            "/invoices/draft/edit",
            json={
                "draft": draft_payload,
                "edits": [
                    {"item_id": "1", "quantity_delta": "-10"},
                    {"item_id": "4", "disposition": "normal", "name": "Buffalo Mozzarella"},
                ],
            },
        )

        assert response.status_code == 200
        data = response.json()
        items = data["draft"]["items"]
        assert Decimal(items[0]["quantity"]) == 0
        assert items[3]["disposition"] == "normal"
        assert items[3]["name"] == "Buffalo Mozzarella"
        # 0 + 56.00 + 0 + 15.20
        assert Decimal(data["net_total"]) == Decimal("71.20")

    def test_unknown_item_returns_422_with_item_id(self, draft_payload):
        response = client.post(
            "/invoices/draft/edit",
            json={"draft": draft_payload, "edits": [{"item_id": "42", "disposition": "credited"}]},
        )

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["error"] == "invalid_line_item"
        assert detail["item_id"] == "42"

    def test_blank_name_rejected(self, draft_payload):
        response = client.post(
            "/invoices/draft/edit",
            json={"draft": draft_payload, "edits": [{"item_id": "2", "name": "  "}]},
        )

        assert response.status_code == 422
        assert response.json()["detail"]["item_id"] == "2"


class TestConfirmInvoice:
    """POST /invoices/confirm"""

    @patch("foodcost.routes.invoices.append_confirmed_invoice")
    def test_confirm_freezes_total_and_stores(
        self, mock_append, draft_payload, mock_get_supabase_client
    ):
        mock_append.side_effect = lambda supabase_client, invoice: invoice

        response = client.post("/invoices/confirm", json=draft_payload)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "CONFIRMED"
        assert Decimal(data["invoice"]["confirmed_total"]) == Decimal("103.30")
        assert data["invoice"]["vendor"] == "Fresh Foods Supplier"
        assert data["invoice"]["id"]

        mock_append.assert_called_once()
        stored_invoice = mock_append.call_args[0][1]
        assert stored_invoice.confirmed_total == Decimal("103.30")

    @patch("foodcost.routes.invoices.append_confirmed_invoice")
    def test_storage_failure_returns_500(self, mock_append, draft_payload, mock_get_supabase_client):
        mock_append.side_effect = Exception("connection reset")

        response = client.post("/invoices/confirm", json=draft_payload)

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "storage_error"

    @patch("foodcost.routes.invoices.append_confirmed_invoice")
    def test_missing_vendor_rejected(self, mock_append, draft_payload):
        del draft_payload["vendor"]

        response = client.post("/invoices/confirm", json=draft_payload)

        assert response.status_code == 422
        mock_append.assert_not_called()


class TestListInvoices:
    """GET /invoices and GET /invoices/{invoice_id}"""

    @patch("foodcost.routes.invoices.get_confirmed_invoices")
    def test_lists_most_recent_first_with_preview(
        self, mock_get_invoices, mock_get_supabase_client, make_invoice, make_item
    ):
        now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        items = [make_item(str(n), name=f"Item {n}") for n in range(1, 5)]
        mock_get_invoices.return_value = [
            make_invoice("Old", 5, now - timedelta(days=3), invoice_id="old"),
            make_invoice("New", 7, now, invoice_id="new", items=items),
        ]

        response = client.get("/invoices")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert [invoice["id"] for invoice in data["invoices"]] == ["new", "old"]
        assert data["invoices"][0]["item_names_preview"] == ["Item 1", "Item 2"]
        assert data["invoices"][0]["remaining_item_count"] == 2
        assert data["invoices"][1]["remaining_item_count"] == 0

    @patch("foodcost.routes.invoices.get_confirmed_invoices")
    def test_limit(self, mock_get_invoices, mock_get_supabase_client, make_invoice):
        now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
        mock_get_invoices.return_value = [
            make_invoice("V", n, now - timedelta(hours=n), invoice_id=str(n)) for n in range(5)
        ]

        response = client.get("/invoices", params={"limit": 2})

        assert response.status_code == 200
        assert [invoice["id"] for invoice in response.json()["invoices"]] == ["0", "1"]

    @patch("foodcost.routes.invoices.get_confirmed_invoice_by_id")
    def test_get_invoice_not_found(self, mock_get_by_id, mock_get_supabase_client):
        mock_get_by_id.return_value = None

        response = client.get("/invoices/does-not-exist")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "not_found"

    @patch("foodcost.routes.invoices.get_confirmed_invoice_by_id")
    def test_get_invoice(self, mock_get_by_id, mock_get_supabase_client, make_invoice):
        mock_get_by_id.return_value = make_invoice(
            "Acme", "42.10", datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc), invoice_id="inv-1"
        )

        response = client.get("/invoices/inv-1")

        assert response.status_code == 200
        assert Decimal(response.json()["confirmed_total"]) == Decimal("42.10")
