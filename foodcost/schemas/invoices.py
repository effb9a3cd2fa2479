"""
Pydantic schemas for invoice drafts, confirmed invoices and their endpoints.

Money and quantities are Decimal so that totals are exactly reproducible.
Decimals serialize to JSON as strings.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

# Final fate of a line item (matches DISPOSITIONS in utils.constants)
Disposition = Literal["normal", "credited", "returned"]


# --- Item models ---

class LineItem(BaseModel):
    """
    A single line of a supplier invoice.

    Items are frozen: quantity, name and disposition edits return a copy
    (see foodcost.services.reconciliation).
    """
    id: str = Field(..., min_length=1, description="Item identifier, unique within one draft")
    name: str = Field(..., description="Free-text description", examples=["Organic Tomatoes"])
    quantity: Decimal = Field(..., ge=0, description="Quantity received", examples=["5"])
    unit: str = Field(
        default="",
        description="Unit-of-measure label (not interpreted)",
        examples=["kg", "bottles"]
    )
    unit_price: Decimal = Field(..., ge=0, description="Price per unit", examples=["12.50"])
    disposition: Disposition = Field(
        default="normal",
        description="normal (counted), credited (subtracted) or returned (excluded)"
    )

    model_config = {
        "frozen": True,
        "str_strip_whitespace": True,
    }


class InvoiceDraft(BaseModel):
    """
    Working copy of an invoice between capture and confirmation.

    The draft is passed explicitly from the capture step to the
    confirmation step; there is never more than one in flight per operator.
    """
    vendor: str = Field(..., min_length=1, description="Supplier name", examples=["Fresh Foods Supplier"])
    invoice_date: date = Field(..., description="Date printed on the invoice", examples=["2026-10-19"])
    items: List[LineItem] = Field(default_factory=list, description="Line items in display order")

    model_config = {
        "frozen": True,
    }

    @model_validator(mode="after")
    def validate_unique_item_ids(self):
        """Item ids address edits, so they must be unique within the draft."""
        seen = set()
        for item in self.items:
            if item.id in seen:
                raise ValueError(f"duplicate line item id: {item.id}")
            seen.add(item.id)
        return self


class ConfirmedInvoice(BaseModel):
    """
    Immutable, finalized invoice with a frozen total.

    Created once by confirm_invoice(); never edited afterwards.
    """
    id: str = Field(..., description="Invoice UUID (never reused)")
    vendor: str = Field(..., description="Supplier name")
    invoice_date: date = Field(..., description="Date printed on the invoice")
    items: Tuple[LineItem, ...] = Field(..., description="Line items with final dispositions")
    confirmed_total: Decimal = Field(..., description="Net total frozen at confirmation time")
    confirmed_at: datetime = Field(..., description="ISO-8601 timestamp of confirmation")

    model_config = {"frozen": True}


# --- Draft endpoint models ---

class ItemEdit(BaseModel):
    """
    One operator edit to a draft item.

    Any combination of fields may be given; omitted fields are left alone.
    """
    item_id: str = Field(..., min_length=1, description="Id of the item to edit")
    quantity_delta: Optional[Decimal] = Field(
        None,
        description="Amount added to the quantity (negative to decrease, floored at 0)",
        examples=["1", "-1"]
    )
    disposition: Optional[Disposition] = Field(None, description="New disposition")
    name: Optional[str] = Field(None, description="Corrected item description")


class DraftEditRequest(BaseModel):
    """Request to apply a batch of edits to a draft, in order."""
    draft: InvoiceDraft
    edits: List[ItemEdit] = Field(..., min_length=1)


class LineItemTotalResponse(BaseModel):
    """A draft item together with its face-value subtotal."""
    item: LineItem
    line_total: Decimal = Field(..., description="quantity x unit_price, regardless of disposition")


class DraftReconciliationResponse(BaseModel):
    """Live totals for a draft, shown on the confirmation screen."""
    draft: InvoiceDraft
    items: List[LineItemTotalResponse]
    net_total: Decimal = Field(..., description="Amount owed after credits and returns")


class InvoiceConfirmResponse(BaseModel):
    """Response after a draft has been confirmed and stored."""
    status: Literal["CONFIRMED"] = Field(
        "CONFIRMED",
        description="Indicates the invoice was frozen and appended to the collection"
    )
    invoice: ConfirmedInvoice
    message: str = Field(..., examples=["Invoice confirmed successfully"])


# --- Retrieval endpoint models ---

class ConfirmedInvoiceSummary(BaseModel):
    """Row of the recent invoices table."""
    id: str
    vendor: str
    invoice_date: date
    confirmed_total: Decimal
    confirmed_at: datetime
    item_names_preview: List[str] = Field(..., description="Names of the first two items")
    remaining_item_count: int = Field(..., ge=0, description="Items not shown in the preview")


class InvoiceListResponse(BaseModel):
    """Response for GET /invoices - most recently confirmed first."""
    invoices: List[ConfirmedInvoiceSummary]
    count: int = Field(..., description="Number of invoices returned")
    limit: int = Field(..., description="Limit used")
