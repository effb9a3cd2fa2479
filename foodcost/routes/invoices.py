"""
Invoice draft and confirmation API endpoints.

Flow:
1. POST /invoices/draft/reconcile - Live totals for the draft returned by OCR (not persisted)
2. POST /invoices/draft/edit - Apply quantity/disposition/name edits (not persisted)
3. POST /invoices/confirm - Freeze the total and append the invoice to the collection
4. GET /invoices, GET /invoices/{invoice_id} - Read confirmed invoices back

The draft lives on the client between steps and is sent in full with every
request; the server keeps no in-progress invoice.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from foodcost.config import settings
from foodcost.db.client import get_supabase_client
from foodcost.errors import DataError
from foodcost.schemas.invoices import (
    ConfirmedInvoice,
    ConfirmedInvoiceSummary,
    DraftEditRequest,
    DraftReconciliationResponse,
    InvoiceConfirmResponse,
    InvoiceDraft,
    InvoiceListResponse,
    LineItemTotalResponse,
)
from foodcost.services import (
    append_confirmed_invoice,
    apply_item_edit,
    confirm_invoice,
    get_confirmed_invoice_by_id,
    get_confirmed_invoices,
    recent_invoices,
    reconcile_draft,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _invalid_item(exc: DataError) -> HTTPException:
    logger.warning(f"Rejected invoice data: {exc}")
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={
            "error": "invalid_line_item",
            "details": str(exc),
            "item_id": exc.item_id,
        }
    )


def _reconciliation_response(draft: InvoiceDraft) -> DraftReconciliationResponse:
    lines, net_total = reconcile_draft(draft)
    return DraftReconciliationResponse(
        draft=draft,
        items=[LineItemTotalResponse(item=item, line_total=total) for item, total in lines],
        net_total=net_total,
    )


@router.post(
    "/draft/reconcile",
    response_model=DraftReconciliationResponse,
    status_code=status.HTTP_200_OK,
    summary="Compute live totals for an invoice draft",
    description="""
    Returns each item's face-value subtotal and the draft's net total.

    Normal items add, credited items subtract and returned items count as zero.
    NEVER persists anything.
    """
)
async def reconcile_invoice_draft(draft: InvoiceDraft) -> DraftReconciliationResponse:
    """Preview the totals the operator will confirm."""
    try:
        return _reconciliation_response(draft)
    except DataError as e:
        raise _invalid_item(e)


@router.post(
    "/draft/edit",
    response_model=DraftReconciliationResponse,
    status_code=status.HTTP_200_OK,
    summary="Apply operator edits to an invoice draft",
    description="""
    Applies quantity adjustments (floored at 0), disposition changes and
    name corrections in order, then returns the new draft with its totals.
    NEVER persists anything.
    """
)
async def edit_invoice_draft(request: DraftEditRequest) -> DraftReconciliationResponse:
    """Apply edits one at a time; the first invalid edit rejects the batch."""
    draft = request.draft
    try:
        for edit in request.edits:
            draft = apply_item_edit(
                draft,
                edit.item_id,
                quantity_delta=edit.quantity_delta,
                disposition=edit.disposition,
                name=edit.name,
            )
        return _reconciliation_response(draft)
    except DataError as e:
        raise _invalid_item(e)


@router.post(
    "/confirm",
    response_model=InvoiceConfirmResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Confirm an invoice draft",
    description="""
    Freezes the draft's net total and appends the confirmed invoice to the
    collection. Confirmation is one-way: confirmed invoices are never edited.
    """
)
async def confirm_invoice_draft(draft: InvoiceDraft) -> InvoiceConfirmResponse:
    """
    Confirm and store a draft.

    Steps:
    1. Compute and freeze the net total (rejects malformed items with 422)
    2. Append the ConfirmedInvoice to Supabase (storage failures return 500)
    """
    try:
        confirmed = confirm_invoice(draft)
    except DataError as e:
        raise _invalid_item(e)

    supabase_client = get_supabase_client()

    try:
        stored = await append_confirmed_invoice(supabase_client, confirmed)
    except Exception as e:
        logger.error(f"Failed to store confirmed invoice {confirmed.id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": "storage_error",
                "details": "Could not save the confirmed invoice"
            }
        )

    return InvoiceConfirmResponse(
        invoice=stored,
        message="Invoice confirmed successfully",
    )


@router.get(
    "",
    response_model=InvoiceListResponse,
    summary="List recently confirmed invoices",
)
async def list_recent_invoices(
    limit: Annotated[int, Query(ge=1, le=100)] = settings.RECENT_INVOICES_LIMIT,
) -> InvoiceListResponse:
    """Most recently confirmed invoices first, with a two-item preview."""
    supabase_client = get_supabase_client()

    try:
        invoices = await get_confirmed_invoices(supabase_client)
    except Exception as e:
        logger.error(f"Failed to read confirmed invoices: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "storage_error", "details": "Could not read confirmed invoices"}
        )

    recent = recent_invoices(invoices, limit=limit)

    summaries = [
        ConfirmedInvoiceSummary(
            id=invoice.id,
            vendor=invoice.vendor,
            invoice_date=invoice.invoice_date,
            confirmed_total=invoice.confirmed_total,
            confirmed_at=invoice.confirmed_at,
            item_names_preview=[item.name for item in invoice.items[:2]],
            remaining_item_count=max(0, len(invoice.items) - 2),
        )
        for invoice in recent
    ]

    return InvoiceListResponse(invoices=summaries, count=len(summaries), limit=limit)


@router.get(
    "/{invoice_id}",
    response_model=ConfirmedInvoice,
    summary="Get one confirmed invoice",
)
async def get_invoice(invoice_id: str) -> ConfirmedInvoice:
    """Return a confirmed invoice, or 404 if it does not exist."""
    supabase_client = get_supabase_client()

    try:
        invoice = await get_confirmed_invoice_by_id(supabase_client, invoice_id)
    except Exception as e:
        logger.error(f"Failed to read confirmed invoice {invoice_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "storage_error", "details": "Could not read the confirmed invoice"}
        )

    if invoice is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "not_found", "details": f"Invoice {invoice_id} not found"}
        )

    return invoice
