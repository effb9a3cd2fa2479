"""
Confirmed invoice persistence service.

CRITICAL RULES:
1. The confirmed invoice table is append-only: rows are inserted, never updated
2. confirmed_total is stored as computed at confirmation; it is never recomputed
3. Reads return a full snapshot; ordering is applied by the analytics layer
"""

import logging
from typing import Any, Dict, List, Optional, cast

from pydantic import ValidationError
from supabase import Client

from foodcost.config import settings
from foodcost.errors import DataError
from foodcost.schemas.invoices import ConfirmedInvoice
from foodcost.utils.constants import STORE_PAGE_SIZE

logger = logging.getLogger(__name__)


def invoice_to_row(invoice: ConfirmedInvoice) -> Dict[str, Any]:
    """
    Serialize a confirmed invoice into a table row.

    Dates and timestamps become ISO-8601 strings, Decimals become strings
    and items are stored as a JSON array.
    """
    return invoice.model_dump(mode="json")


def row_to_invoice(row: Dict[str, Any]) -> ConfirmedInvoice:
    """
    Parse a table row back into a ConfirmedInvoice.

    Raises:
        DataError: If the stored row no longer matches the schema
    """
    try:
        return ConfirmedInvoice.model_validate(row)
    except ValidationError as exc:
        invoice_id = row.get("id")
        logger.error(f"Stored invoice {invoice_id} failed validation: {exc.error_count()} errors")
        raise DataError(
            "stored invoice is malformed",
            item_id=str(invoice_id) if invoice_id is not None else None,
        ) from exc


async def append_confirmed_invoice(
    supabase_client: Client,
    invoice: ConfirmedInvoice,
) -> ConfirmedInvoice:
    """
    Append a confirmed invoice to the collection.

    Args:
        supabase_client: Supabase client
        invoice: The frozen invoice returned by confirm_invoice()

    Returns:
        The stored invoice as read back from Supabase

    Raises:
        Exception: If the insert returns no rows
    """
    logger.info(
        f"Storing confirmed invoice {invoice.id}: "
        f"vendor='{invoice.vendor}', items={len(invoice.items)}"
    )

    result = (
        supabase_client.table(settings.CONFIRMED_INVOICE_TABLE)
        .insert(invoice_to_row(invoice))
        .execute()
    )

    if not result.data or len(result.data) == 0:
        raise Exception("Failed to store confirmed invoice: no data returned")

    stored = row_to_invoice(cast(Dict[str, Any], result.data[0]))

    logger.info(f"Confirmed invoice stored successfully: id={stored.id}")

    return stored


async def get_confirmed_invoices(
    supabase_client: Client,
    page_size: int = STORE_PAGE_SIZE,
) -> List[ConfirmedInvoice]:
    """
    Read the full confirmed invoice collection.

    Pages through the table with .range() until a short page is returned.
    Rows are ordered by (confirmed_at, id) so concurrent appends land after
    the pages already read instead of shifting rows across a page boundary.

    Args:
        supabase_client: Supabase client
        page_size: Rows fetched per request

    Returns:
        Every stored invoice, oldest confirmation first

    Raises:
        DataError: If a stored row is malformed
    """
    invoices: List[ConfirmedInvoice] = []
    offset = 0

    while True:
        result = (
            supabase_client.table(settings.CONFIRMED_INVOICE_TABLE)
            .select("*")
            .order("confirmed_at")
            .order("id")
            .range(offset, offset + page_size - 1)
            .execute()
        )
        rows = cast(List[Dict[str, Any]], result.data or [])
        invoices.extend(row_to_invoice(row) for row in rows)

        if len(rows) < page_size:
            break
        offset += page_size

    logger.info(f"Fetched {len(invoices)} confirmed invoices")

    return invoices


async def get_confirmed_invoice_by_id(
    supabase_client: Client,
    invoice_id: str,
) -> Optional[ConfirmedInvoice]:
    """
    Fetch a single confirmed invoice by its ID.

    Returns:
        The invoice if found, None otherwise
    """
    logger.debug(f"Fetching confirmed invoice {invoice_id}")

    result = (
        supabase_client.table(settings.CONFIRMED_INVOICE_TABLE)
        .select("*")
        .eq("id", invoice_id)
        .execute()
    )

    if not result.data or len(result.data) == 0:
        logger.warning(f"Confirmed invoice {invoice_id} not found")
        return None

    return row_to_invoice(cast(Dict[str, Any], result.data[0]))
