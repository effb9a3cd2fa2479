"""
Invoice reconciliation engine.

Pure, synchronous arithmetic over line items. No I/O.

DISPOSITION RULES:
1. line_total is always quantity x unit_price (the face value shown to the operator)
2. normal items add their line total to the net amount owed
3. credited items subtract their line total (a vendor credit)
4. returned items contribute nothing; the vendor nets the return separately
5. A malformed item raises DataError; it never collapses to a zero contribution
"""

import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from foodcost.errors import DataError
from foodcost.schemas.invoices import ConfirmedInvoice, InvoiceDraft, LineItem
from foodcost.utils.constants import CENT, DISPOSITIONS
from foodcost.utils.logging import get_logger

logger = get_logger(__name__)

_SIGN = {
    "normal": 1,
    "credited": -1,
    "returned": 0,
}


def _checked_amount(value: Any, field: str, item_id: Optional[str]) -> Decimal:
    if value is None:
        raise DataError(f"line item is missing {field}", item_id=item_id)
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, float, str)):
        raise DataError(f"line item {field} is not numeric", item_id=item_id)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as exc:
        raise DataError(f"line item {field} is not numeric", item_id=item_id) from exc
    if not amount.is_finite():
        raise DataError(f"line item {field} is not finite", item_id=item_id)
    if amount < 0:
        raise DataError(f"line item {field} is negative", item_id=item_id)
    return amount


def _checked_item(item: LineItem) -> Tuple[Decimal, Decimal]:
    """Return (quantity, unit_price) after validating them, or raise DataError."""
    item_id = getattr(item, "id", None)
    quantity = _checked_amount(getattr(item, "quantity", None), "quantity", item_id)
    unit_price = _checked_amount(getattr(item, "unit_price", None), "unit_price", item_id)
    if getattr(item, "disposition", None) not in DISPOSITIONS:
        raise DataError(
            f"unknown disposition {getattr(item, 'disposition', None)!r}",
            item_id=item_id,
        )
    return quantity, unit_price


def quantize_money(amount: Decimal) -> Decimal:
    """Round an amount to cents (ROUND_HALF_UP)."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(item: LineItem) -> Decimal:
    """
    Face-value subtotal of one item: quantity x unit_price.

    Disposition does not affect this figure.

    Raises:
        DataError: If quantity or unit_price is missing, negative or non-finite
    """
    quantity, unit_price = _checked_item(item)
    return quantity * unit_price


def invoice_total(items: Iterable[LineItem]) -> Decimal:
    """
    Net amount owed for a set of items under the disposition rules.

    The result is a plain sum, so item order never changes it. An empty
    set of items totals to 0.

    Raises:
        DataError: If any item is malformed (names the offending item id)
    """
    total = Decimal("0")
    for item in items:
        amount = line_total(item)
        total += _SIGN[item.disposition] * amount
    return total


def update_quantity(item: LineItem, delta: Decimal) -> LineItem:
    """
    Return a copy of item with quantity adjusted by delta, floored at 0.

    Disposition and price are untouched; a returned item keeps its quantity
    for display even though it contributes nothing to the total.
    """
    quantity, _ = _checked_item(item)
    if isinstance(delta, bool) or not isinstance(delta, (Decimal, int, float, str)):
        raise DataError("quantity delta is not numeric", item_id=item.id)
    try:
        delta = delta if isinstance(delta, Decimal) else Decimal(str(delta))
    except InvalidOperation as exc:
        raise DataError("quantity delta is not numeric", item_id=item.id) from exc
    if not delta.is_finite():
        raise DataError("quantity delta is not finite", item_id=item.id)

    new_quantity = max(Decimal("0"), quantity + delta)
    return item.model_copy(update={"quantity": new_quantity})


def set_disposition(item: LineItem, disposition: str) -> LineItem:
    """Return a copy of item with a new disposition."""
    if disposition not in DISPOSITIONS:
        raise DataError(f"unknown disposition {disposition!r}", item_id=item.id)
    return item.model_copy(update={"disposition": disposition})


def rename_item(item: LineItem, name: str) -> LineItem:
    """Return a copy of item with a corrected description."""
    name = (name or "").strip()
    if not name:
        raise DataError("line item name cannot be blank", item_id=item.id)
    return item.model_copy(update={"name": name})


def apply_item_edit(
    draft: InvoiceDraft,
    item_id: str,
    *,
    quantity_delta: Optional[Decimal] = None,
    disposition: Optional[str] = None,
    name: Optional[str] = None,
) -> InvoiceDraft:
    """
    Apply one operator edit to a draft item and return the new draft.

    The edits are independent: a quantity change leaves the disposition
    alone and vice versa.

    Raises:
        DataError: If item_id is not in the draft, or the edit is invalid
    """
    items: List[LineItem] = []
    found = False
    for item in draft.items:
        if item.id == item_id:
            found = True
            if quantity_delta is not None:
                item = update_quantity(item, quantity_delta)
            if disposition is not None:
                item = set_disposition(item, disposition)
            if name is not None:
                item = rename_item(item, name)
        items.append(item)

    if not found:
        raise DataError("line item not found in draft", item_id=item_id)

    return draft.model_copy(update={"items": items})


def reconcile_draft(draft: InvoiceDraft) -> Tuple[List[Tuple[LineItem, Decimal]], Decimal]:
    """
    Compute the confirmation screen's live figures.

    Returns:
        Tuple of ([(item, line_total), ...] in draft order, net total)
    """
    lines = [(item, line_total(item)) for item in draft.items]
    return lines, invoice_total(draft.items)


def coerce_line_item(raw: Mapping[str, Any]) -> LineItem:
    """
    Build a LineItem from a raw mapping produced by the OCR collaborator.

    Accepts numeric ids and either "unit_price" or "price" for the price.
    A missing disposition means "normal".

    Raises:
        DataError: If a required field is missing or invalid (names the item id)
    """
    item_id = raw.get("id")
    item_id = str(item_id) if item_id is not None else None
    if not item_id:
        raise DataError("line item is missing id")

    unit_price = raw.get("unit_price", raw.get("price"))
    quantity = _checked_amount(raw.get("quantity"), "quantity", item_id)
    unit_price = _checked_amount(unit_price, "unit_price", item_id)

    try:
        return LineItem(
            id=item_id,
            name=raw.get("name") or "",
            quantity=quantity,
            unit=raw.get("unit") or "",
            unit_price=unit_price,
            disposition=raw.get("disposition") or raw.get("status") or "normal",
        )
    except ValidationError as exc:
        raise DataError(f"invalid line item: {exc.errors()[0]['msg']}", item_id=item_id) from exc


def confirm_invoice(draft: InvoiceDraft, confirmed_at: Optional[datetime] = None) -> ConfirmedInvoice:
    """
    Freeze a draft into an immutable ConfirmedInvoice.

    The net total is computed once, rounded to cents and stored; it is never
    recomputed from the items afterwards.

    Args:
        draft: The operator's final draft
        confirmed_at: Confirmation timestamp (defaults to now, UTC)

    Returns:
        A new ConfirmedInvoice with a fresh UUID

    Raises:
        DataError: If any item is malformed
    """
    total = quantize_money(invoice_total(draft.items))
    if confirmed_at is None:
        confirmed_at = datetime.now(timezone.utc)

    confirmed = ConfirmedInvoice(
        id=str(uuid.uuid4()),
        vendor=draft.vendor,
        invoice_date=draft.invoice_date,
        items=tuple(draft.items),
        confirmed_total=total,
        confirmed_at=confirmed_at,
    )

    logger.info(
        f"Invoice confirmed: id={confirmed.id}, vendor='{draft.vendor}', "
        f"items={len(draft.items)}"
    )

    return confirmed
