"""
Service layer for the Food Cost backend.

Contains:
- The reconciliation engine (pure line-item arithmetic)
- The analytics aggregator (pure window/series/ranking computations)
- Persistence of confirmed invoices in Supabase

Services act as the glue between routes (HTTP layer) and the database.
"""

from .analytics_service import (
    build_dashboard,
    daily_spend,
    local_today,
    recent_invoices,
    resolve_window,
    summary_stats,
    top_vendors,
    window_bounds,
)
from .invoice_service import (
    append_confirmed_invoice,
    get_confirmed_invoice_by_id,
    get_confirmed_invoices,
)
from .reconciliation import (
    apply_item_edit,
    coerce_line_item,
    confirm_invoice,
    invoice_total,
    line_total,
    reconcile_draft,
    rename_item,
    set_disposition,
    update_quantity,
)

__all__ = [
    "line_total",
    "invoice_total",
    "update_quantity",
    "set_disposition",
    "rename_item",
    "apply_item_edit",
    "reconcile_draft",
    "coerce_line_item",
    "confirm_invoice",
    "resolve_window",
    "window_bounds",
    "local_today",
    "daily_spend",
    "top_vendors",
    "summary_stats",
    "recent_invoices",
    "build_dashboard",
    "append_confirmed_invoice",
    "get_confirmed_invoices",
    "get_confirmed_invoice_by_id",
]
