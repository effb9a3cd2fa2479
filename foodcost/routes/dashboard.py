"""
Spend dashboard API endpoints.

Every endpoint reads the full confirmed invoice snapshot and hands it to the
analytics aggregator; no calculation happens in the UI layer.

The window query parameter is required. An unknown window returns 400
rather than falling back to a default.
"""

import logging
from typing import Annotated, List

from fastapi import APIRouter, HTTPException, Query, status

from foodcost.config import settings
from foodcost.db.client import get_supabase_client
from foodcost.errors import ConfigError
from foodcost.schemas.analytics import (
    DailySpendResponse,
    DashboardResponse,
    SummaryResponse,
    TopVendorsResponse,
)
from foodcost.schemas.invoices import ConfirmedInvoice
from foodcost.services import (
    build_dashboard,
    daily_spend,
    get_confirmed_invoices,
    local_today,
    resolve_window,
    summary_stats,
    top_vendors,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

WindowQuery = Annotated[str, Query(description="Trailing window: 7d, 30d or 90d", examples=["7d"])]


def _invalid_window(exc: ConfigError) -> HTTPException:
    logger.warning(f"Rejected dashboard request: {exc}")
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "invalid_window", "details": str(exc)}
    )


async def _load_snapshot() -> List[ConfirmedInvoice]:
    supabase_client = get_supabase_client()
    try:
        return await get_confirmed_invoices(supabase_client)
    except Exception as e:
        logger.error(f"Failed to read confirmed invoices: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "storage_error", "details": "Could not read confirmed invoices"}
        )


@router.get(
    "",
    response_model=DashboardResponse,
    summary="Daily series, top vendors and summary for one window",
)
async def get_dashboard(
    window: WindowQuery,
    vendor_limit: Annotated[int, Query(ge=0, le=50)] = settings.TOP_VENDORS_LIMIT,
) -> DashboardResponse:
    """Everything the dashboard renders, from a single snapshot read."""
    try:
        resolve_window(window)
    except ConfigError as e:
        raise _invalid_window(e)

    invoices = await _load_snapshot()

    try:
        series, vendors, stats = build_dashboard(
            invoices,
            window,
            vendor_limit=vendor_limit,
            today=local_today(),
        )
    except ConfigError as e:
        raise _invalid_window(e)

    return DashboardResponse(
        window=window,
        daily_spend=series,
        top_vendors=vendors,
        summary=stats,
    )


@router.get(
    "/daily-spend",
    response_model=DailySpendResponse,
    summary="Daily spend series for a window",
)
async def get_daily_spend(window: WindowQuery) -> DailySpendResponse:
    """Exactly one point per day of the window, oldest first."""
    try:
        resolve_window(window)
    except ConfigError as e:
        raise _invalid_window(e)

    invoices = await _load_snapshot()

    try:
        points = daily_spend(invoices, window, today=local_today())
    except ConfigError as e:
        raise _invalid_window(e)

    return DailySpendResponse(window=window, points=points)


@router.get(
    "/top-vendors",
    response_model=TopVendorsResponse,
    summary="Vendors ranked by total confirmed spend",
)
async def get_top_vendors(
    limit: Annotated[int, Query(ge=0, le=50)] = settings.TOP_VENDORS_LIMIT,
) -> TopVendorsResponse:
    """Ranking over the whole collection (not window-scoped)."""
    invoices = await _load_snapshot()
    return TopVendorsResponse(vendors=top_vendors(invoices, limit=limit), limit=limit)


@router.get(
    "/summary",
    response_model=SummaryResponse,
    summary="Total spend, invoice count and average invoice for a window",
)
async def get_summary(window: WindowQuery) -> SummaryResponse:
    try:
        resolve_window(window)
    except ConfigError as e:
        raise _invalid_window(e)

    invoices = await _load_snapshot()

    try:
        stats = summary_stats(invoices, window, today=local_today())
    except ConfigError as e:
        raise _invalid_window(e)

    return SummaryResponse(window=window, stats=stats)
