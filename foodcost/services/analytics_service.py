"""
Spend analytics over the confirmed invoice collection.

Pure, synchronous functions over a snapshot supplied by the caller. The
aggregator never knows where invoices are stored.

WINDOW RULES:
1. A window is the trailing N calendar days ending today, today included
2. Calendar days are taken in the configured LOCAL_TIMEZONE
3. Daily buckets are created up front so the series always has N points
4. An unknown window selector raises ConfigError; there is no fallback window
"""

from collections import OrderedDict
from datetime import date, datetime, timedelta, tzinfo
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from foodcost.config import settings
from foodcost.errors import ConfigError
from foodcost.schemas.analytics import DailySpendPoint, SummaryStats, VendorSpend
from foodcost.schemas.invoices import ConfirmedInvoice
from foodcost.services.reconciliation import quantize_money
from foodcost.utils.constants import WINDOW_DAYS
from foodcost.utils.logging import get_logger

logger = get_logger(__name__)


def get_local_timezone(name: Optional[str] = None) -> tzinfo:
    """
    Resolve the timezone used for calendar-day bucketing.

    Args:
        name: IANA zone name (defaults to settings.LOCAL_TIMEZONE)

    Raises:
        ConfigError: If the zone name is unknown
    """
    name = name or settings.LOCAL_TIMEZONE
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"Unknown LOCAL_TIMEZONE: {name!r}") from exc


def local_today(tz: Optional[tzinfo] = None) -> date:
    """Today's calendar date in the local timezone."""
    return datetime.now(tz or get_local_timezone()).date()


def local_date(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    """
    Calendar date of a confirmation timestamp in the local timezone.

    Naive timestamps are taken as already local.
    """
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz or get_local_timezone()).date()


def local_moment(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Timezone-aware copy of a timestamp; naive values get the local zone attached."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz or get_local_timezone())
    return moment


def resolve_window(window: str) -> int:
    """
    Number of days covered by a window selector.

    Raises:
        ConfigError: If the selector is not one of 7d, 30d, 90d
    """
    try:
        return WINDOW_DAYS[window]
    except (KeyError, TypeError):
        raise ConfigError(
            f"Unknown window {window!r}; expected one of {', '.join(WINDOW_DAYS)}"
        ) from None


def window_bounds(window: str, today: Optional[date] = None) -> Tuple[date, date]:
    """First and last calendar day of a window, both inclusive."""
    days = resolve_window(window)
    if today is None:
        today = local_today()
    return today - timedelta(days=days - 1), today


def _in_window(
    invoices: Iterable[ConfirmedInvoice],
    start: date,
    end: date,
    tz: Optional[tzinfo],
) -> List[Tuple[date, ConfirmedInvoice]]:
    selected = []
    for invoice in invoices:
        day = local_date(invoice.confirmed_at, tz)
        if start <= day <= end:
            selected.append((day, invoice))
    return selected


def daily_spend(
    invoices: Iterable[ConfirmedInvoice],
    window: str,
    today: Optional[date] = None,
    tz: Optional[tzinfo] = None,
) -> List[DailySpendPoint]:
    """
    Fixed-length daily spend series for a window.

    Every day of the window gets a bucket, even with no invoices, so the
    result always has exactly N points in ascending date order. Each
    in-window invoice adds its confirmed_total to the bucket of its local
    confirmation date; invoices outside the window are ignored.

    Args:
        invoices: Snapshot of confirmed invoices (any order)
        window: Window selector ("7d", "30d" or "90d")
        today: Last day of the window (defaults to local today)
        tz: Timezone for calendar days (defaults to LOCAL_TIMEZONE)

    Returns:
        List of DailySpendPoint, oldest first

    Raises:
        ConfigError: If the window selector is unknown
    """
    tz = tz or get_local_timezone()
    if today is None:
        today = local_today(tz)
    start, end = window_bounds(window, today)

    buckets: "OrderedDict[date, Decimal]" = OrderedDict()
    day = start
    while day <= end:
        buckets[day] = Decimal("0")
        day += timedelta(days=1)

    for day, invoice in _in_window(invoices, start, end, tz):
        buckets[day] += invoice.confirmed_total

    return [
        DailySpendPoint(full_date=day, display_date=day.strftime("%b %d"), amount=amount)
        for day, amount in buckets.items()
    ]


def top_vendors(invoices: Iterable[ConfirmedInvoice], limit: int = 5) -> List[VendorSpend]:
    """
    Rank vendors by total confirmed spend.

    Operates on the whole supplied collection (callers pre-filter if they
    want a window). Vendor names are matched exactly. Ties keep the order
    in which vendors were first encountered.

    Raises:
        ConfigError: If limit is negative
    """
    if limit < 0:
        raise ConfigError(f"top vendors limit must be >= 0, got {limit}")

    totals: Dict[str, Decimal] = {}
    counts: Dict[str, int] = {}
    for invoice in invoices:
        totals[invoice.vendor] = totals.get(invoice.vendor, Decimal("0")) + invoice.confirmed_total
        counts[invoice.vendor] = counts.get(invoice.vendor, 0) + 1

    # sorted() is stable, including with reverse=True
    ranked = sorted(totals.items(), key=lambda entry: entry[1], reverse=True)

    return [
        VendorSpend(vendor=vendor, total=total, invoice_count=counts[vendor])
        for vendor, total in ranked[:limit]
    ]


def summary_stats(
    invoices: Iterable[ConfirmedInvoice],
    window: str,
    today: Optional[date] = None,
    tz: Optional[tzinfo] = None,
) -> SummaryStats:
    """
    Total spend, invoice count and average invoice value for a window.

    The average is rounded to cents and is 0 when the window holds no
    invoices.

    Raises:
        ConfigError: If the window selector is unknown
    """
    tz = tz or get_local_timezone()
    if today is None:
        today = local_today(tz)
    start, end = window_bounds(window, today)

    selected = _in_window(invoices, start, end, tz)
    total_amount = sum((invoice.confirmed_total for _, invoice in selected), Decimal("0"))
    invoice_count = len(selected)
    if invoice_count > 0:
        average_invoice = quantize_money(total_amount / invoice_count)
    else:
        average_invoice = Decimal("0")

    return SummaryStats(
        total_amount=total_amount,
        invoice_count=invoice_count,
        average_invoice=average_invoice,
    )


def recent_invoices(
    invoices: Sequence[ConfirmedInvoice],
    limit: int = 10,
    tz: Optional[tzinfo] = None,
) -> List[ConfirmedInvoice]:
    """
    Most recently confirmed invoices first, truncated to limit.

    Naive and aware timestamps may be mixed in one snapshot; naive ones are
    compared as local time.
    """
    if limit < 0:
        raise ConfigError(f"recent invoices limit must be >= 0, got {limit}")
    tz = tz or get_local_timezone()
    ordered = sorted(
        invoices,
        key=lambda invoice: local_moment(invoice.confirmed_at, tz),
        reverse=True,
    )
    return ordered[:limit]


def build_dashboard(
    invoices: Sequence[ConfirmedInvoice],
    window: str,
    vendor_limit: int = 5,
    today: Optional[date] = None,
    tz: Optional[tzinfo] = None,
) -> Tuple[List[DailySpendPoint], List[VendorSpend], SummaryStats]:
    """
    Compute the daily series, vendor ranking and summary for one dashboard view.

    The window is resolved before anything else so that a bad selector
    fails without partial work.
    """
    resolve_window(window)
    tz = tz or get_local_timezone()
    if today is None:
        today = local_today(tz)

    series = daily_spend(invoices, window, today=today, tz=tz)
    vendors = top_vendors(invoices, limit=vendor_limit)
    stats = summary_stats(invoices, window, today=today, tz=tz)

    logger.info(
        f"Dashboard computed: window={window}, invoices={len(invoices)}, "
        f"in_window={stats.invoice_count}, vendors={len(vendors)}"
    )

    return series, vendors, stats
