"""
Pydantic schemas for the spend dashboard.
"""

from datetime import date
from decimal import Decimal
from typing import List, Literal

from pydantic import BaseModel, Field

# Window selectors accepted by the dashboard (see utils.constants.WINDOW_DAYS)
SpendWindow = Literal["7d", "30d", "90d"]


class DailySpendPoint(BaseModel):
    """One calendar day's bucket in a daily spend series."""
    full_date: date = Field(..., description="Calendar date of the bucket")
    display_date: str = Field(..., description="Chart label", examples=["Oct 19"])
    amount: Decimal = Field(..., description="Sum of confirmed totals for that day")


class VendorSpend(BaseModel):
    """One entry in the top vendors ranking."""
    vendor: str
    total: Decimal
    invoice_count: int = Field(..., ge=1)


class SummaryStats(BaseModel):
    """Window-scoped totals for the dashboard cards."""
    total_amount: Decimal = Field(Decimal("0"), description="Sum of confirmed totals")
    invoice_count: int = Field(0, ge=0, description="Number of invoices in the window")
    average_invoice: Decimal = Field(
        Decimal("0"),
        description="total_amount / invoice_count, or 0 when there are no invoices"
    )


class DailySpendResponse(BaseModel):
    window: SpendWindow
    points: List[DailySpendPoint]


class TopVendorsResponse(BaseModel):
    vendors: List[VendorSpend]
    limit: int


class SummaryResponse(BaseModel):
    window: SpendWindow
    stats: SummaryStats


class DashboardResponse(BaseModel):
    """Everything the dashboard screen renders, computed in one pass."""
    window: SpendWindow
    daily_spend: List[DailySpendPoint]
    top_vendors: List[VendorSpend]
    summary: SummaryStats
