"""
core/financial.py -- Financial calculation engine for AssetLedger.

Pure functions. No I/O, no shared state, no print statements. Every function
is a projection of (asset data, a date or date range) to numbers, so it is
safe to call concurrently from any number of report requests.

Conventions:
  - Months are counted on the calendar: only the year and month components of
    two dates matter. Jan 15 -> Feb 1 is one month.
  - Warranty contract cost is ANNUAL; maintenance contract cost is the TOTAL
    over the contract. Both are amortised to a monthly figure here.
  - Contract windows are inclusive at both ends.

Input validation belongs to the API and store layers. The one exception is a
non-positive depreciation period, which is rejected here with ValueError
rather than producing a division by zero.
"""

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from core.models import Asset


@dataclass(frozen=True)
class DepreciationResult:
    asset_id: Optional[int]
    asset_tag: str
    purchase_price: float
    monthly_depreciation: float
    total_depreciated: float
    remaining_value: float
    months_live: int
    total_depreciation_months: int


@dataclass(frozen=True)
class OpexResult:
    asset_id: Optional[int]
    asset_tag: str
    warranty_monthly_cost: float
    maintenance_monthly_cost: float
    total_monthly_cost: float


@dataclass(frozen=True)
class MonthlyForecast:
    month: str  # "YYYY-MM"
    year: int
    total_depreciation: float
    total_opex: float
    total_cost: float
    asset_count: int


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start to end. Day of month is ignored.

    Negative when end falls in an earlier month than start.
    """
    return (end.year - start.year) * 12 + (end.month - start.month)


def add_months(anchor: date, months: int) -> date:
    """Return anchor shifted by a number of calendar months.

    The day of month is kept where it exists and clamped to the last day of
    the target month otherwise (Jan 31 + 1 month -> Feb 28/29).
    """
    index = anchor.month - 1 + months
    year = anchor.year + index // 12
    month = index % 12 + 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _in_window(target: date, start: date, end: date) -> bool:
    return start <= target <= end


# ---------------------------------------------------------------------------
# Single-asset calculators
# ---------------------------------------------------------------------------


def calculate_depreciation(asset: Asset, target_date: Optional[date] = None) -> DepreciationResult:
    """Straight-line depreciation of one asset as of target_date (default: today).

    monthly = price / (years * 12). Depreciation accrues one month at a time
    from the go-live month and is capped at the purchase price, so the
    remaining value never goes below zero. A target date before go-live
    counts as zero months live.

    Raises ValueError if depreciation_period_years is not positive.
    """
    capex = asset.financial.capex
    if capex.depreciation_period_years <= 0:
        raise ValueError(
            f"Asset {asset.asset_tag}: depreciation period must be at least 1 year, "
            f"got {capex.depreciation_period_years}"
        )
    calculation_date = target_date or date.today()
    purchase_price = capex.purchase_price

    months_live = max(0, months_between(asset.deployment.go_live_date, calculation_date))
    total_months = capex.depreciation_period_years * 12
    monthly = purchase_price / total_months

    total_depreciated = min(months_live * monthly, purchase_price)
    remaining = max(0.0, purchase_price - total_depreciated)

    return DepreciationResult(
        asset_id=asset.id,
        asset_tag=asset.asset_tag,
        purchase_price=purchase_price,
        monthly_depreciation=monthly,
        total_depreciated=total_depreciated,
        remaining_value=remaining,
        months_live=months_live,
        total_depreciation_months=total_months,
    )


def calculate_opex(asset: Asset, target_date: Optional[date] = None) -> OpexResult:
    """Monthly operating cost of one asset from contracts active at target_date.

    Warranty: annual cost / 12.
    Maintenance: total cost / contract length in calendar months (at least 1).
    Expired and not-yet-started contracts contribute nothing.
    """
    calculation_date = target_date or date.today()
    warranty_monthly = 0.0
    maintenance_monthly = 0.0

    for warranty in asset.financial.opex.warranty:
        if _in_window(calculation_date, warranty.start_date, warranty.end_date):
            warranty_monthly += warranty.cost / 12

    for maintenance in asset.financial.opex.maintenance or []:
        if _in_window(calculation_date, maintenance.start_date, maintenance.end_date):
            duration = months_between(maintenance.start_date, maintenance.end_date)
            maintenance_monthly += maintenance.cost / max(1, duration)

    return OpexResult(
        asset_id=asset.id,
        asset_tag=asset.asset_tag,
        warranty_monthly_cost=warranty_monthly,
        maintenance_monthly_cost=maintenance_monthly,
        total_monthly_cost=warranty_monthly + maintenance_monthly,
    )


def active_contracts(contracts: Iterable, target_date: date) -> list:
    """Return the warranty or maintenance contracts whose window contains target_date."""
    return [c for c in contracts if _in_window(target_date, c.start_date, c.end_date)]


# ---------------------------------------------------------------------------
# Portfolio
# ---------------------------------------------------------------------------


def generate_forecast(assets: list[Asset], start_date: date, end_date: date) -> list[MonthlyForecast]:
    """Project depreciation + OPEX month by month over [start_date, end_date].

    Each month's reference date is start_date advanced by whole months (see
    add_months). For each month only assets already live on the reference
    date are counted. Fully depreciated assets stop adding depreciation but
    keep adding OPEX.

    Returns an empty list when end_date is before start_date.
    """
    forecast: list[MonthlyForecast] = []

    for step in range(months_between(start_date, end_date) + 1):
        current = add_months(start_date, step)
        if current > end_date:
            break
        total_depreciation = 0.0
        total_opex = 0.0
        live_count = 0

        for asset in assets:
            if asset.deployment.go_live_date > current:
                continue
            depreciation = calculate_depreciation(asset, current)
            if depreciation.months_live < depreciation.total_depreciation_months:
                total_depreciation += depreciation.monthly_depreciation
            total_opex += calculate_opex(asset, current).total_monthly_cost
            live_count += 1

        forecast.append(
            MonthlyForecast(
                month=f"{current.year}-{current.month:02d}",
                year=current.year,
                total_depreciation=total_depreciation,
                total_opex=total_opex,
                total_cost=total_depreciation + total_opex,
                asset_count=live_count,
            )
        )

    return forecast


def calculate_total_value(assets: list[Asset], target_date: Optional[date] = None) -> float:
    """Sum of remaining book value across assets."""
    return sum(calculate_depreciation(a, target_date).remaining_value for a in assets)


def calculate_opex_by_category(assets: list[Asset], target_date: Optional[date] = None) -> dict[str, float]:
    """Monthly OPEX across assets split into {"warranty": ..., "maintenance": ...}."""
    categories = {"warranty": 0.0, "maintenance": 0.0}
    for asset in assets:
        opex = calculate_opex(asset, target_date)
        categories["warranty"] += opex.warranty_monthly_cost
        categories["maintenance"] += opex.maintenance_monthly_cost
    return categories
