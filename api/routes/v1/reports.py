"""
api/routes/v1/reports.py -- Financial reporting route for the AssetLedger REST API.

Routes:
  GET /reports/financial -- forecast, current-value, depreciation-schedule, opex-breakdown

Query params:
  type         -- report type (default: forecast)
  start_date   -- forecast range start, YYYY-MM-DD (forecast only, required)
  end_date     -- forecast range end, YYYY-MM-DD (forecast only, required)
  target_date  -- point-in-time date for the other types (default: today)
  asset_ids    -- comma-separated asset IDs; omitted means the whole portfolio

Everything is computed on request from stored asset data. Nothing is cached.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Request

from api.limiter import limiter
from api.models import MAX_ID, ErrorDetail, ReportResponse
from core.config import get_settings
from core.reports import ReportParameterError, build_report
from inventory.store import InventoryStore

router = APIRouter()


def _parse_ids(raw: str) -> Optional[list[int]]:
    """Parse "1,2, 3" into [1, 2, 3]. Empty input means no filter (None)."""
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    if not parts:
        return None
    invalid = HTTPException(
        status_code=400,
        detail=ErrorDetail(
            code="invalid_param",
            message="asset_ids must be a comma-separated list of positive integers.",
        ).model_dump(),
    )
    try:
        ids = [int(p) for p in parts]
    except ValueError:
        raise invalid
    if any(not 1 <= i <= MAX_ID for i in ids):
        raise invalid
    return ids


@limiter.limit("20/minute")
@router.get("/reports/financial", response_model=ReportResponse)
def financial_report(
    request: Request,
    type: str = "forecast",
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    target_date: Optional[date] = None,
    asset_ids: str = "",
) -> ReportResponse:
    """Build one financial report over the selected assets.

    The report type is validated here rather than by an Enum parameter so an
    unknown type yields the same 400 envelope as a missing forecast range.
    """
    store: InventoryStore = request.app.state.store
    ids = _parse_ids(asset_ids)
    assets = store.get_assets_for_report(ids)

    try:
        report = build_report(
            type,
            assets,
            start_date=start_date,
            end_date=end_date,
            target_date=target_date,
            max_forecast_months=get_settings().max_forecast_months,
        )
    except ReportParameterError as exc:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code=exc.code, message=str(exc)).model_dump(),
        )

    return ReportResponse(type=report.type, data=report.data, summary=report.summary)
