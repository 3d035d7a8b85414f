"""
core/reports.py -- Financial report builders.

Shapes engine output into the {type, data, summary} envelope consumed by both
the REST API (api/routes/v1/reports.py) and the CLI (main.py). No I/O: the
caller fetches assets from the store and passes them in.

Report types:
  forecast               -- month-by-month depreciation + OPEX over a range
  current-value          -- book value and monthly OPEX per asset at a date
  depreciation-schedule  -- depreciation progress and end date per asset
  opex-breakdown         -- active warranty/maintenance contracts per asset
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Optional

from core.financial import (
    active_contracts,
    add_months,
    calculate_depreciation,
    calculate_opex,
    calculate_opex_by_category,
    calculate_total_value,
    generate_forecast,
    months_between,
)
from core.models import Asset, ExpandedCatalog, ExpandedSku, SkuRef

REPORT_TYPES = ("forecast", "current-value", "depreciation-schedule", "opex-breakdown")


class ReportParameterError(ValueError):
    """Raised when a report is requested without the parameters it needs.

    code is a stable machine-readable identifier the API puts in its error
    envelope; str(exc) is the human-readable message.
    """

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass
class Report:
    type: str
    data: list[dict] = field(default_factory=list)
    summary: dict = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Row helpers
# ---------------------------------------------------------------------------


def sku_summary(ref: SkuRef) -> dict:
    """Describe the SKU an asset points at, as much as the reference carries."""
    if isinstance(ref, ExpandedSku):
        sku = ref.sku
        summary = {
            "id": sku.id,
            "sku_code": sku.sku_code,
            "name": sku.name,
            "model_name": sku.model_name,
        }
        if isinstance(sku.catalog, ExpandedCatalog):
            summary["catalog"] = {
                "id": sku.catalog.catalog.id,
                "name": sku.catalog.catalog.name,
                "category": sku.catalog.catalog.category,
            }
        else:
            summary["catalog"] = {"id": sku.catalog.id}
        return summary
    return {"id": ref.id}


def _contract_to_dict(contract) -> dict:
    d = asdict(contract)
    d["start_date"] = contract.start_date.isoformat()
    d["end_date"] = contract.end_date.isoformat()
    return d


def _depreciation_end(go_live: date, total_months: int) -> Optional[str]:
    """ISO date the asset is fully depreciated, or None when it falls after date.max."""
    if months_between(go_live, date.max) < total_months:
        return None
    return add_months(go_live, total_months).isoformat()


def _asset_header(asset: Asset) -> dict:
    return {
        "asset_id": asset.id,
        "asset_tag": asset.asset_tag,
        "name": asset.name,
        "sku": sku_summary(asset.sku),
    }


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def forecast_report(
    assets: list[Asset],
    start_date: Optional[date],
    end_date: Optional[date],
    max_months: Optional[int] = None,
) -> Report:
    if start_date is None or end_date is None:
        raise ReportParameterError(
            "missing_param",
            "start_date and end_date are required for the forecast report.",
        )
    if max_months is not None and months_between(start_date, end_date) + 1 > max_months:
        raise ReportParameterError(
            "range_too_large",
            f"Forecast range may not exceed {max_months} months.",
        )
    rows = [asdict(m) for m in generate_forecast(assets, start_date, end_date)]
    return Report(
        type="forecast",
        data=rows,
        summary={
            "total_assets": len(assets),
            "forecast_period": {"start": start_date.isoformat(), "end": end_date.isoformat()},
        },
    )


def current_value_report(assets: list[Asset], target_date: date) -> Report:
    rows = []
    for asset in assets:
        depreciation = calculate_depreciation(asset, target_date)
        opex = calculate_opex(asset, target_date)
        rows.append(
            {
                **_asset_header(asset),
                "purchase_price": depreciation.purchase_price,
                "current_value": depreciation.remaining_value,
                "monthly_depreciation": depreciation.monthly_depreciation,
                "monthly_opex": opex.total_monthly_cost,
                "warranty_opex": opex.warranty_monthly_cost,
                "maintenance_opex": opex.maintenance_monthly_cost,
            }
        )

    by_category = calculate_opex_by_category(assets, target_date)
    return Report(
        type="current-value",
        data=rows,
        summary={
            "total_assets": len(assets),
            "total_current_value": calculate_total_value(assets, target_date),
            "total_purchase_value": sum(a.financial.capex.purchase_price for a in assets),
            "total_monthly_opex": by_category["warranty"] + by_category["maintenance"],
            "opex_breakdown": by_category,
            "as_of_date": target_date.isoformat(),
        },
    )


def depreciation_schedule_report(assets: list[Asset], target_date: date) -> Report:
    rows = []
    for asset in assets:
        depreciation = calculate_depreciation(asset, target_date)
        go_live = asset.deployment.go_live_date
        rows.append(
            {
                **_asset_header(asset),
                "purchase_price": depreciation.purchase_price,
                "monthly_depreciation": depreciation.monthly_depreciation,
                "total_depreciated": depreciation.total_depreciated,
                "remaining_value": depreciation.remaining_value,
                "go_live_date": go_live.isoformat(),
                "depreciation_end_date": _depreciation_end(go_live, depreciation.total_depreciation_months),
                "months_remaining": max(0, depreciation.total_depreciation_months - depreciation.months_live),
            }
        )

    return Report(
        type="depreciation-schedule",
        data=rows,
        summary={
            "total_assets": len(assets),
            "total_remaining_value": sum(r["remaining_value"] for r in rows),
            "total_monthly_depreciation": sum(r["monthly_depreciation"] for r in rows),
            "as_of_date": target_date.isoformat(),
        },
    )


def opex_breakdown_report(assets: list[Asset], target_date: date) -> Report:
    rows = []
    for asset in assets:
        opex = calculate_opex(asset, target_date)
        rows.append(
            {
                **_asset_header(asset),
                "warranty_monthly_cost": opex.warranty_monthly_cost,
                "maintenance_monthly_cost": opex.maintenance_monthly_cost,
                "total_monthly_cost": opex.total_monthly_cost,
                "warranties": [
                    _contract_to_dict(c) for c in active_contracts(asset.financial.opex.warranty, target_date)
                ],
                "maintenance": [
                    _contract_to_dict(c) for c in active_contracts(asset.financial.opex.maintenance, target_date)
                ],
            }
        )

    return Report(
        type="opex-breakdown",
        data=rows,
        summary={
            "total_assets": len(assets),
            "total_monthly_opex": sum(r["total_monthly_cost"] for r in rows),
            "as_of_date": target_date.isoformat(),
        },
    )


def build_report(
    report_type: str,
    assets: list[Asset],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    target_date: Optional[date] = None,
    max_forecast_months: Optional[int] = None,
) -> Report:
    """Dispatch to the builder for report_type.

    target_date defaults to today for the point-in-time reports. Raises
    ReportParameterError for an unknown type or missing forecast range.
    """
    if report_type == "forecast":
        return forecast_report(assets, start_date, end_date, max_months=max_forecast_months)

    as_of = target_date or date.today()
    if report_type == "current-value":
        return current_value_report(assets, as_of)
    if report_type == "depreciation-schedule":
        return depreciation_schedule_report(assets, as_of)
    if report_type == "opex-breakdown":
        return opex_breakdown_report(assets, as_of)

    raise ReportParameterError(
        "invalid_report_type",
        f"type must be one of: {', '.join(REPORT_TYPES)}",
    )
