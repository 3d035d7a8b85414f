"""
tests/test_report_routes.py -- Integration tests for GET /api/v1/reports/financial.

Builds a two-asset portfolio through the API, then checks each report type
and every 400 path (unknown type, missing forecast dates, range over the cap,
malformed asset_ids).

Portfolio (all figures per month):
  RPT-1: 4,800 over 4 years, live 2020-01-01 -> 100 depreciation; warranty
         1,200/yr 2020-2022 -> 100 OPEX while active
  RPT-2: 2,400 over 2 years, live 2022-07-01 -> 100 depreciation; maintenance
         2,400 total over 2022-07-01..2023-07-01 -> 200 OPEX while active
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient


def _asset_body(sku_id: int, tag: str, price: float, years: int, go_live: str, opex: dict) -> dict:
    return {
        "sku_id": sku_id,
        "asset_tag": tag,
        "serial_number": f"SN-{tag}",
        "name": f"Server {tag}",
        "location": {"datacenter": "DC1", "city": "Berlin", "country": "Germany"},
        "financial": {
            "capex": {
                "purchase_price": price,
                "purchase_date": go_live,
                "vendor": "Dell",
                "depreciation_period_years": years,
            },
            "opex": opex,
        },
        "deployment": {"go_live_date": go_live},
    }


@pytest.fixture(scope="module")
def portfolio(api_client: TestClient) -> dict[str, int]:
    """Create one catalog, one SKU and two assets; return {tag: asset_id}."""
    catalog = api_client.post(
        "/api/v1/catalogs",
        json={"name": "Report Servers", "description": "x", "category": "server", "manufacturer": "Dell"},
    ).json()
    sku = api_client.post(
        "/api/v1/skus",
        json={
            "catalog_id": catalog["id"],
            "sku_code": "RPT-SKU",
            "name": "PowerEdge R650",
            "model_name": "R650",
            "description": "1U server",
            "manufacturer": "Dell",
        },
    ).json()

    first = _asset_body(
        sku["id"],
        "RPT-1",
        4800,
        4,
        "2020-01-01",
        {
            "warranty": [
                {"cost": 1200, "start_date": "2020-01-01", "end_date": "2022-12-31", "vendor": "Dell", "type": "basic"}
            ]
        },
    )
    second = _asset_body(
        sku["id"],
        "RPT-2",
        2400,
        2,
        "2022-07-01",
        {
            "maintenance": [
                {"cost": 2400, "start_date": "2022-07-01", "end_date": "2023-07-01", "vendor": "Acme", "type": "hw"}
            ]
        },
    )
    ids = {}
    for body in (first, second):
        resp = api_client.post("/api/v1/assets", json=body)
        assert resp.status_code == 201, resp.text
        ids[body["asset_tag"]] = resp.json()["id"]
    return ids


class TestForecast:
    def test_forecast_records(self, api_client: TestClient, portfolio: dict[str, int]) -> None:
        resp = api_client.get(
            "/api/v1/reports/financial",
            params={"type": "forecast", "start_date": "2022-06-01", "end_date": "2022-08-31"},
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["type"] == "forecast"
        assert [r["month"] for r in data["data"]] == ["2022-06", "2022-07", "2022-08"]

        june, july, _ = data["data"]
        assert june["asset_count"] == 1
        assert june["total_cost"] == pytest.approx(200.0)
        assert july["asset_count"] == 2
        assert july["total_depreciation"] == pytest.approx(200.0)
        assert july["total_opex"] == pytest.approx(300.0)
        assert data["summary"]["forecast_period"] == {"start": "2022-06-01", "end": "2022-08-31"}

    def test_forecast_is_the_default_type(self, api_client: TestClient, portfolio: dict[str, int]) -> None:
        resp = api_client.get(
            "/api/v1/reports/financial",
            params={"start_date": "2023-01-01", "end_date": "2023-01-31"},
        )
        assert resp.status_code == 200
        assert resp.json()["type"] == "forecast"

    def test_missing_dates_returns_400(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/v1/reports/financial", params={"type": "forecast", "start_date": "2024-01-01"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "missing_param"

    def test_range_too_large_returns_400(self, api_client: TestClient) -> None:
        resp = api_client.get(
            "/api/v1/reports/financial",
            params={"type": "forecast", "start_date": "2000-01-01", "end_date": "2030-12-31"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "range_too_large"

    def test_range_ending_in_year_9999(self, api_client: TestClient, portfolio: dict[str, int]) -> None:
        resp = api_client.get(
            "/api/v1/reports/financial",
            params={"type": "forecast", "start_date": "9999-11-01", "end_date": "9999-12-31"},
        )
        assert resp.status_code == 200, resp.text
        assert [r["month"] for r in resp.json()["data"]] == ["9999-11", "9999-12"]

    def test_malformed_date_returns_422(self, api_client: TestClient) -> None:
        resp = api_client.get(
            "/api/v1/reports/financial",
            params={"type": "forecast", "start_date": "January", "end_date": "2024-12-31"},
        )
        assert resp.status_code == 422


class TestPointInTimeReports:
    def test_current_value(self, api_client: TestClient, portfolio: dict[str, int]) -> None:
        resp = api_client.get(
            "/api/v1/reports/financial",
            params={"type": "current-value", "target_date": "2023-01-01"},
        )
        assert resp.status_code == 200
        body = resp.json()
        rows = {r["asset_tag"]: r for r in body["data"]}
        # RPT-1: 36 months live -> 1,200 left. RPT-2: 6 months -> 1,800 left.
        assert rows["RPT-1"]["current_value"] == pytest.approx(1200.0)
        assert rows["RPT-2"]["current_value"] == pytest.approx(1800.0)
        assert rows["RPT-1"]["monthly_opex"] == 0
        assert rows["RPT-2"]["maintenance_opex"] == pytest.approx(200.0)
        assert rows["RPT-1"]["sku"]["sku_code"] == "RPT-SKU"
        assert body["summary"]["total_current_value"] == pytest.approx(3000.0)
        assert body["summary"]["as_of_date"] == "2023-01-01"

    def test_depreciation_schedule(self, api_client: TestClient, portfolio: dict[str, int]) -> None:
        resp = api_client.get(
            "/api/v1/reports/financial",
            params={"type": "depreciation-schedule", "target_date": "2023-01-01"},
        )
        assert resp.status_code == 200
        rows = {r["asset_tag"]: r for r in resp.json()["data"]}
        assert rows["RPT-1"]["depreciation_end_date"] == "2024-01-01"
        assert rows["RPT-1"]["months_remaining"] == 12
        assert rows["RPT-2"]["depreciation_end_date"] == "2024-07-01"

    def test_opex_breakdown_filtered_by_ids(self, api_client: TestClient, portfolio: dict[str, int]) -> None:
        resp = api_client.get(
            "/api/v1/reports/financial",
            params={"type": "opex-breakdown", "target_date": "2022-08-01", "asset_ids": str(portfolio["RPT-2"])},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert [r["asset_tag"] for r in body["data"]] == ["RPT-2"]
        assert len(body["data"][0]["maintenance"]) == 1
        assert body["summary"]["total_monthly_opex"] == pytest.approx(200.0)

    def test_unknown_type_returns_400(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/v1/reports/financial", params={"type": "balance-sheet"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalid_report_type"

    def test_malformed_asset_ids_returns_400(self, api_client: TestClient) -> None:
        resp = api_client.get(
            "/api/v1/reports/financial",
            params={"type": "current-value", "asset_ids": "1,two"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalid_param"

    @pytest.mark.parametrize("asset_ids", ["99999999999999999999", "0", "1,-3"])
    def test_out_of_range_asset_ids_return_400(self, api_client: TestClient, asset_ids: str) -> None:
        resp = api_client.get(
            "/api/v1/reports/financial",
            params={"type": "current-value", "asset_ids": asset_ids},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalid_param"
