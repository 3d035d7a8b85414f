"""
tests/test_api_routes.py -- Integration tests for the catalog, SKU and asset routes.

These tests exercise the full stack: FastAPI routing -> request validation ->
InventoryStore operations -> response model serialization. Unit testing
individual route functions would miss middleware, exception handlers, and
response model validation.

Coverage:
  - Happy path per entity: POST 201, GET list 200, GET detail 200, PUT 200, DELETE 200
  - 404 on unknown IDs, 409 on duplicates, 422 on invalid bodies
  - 400 invalid_reference for a missing catalog/SKU, 400 *_in_use for blocked deletes
  - Normalisation: sku_code, asset_tag and MAC addresses upper-cased

Fixtures used (from conftest.py):
  - api_client: TestClient with an isolated in-memory store for this module
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def _catalog_body(name: str = "Enterprise Servers", manufacturer: str = "Dell") -> dict:
    return {
        "name": name,
        "description": "Rack-mount servers",
        "category": "server",
        "manufacturer": manufacturer,
        "attributes": {"form_factor": "2U", "rack_units": 2},
    }


def _sku_body(catalog_id: int, code: str) -> dict:
    return {
        "catalog_id": catalog_id,
        "sku_code": code,
        "name": "PowerEdge R750",
        "model_name": "R750",
        "description": "2U dual-socket rack server",
        "manufacturer": "Dell",
        "pricing": {"msrp": 5000, "currency": "usd", "effective_date": "2023-01-01"},
    }


def _asset_body(sku_id: int, tag: str) -> dict:
    return {
        "sku_id": sku_id,
        "asset_tag": tag,
        "serial_number": f"SN-{tag}",
        "name": f"Server {tag}",
        "location": {"datacenter": "Frankfurt DC1", "city": "Frankfurt", "country": "Germany"},
        "financial": {
            "capex": {
                "purchase_price": 4800,
                "purchase_date": "2019-12-01",
                "vendor": "Dell",
                "depreciation_period_years": 4,
            },
            "opex": {
                "warranty": [
                    {
                        "cost": 1200,
                        "start_date": "2020-01-01",
                        "end_date": "2022-12-31",
                        "vendor": "Dell",
                        "type": "premium",
                    }
                ],
                "maintenance": [],
            },
        },
        "deployment": {"go_live_date": "2020-01-01", "environment": "production"},
        "specifications": {"hostname": "web-01", "mac_addresses": ["aa:bb:cc:dd:ee:ff"]},
    }


def _create_catalog(client: TestClient, name: str, manufacturer: str = "Dell") -> int:
    resp = client.post("/api/v1/catalogs", json=_catalog_body(name, manufacturer))
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def _create_sku(client: TestClient, catalog_id: int, code: str) -> int:
    resp = client.post("/api/v1/skus", json=_sku_body(catalog_id, code))
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def _create_asset(client: TestClient, sku_id: int, tag: str) -> int:
    resp = client.post("/api/v1/assets", json=_asset_body(sku_id, tag))
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------


class TestCatalogRoutes:
    def test_create_catalog(self, api_client: TestClient) -> None:
        """POST /api/v1/catalogs returns 201 with the stored catalog and a zero SKU count."""
        resp = api_client.post("/api/v1/catalogs", json=_catalog_body("Blade Servers"))
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["name"] == "Blade Servers"
        assert data["status"] == "active"
        assert data["sku_count"] == 0
        assert data["attributes"]["rack_units"] == 2

    def test_duplicate_catalog_returns_409(self, api_client: TestClient) -> None:
        _create_catalog(api_client, "Tower Servers")
        resp = api_client.post("/api/v1/catalogs", json=_catalog_body("Tower Servers"))
        assert resp.status_code == 409
        assert resp.json()["error"]["message"] == "A catalog with this name and manufacturer already exists"

    def test_invalid_category_returns_422(self, api_client: TestClient) -> None:
        body = _catalog_body("Toasters")
        body["category"] = "toaster"
        resp = api_client.post("/api/v1/catalogs", json=body)
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "validation_error"

    def test_get_unknown_catalog_returns_404(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/v1/catalogs/99999")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "catalog_not_found"

    def test_list_catalogs_with_pagination(self, api_client: TestClient) -> None:
        _create_catalog(api_client, "Listing A", manufacturer="Listco")
        _create_catalog(api_client, "Listing B", manufacturer="Listco")
        resp = api_client.get("/api/v1/catalogs", params={"search": "listco", "limit": 1})
        assert resp.status_code == 200
        data = resp.json()
        assert len(data["catalogs"]) == 1
        assert data["catalogs"][0]["name"] == "Listing B"
        assert data["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}

    def test_update_catalog_is_partial(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Updatable")
        resp = api_client.put(f"/api/v1/catalogs/{catalog_id}", json={"status": "discontinued"})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["status"] == "discontinued"
        assert data["name"] == "Updatable"

    def test_update_unknown_catalog_returns_404(self, api_client: TestClient) -> None:
        resp = api_client.put("/api/v1/catalogs/99999", json={"status": "inactive"})
        assert resp.status_code == 404

    def test_delete_catalog_blocked_by_sku(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Has SKUs")
        _create_sku(api_client, catalog_id, "BLOCK-1")
        resp = api_client.delete(f"/api/v1/catalogs/{catalog_id}")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "catalog_in_use"

    def test_delete_catalog(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Disposable")
        resp = api_client.delete(f"/api/v1/catalogs/{catalog_id}")
        assert resp.status_code == 200
        assert api_client.get(f"/api/v1/catalogs/{catalog_id}").status_code == 404


# ---------------------------------------------------------------------------
# SKUs
# ---------------------------------------------------------------------------


class TestSkuRoutes:
    def test_create_sku_normalises_and_expands(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "SKU Parent")
        resp = api_client.post("/api/v1/skus", json=_sku_body(catalog_id, "dell-r650"))
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["sku_code"] == "DELL-R650"
        assert data["pricing"]["currency"] == "USD"
        assert data["catalog"] == {
            "id": catalog_id,
            "name": "SKU Parent",
            "category": "server",
            "manufacturer": "Dell",
        }
        assert data["asset_count"] == 0

    def test_unknown_catalog_returns_400(self, api_client: TestClient) -> None:
        resp = api_client.post("/api/v1/skus", json=_sku_body(99999, "ORPHAN-1"))
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalid_reference"

    def test_duplicate_code_returns_409(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Dup SKU Parent")
        _create_sku(api_client, catalog_id, "DUP-1")
        resp = api_client.post("/api/v1/skus", json=_sku_body(catalog_id, "dup-1"))
        assert resp.status_code == 409
        assert resp.json()["error"]["message"] == "SKU code already exists"

    def test_negative_msrp_returns_422(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Bad Price Parent")
        body = _sku_body(catalog_id, "NEG-1")
        body["pricing"]["msrp"] = -1
        assert api_client.post("/api/v1/skus", json=body).status_code == 422

    def test_list_skus_by_catalog(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Filter Parent")
        _create_sku(api_client, catalog_id, "FILTER-1")
        resp = api_client.get("/api/v1/skus", params={"catalog_id": catalog_id})
        assert resp.status_code == 200
        data = resp.json()
        assert [s["sku_code"] for s in data["skus"]] == ["FILTER-1"]
        assert data["pagination"]["total"] == 1

    def test_get_update_delete_sku(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Lifecycle Parent")
        sku_id = _create_sku(api_client, catalog_id, "LIFE-1")

        assert api_client.get(f"/api/v1/skus/{sku_id}").status_code == 200

        resp = api_client.put(f"/api/v1/skus/{sku_id}", json={"status": "inactive"})
        assert resp.status_code == 200
        assert resp.json()["status"] == "inactive"

        assert api_client.delete(f"/api/v1/skus/{sku_id}").status_code == 200
        assert api_client.get(f"/api/v1/skus/{sku_id}").status_code == 404

    def test_delete_sku_blocked_by_asset(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Asset Parent")
        sku_id = _create_sku(api_client, catalog_id, "IN-USE-1")
        _create_asset(api_client, sku_id, "IN-USE-ASSET")
        resp = api_client.delete(f"/api/v1/skus/{sku_id}")
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "sku_in_use"


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


class TestAssetRoutes:
    def test_create_asset(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Asset Route Parent")
        sku_id = _create_sku(api_client, catalog_id, "ASSET-ROUTE-1")
        resp = api_client.post("/api/v1/assets", json=_asset_body(sku_id, "ast-route-1"))
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["asset_tag"] == "AST-ROUTE-1"
        assert data["status"] == "active"
        assert data["specifications"]["mac_addresses"] == ["AA:BB:CC:DD:EE:FF"]
        assert data["financial"]["capex"]["currency"] == "USD"
        assert data["sku"]["sku_code"] == "ASSET-ROUTE-1"
        assert data["sku"]["catalog"]["name"] == "Asset Route Parent"

    def test_unknown_sku_returns_400(self, api_client: TestClient) -> None:
        resp = api_client.post("/api/v1/assets", json=_asset_body(99999, "ORPHAN-ASSET"))
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "invalid_reference"

    def test_duplicate_tag_returns_409(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Dup Asset Parent")
        sku_id = _create_sku(api_client, catalog_id, "DUP-ASSET-SKU")
        _create_asset(api_client, sku_id, "DUP-TAG")
        resp = api_client.post("/api/v1/assets", json=_asset_body(sku_id, "dup-tag"))
        assert resp.status_code == 409
        assert resp.json()["error"]["message"] == "Asset tag already exists"

    def test_zero_depreciation_period_returns_422(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Zero Period Parent")
        sku_id = _create_sku(api_client, catalog_id, "ZERO-PERIOD")
        body = _asset_body(sku_id, "ZERO-PERIOD-1")
        body["financial"]["capex"]["depreciation_period_years"] = 0
        assert api_client.post("/api/v1/assets", json=body).status_code == 422

    def test_inverted_contract_window_returns_422(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Window Parent")
        sku_id = _create_sku(api_client, catalog_id, "WINDOW-1")
        body = _asset_body(sku_id, "WINDOW-ASSET")
        body["financial"]["opex"]["warranty"][0]["end_date"] = "2019-01-01"
        assert api_client.post("/api/v1/assets", json=body).status_code == 422

    def test_get_unknown_asset_returns_404(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/v1/assets/99999")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "asset_not_found"

    def test_update_asset_location(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Move Parent")
        sku_id = _create_sku(api_client, catalog_id, "MOVE-1")
        asset_id = _create_asset(api_client, sku_id, "MOVE-ASSET")
        resp = api_client.put(
            f"/api/v1/assets/{asset_id}",
            json={"location": {"datacenter": "Dublin DC2", "city": "Dublin", "country": "Ireland"}},
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["location"]["datacenter"] == "Dublin DC2"
        assert resp.json()["asset_tag"] == "MOVE-ASSET"

        listed = api_client.get("/api/v1/assets", params={"datacenter": "dublin"}).json()
        assert [a["id"] for a in listed["assets"]] == [asset_id]

    def test_list_assets_by_environment(self, api_client: TestClient) -> None:
        resp = api_client.get("/api/v1/assets", params={"environment": "backup"})
        assert resp.status_code == 200
        assert resp.json()["assets"] == []

    def test_invalid_environment_filter_returns_422(self, api_client: TestClient) -> None:
        assert api_client.get("/api/v1/assets", params={"environment": "mars"}).status_code == 422

    def test_delete_asset(self, api_client: TestClient) -> None:
        catalog_id = _create_catalog(api_client, "Delete Asset Parent")
        sku_id = _create_sku(api_client, catalog_id, "DEL-ASSET-SKU")
        asset_id = _create_asset(api_client, sku_id, "DEL-ASSET")
        assert api_client.delete(f"/api/v1/assets/{asset_id}").status_code == 200
        assert api_client.delete(f"/api/v1/assets/{asset_id}").status_code == 404


# ---------------------------------------------------------------------------
# Out-of-range identifiers and pages
# ---------------------------------------------------------------------------

# One past the largest value an SQLite INTEGER holds.
_HUGE_ID = "99999999999999999999"


class TestOutOfRangeParameters:
    @pytest.mark.parametrize("collection", ["catalogs", "skus", "assets"])
    def test_huge_path_id_returns_422(self, api_client: TestClient, collection: str) -> None:
        for resp in (
            api_client.get(f"/api/v1/{collection}/{_HUGE_ID}"),
            api_client.put(f"/api/v1/{collection}/{_HUGE_ID}", json={"status": "inactive"}),
            api_client.delete(f"/api/v1/{collection}/{_HUGE_ID}"),
        ):
            assert resp.status_code == 422
            assert resp.json()["error"]["code"] == "validation_error"

    @pytest.mark.parametrize("collection", ["catalogs", "skus", "assets"])
    def test_huge_page_returns_422(self, api_client: TestClient, collection: str) -> None:
        resp = api_client.get(f"/api/v1/{collection}", params={"page": _HUGE_ID})
        assert resp.status_code == 422

    @pytest.mark.parametrize(
        "path, params",
        [
            ("/api/v1/skus", {"catalog_id": _HUGE_ID}),
            ("/api/v1/assets", {"sku_id": _HUGE_ID}),
        ],
    )
    def test_huge_filter_id_returns_422(self, api_client: TestClient, path: str, params: dict) -> None:
        assert api_client.get(path, params=params).status_code == 422

    def test_huge_reference_in_body_returns_422(self, api_client: TestClient) -> None:
        resp = api_client.post("/api/v1/assets", json=_asset_body(int(_HUGE_ID), "HUGE-REF"))
        assert resp.status_code == 422

    def test_largest_id_is_still_a_404(self, api_client: TestClient) -> None:
        resp = api_client.get(f"/api/v1/assets/{2**63 - 1}")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "asset_not_found"
