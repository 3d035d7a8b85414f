"""
tests/test_cli.py -- Tests for the main.py report command.

Runs main() in-process against a named shared-memory store seeded through
InventoryStore, and checks output formats and the exit code for a forecast
request without dates.
"""

from __future__ import annotations

import json
from datetime import date

import pytest

import main
from core.models import (
    SKU,
    Asset,
    Capex,
    Catalog,
    CatalogReference,
    Deployment,
    Financial,
    Location,
    Pricing,
    SkuReference,
)
from inventory.store import InventoryStore

_DB_URL = "sqlite:///file:test_inventory_cli?mode=memory&cache=shared&uri=true"


@pytest.fixture(scope="module")
def seeded_store():
    """Keep one connection open for the module so the shared-memory DB survives each main() call."""
    store = InventoryStore(_DB_URL)
    catalog_id = store.create_catalog(
        Catalog(name="CLI Servers", description="x", category="server", manufacturer="Dell")
    )
    sku_id = store.create_sku(
        SKU(
            catalog=CatalogReference(catalog_id),
            sku_code="CLI-SKU",
            name="R650",
            model_name="R650",
            description="1U",
            manufacturer="Dell",
            pricing=Pricing(effective_date=date(2020, 1, 1)),
        )
    )
    store.create_asset(
        Asset(
            sku=SkuReference(sku_id),
            asset_tag="CLI-1",
            serial_number="SN-CLI-1",
            name="=cmd",
            location=Location(datacenter="DC1", city="Berlin", country="Germany"),
            financial=Financial(capex=Capex(purchase_price=4800.0, purchase_date=date(2020, 1, 1), vendor="Dell")),
            deployment=Deployment(go_live_date=date(2020, 1, 1)),
        )
    )
    yield store
    store.close()


def test_json_output(seeded_store, capsys) -> None:
    code = main.main(["current-value", "--as-of", "2022-01-01", "--format", "json", "--database-url", _DB_URL])
    assert code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["type"] == "current-value"
    assert report["data"][0]["current_value"] == pytest.approx(2400.0)


def test_csv_output_is_sanitised(seeded_store, capsys) -> None:
    code = main.main(["depreciation-schedule", "--as-of", "2022-01-01", "--format", "csv", "--database-url", _DB_URL])
    assert code == 0
    out = capsys.readouterr().out
    assert "\t=cmd" in out


def test_terminal_forecast(seeded_store, capsys) -> None:
    code = main.main(
        ["forecast", "--start", "2022-01-01", "--end", "2022-03-31", "--no-color", "--database-url", _DB_URL]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "COST FORECAST" in out
    assert "2022-03" in out


def test_forecast_without_dates_exits_non_zero(seeded_store, capsys) -> None:
    code = main.main(["forecast", "--database-url", _DB_URL])
    assert code == 2
    assert "start_date and end_date are required" in capsys.readouterr().err


def test_bad_date_is_an_argument_error(seeded_store) -> None:
    with pytest.raises(SystemExit):
        main.main(["forecast", "--start", "yesterday", "--database-url", _DB_URL])


def test_out_of_range_asset_id_is_an_argument_error(seeded_store) -> None:
    with pytest.raises(SystemExit):
        main.main(["current-value", "--assets", "99999999999999999999", "--database-url", _DB_URL])
