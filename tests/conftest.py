"""
tests/conftest.py -- Shared test fixtures for AssetLedger tests.

This module provides:
  - _make_test_store(): creates an isolated in-memory inventory DB
  - _patch_lifespan(): wires the test store into app.state, bypassing real startup
  - store: a fresh InventoryStore per test for store-level unit tests
  - api_client: TestClient for API integration tests, one per test module

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.

RATE_LIMIT_ENABLED must be set before api.limiter is imported, otherwise the
shared limiter starts counting and bulk tests receive 429s.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from inventory.store import InventoryStore

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_store(db_suffix: str) -> InventoryStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return InventoryStore(db_url=f"sqlite:///file:test_inventory_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(store: InventoryStore):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-created test store into app.state so routes see an isolated
    in-memory DB rather than the SQLite file next to inventory/store.py.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.store = store
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> Generator[InventoryStore, None, None]:
    """Yield an empty InventoryStore unique to the requesting test."""
    s = _make_test_store(uuid.uuid4().hex)
    yield s
    s.close()


@pytest.fixture(scope="module")
def api_client(request) -> Generator[TestClient, None, None]:
    """Yield a TestClient bound to a store private to the requesting module.

    base_url uses localhost because TrustedHostMiddleware rejects the
    TestClient default host ("testserver").
    """
    test_store = _make_test_store(request.module.__name__.replace(".", "_"))
    app.router.lifespan_context = _patch_lifespan(test_store)

    with TestClient(app, base_url="http://localhost", raise_server_exceptions=True) as client:
        yield client

    test_store.close()
