"""
api/routes/v1/assets.py -- Asset routes for the AssetLedger REST API.

Routes:
  POST   /assets              -- create asset (SKU must exist)
  GET    /assets              -- list assets with SKU and catalog expanded
  GET    /assets/{asset_id}   -- asset detail
  PUT    /assets/{asset_id}   -- partial update; sub-records replaced whole
  DELETE /assets/{asset_id}   -- delete

Financial data is stored as sent. Depreciation and OPEX are never persisted;
they are computed on demand by GET /reports/financial.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter
from api.models import (
    MAX_ID,
    MAX_PAGE,
    AssetCreate,
    AssetListResponse,
    AssetResponse,
    AssetStatusEnum,
    AssetUpdate,
    EnvironmentEnum,
    ErrorDetail,
    MessageResponse,
    Pagination,
)
from api.routes.v1.catalogs import EntityId, page_size
from inventory.store import InventoryStore, MissingReferenceError

router = APIRouter()


def _not_found(asset_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(code="asset_not_found", message=f"Asset {asset_id} not found.").model_dump(),
    )


def _duplicate() -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=ErrorDetail(code="duplicate_asset", message="Asset tag already exists").model_dump(),
    )


def _invalid_sku(exc: MissingReferenceError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail=ErrorDetail(code="invalid_reference", message="Invalid SKU ID", detail=str(exc)).model_dump(),
    )


# ---------------------------------------------------------------------------
# POST /assets -- create a new asset
# ---------------------------------------------------------------------------


@limiter.limit("30/minute")
@router.post("/assets", response_model=AssetResponse, status_code=201)
def create_asset(request: Request, body: AssetCreate) -> AssetResponse:
    """Register a deployed unit of an existing SKU. asset_tag must be unique."""
    store: InventoryStore = request.app.state.store
    try:
        asset_id = store.create_asset(body.to_domain())
    except MissingReferenceError as exc:
        raise _invalid_sku(exc)
    except IntegrityError:
        raise _duplicate()
    return AssetResponse.from_domain(store.get_asset(asset_id))


# ---------------------------------------------------------------------------
# GET /assets -- list assets
# ---------------------------------------------------------------------------


@limiter.limit("60/minute")
@router.get("/assets", response_model=AssetListResponse)
def list_assets(
    request: Request,
    search: str = "",
    sku_id: Optional[int] = Query(default=None, ge=1, le=MAX_ID),
    status: Optional[AssetStatusEnum] = None,
    datacenter: str = "",
    environment: Optional[EnvironmentEnum] = None,
    page: int = Query(default=1, ge=1, le=MAX_PAGE),
    limit: Optional[int] = Query(default=None, ge=1),
) -> AssetListResponse:
    """Return one page of assets, newest first.

    search matches name, asset tag, serial number and hostname.
    """
    store: InventoryStore = request.app.state.store
    size = page_size(limit)
    assets, total = store.list_assets(
        search=search.strip(),
        sku_id=sku_id,
        status=status.value if status else "",
        datacenter=datacenter.strip(),
        environment=environment.value if environment else "",
        page=page,
        limit=size,
    )
    return AssetListResponse(
        assets=[AssetResponse.from_domain(a) for a in assets],
        pagination=Pagination.build(page, size, total),
    )


# ---------------------------------------------------------------------------
# GET /assets/{asset_id}
# ---------------------------------------------------------------------------


@limiter.limit("60/minute")
@router.get("/assets/{asset_id}", response_model=AssetResponse)
def get_asset(request: Request, asset_id: EntityId) -> AssetResponse:
    store: InventoryStore = request.app.state.store
    asset = store.get_asset(asset_id)
    if asset is None:
        raise _not_found(asset_id)
    return AssetResponse.from_domain(asset)


# ---------------------------------------------------------------------------
# PUT /assets/{asset_id}
# ---------------------------------------------------------------------------


@limiter.limit("30/minute")
@router.put("/assets/{asset_id}", response_model=AssetResponse)
def update_asset(request: Request, asset_id: EntityId, body: AssetUpdate) -> AssetResponse:
    store: InventoryStore = request.app.state.store
    try:
        updated = store.update_asset(asset_id, **body.to_fields())
    except MissingReferenceError as exc:
        raise _invalid_sku(exc)
    except IntegrityError:
        raise _duplicate()
    if not updated:
        raise _not_found(asset_id)
    return AssetResponse.from_domain(store.get_asset(asset_id))


# ---------------------------------------------------------------------------
# DELETE /assets/{asset_id}
# ---------------------------------------------------------------------------


@limiter.limit("30/minute")
@router.delete("/assets/{asset_id}", response_model=MessageResponse)
def delete_asset(request: Request, asset_id: EntityId) -> MessageResponse:
    store: InventoryStore = request.app.state.store
    if not store.delete_asset(asset_id):
        raise _not_found(asset_id)
    return MessageResponse(message="Asset deleted successfully")
