"""
api/routes/v1/skus.py -- SKU routes for the AssetLedger REST API.

Routes:
  POST   /skus            -- create SKU (catalog must exist)
  GET    /skus            -- list SKUs with their catalog expanded
  GET    /skus/{sku_id}   -- SKU detail with asset count
  PUT    /skus/{sku_id}   -- partial update
  DELETE /skus/{sku_id}   -- delete; refused while assets reference it
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter
from api.models import (
    MAX_ID,
    MAX_PAGE,
    ErrorDetail,
    MessageResponse,
    Pagination,
    ProductStatusEnum,
    SkuCreate,
    SkuListResponse,
    SkuResponse,
    SkuUpdate,
)
from api.routes.v1.catalogs import EntityId, page_size
from inventory.store import EntityInUseError, InventoryStore, MissingReferenceError

router = APIRouter()


def _not_found(sku_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(code="sku_not_found", message=f"SKU {sku_id} not found.").model_dump(),
    )


def _duplicate() -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=ErrorDetail(code="duplicate_sku", message="SKU code already exists").model_dump(),
    )


def _invalid_catalog(exc: MissingReferenceError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail=ErrorDetail(code="invalid_reference", message="Invalid catalog ID", detail=str(exc)).model_dump(),
    )


@limiter.limit("30/minute")
@router.post("/skus", response_model=SkuResponse, status_code=201)
def create_sku(request: Request, body: SkuCreate) -> SkuResponse:
    """Register a SKU under an existing catalog. sku_code must be unique."""
    store: InventoryStore = request.app.state.store
    try:
        sku_id = store.create_sku(body.to_domain())
    except MissingReferenceError as exc:
        raise _invalid_catalog(exc)
    except IntegrityError:
        raise _duplicate()
    return SkuResponse.from_domain(store.get_sku(sku_id))


@limiter.limit("60/minute")
@router.get("/skus", response_model=SkuListResponse)
def list_skus(
    request: Request,
    search: str = "",
    catalog_id: Optional[int] = Query(default=None, ge=1, le=MAX_ID),
    manufacturer: str = "",
    status: Optional[ProductStatusEnum] = None,
    page: int = Query(default=1, ge=1, le=MAX_PAGE),
    limit: Optional[int] = Query(default=None, ge=1),
) -> SkuListResponse:
    """Return one page of SKUs, newest first, each with its catalog expanded."""
    store: InventoryStore = request.app.state.store
    size = page_size(limit)
    skus, total = store.list_skus(
        search=search.strip(),
        catalog_id=catalog_id,
        manufacturer=manufacturer.strip(),
        status=status.value if status else "",
        page=page,
        limit=size,
    )
    return SkuListResponse(
        skus=[SkuResponse.from_domain(s) for s in skus],
        pagination=Pagination.build(page, size, total),
    )


@limiter.limit("60/minute")
@router.get("/skus/{sku_id}", response_model=SkuResponse)
def get_sku(request: Request, sku_id: EntityId) -> SkuResponse:
    store: InventoryStore = request.app.state.store
    sku = store.get_sku(sku_id)
    if sku is None:
        raise _not_found(sku_id)
    return SkuResponse.from_domain(sku)


@limiter.limit("30/minute")
@router.put("/skus/{sku_id}", response_model=SkuResponse)
def update_sku(request: Request, sku_id: EntityId, body: SkuUpdate) -> SkuResponse:
    store: InventoryStore = request.app.state.store
    try:
        updated = store.update_sku(sku_id, **body.to_fields())
    except MissingReferenceError as exc:
        raise _invalid_catalog(exc)
    except IntegrityError:
        raise _duplicate()
    if not updated:
        raise _not_found(sku_id)
    return SkuResponse.from_domain(store.get_sku(sku_id))


@limiter.limit("30/minute")
@router.delete("/skus/{sku_id}", response_model=MessageResponse)
def delete_sku(request: Request, sku_id: EntityId) -> MessageResponse:
    """Delete a SKU. Refused with 400 while any asset is still of this SKU."""
    store: InventoryStore = request.app.state.store
    try:
        deleted = store.delete_sku(sku_id)
    except EntityInUseError as exc:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code="sku_in_use", message=str(exc)).model_dump(),
        )
    if not deleted:
        raise _not_found(sku_id)
    return MessageResponse(message="SKU deleted successfully")
