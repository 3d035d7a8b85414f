"""
api/routes/v1/catalogs.py -- Catalog (product family) routes for the AssetLedger REST API.

Routes:
  POST   /catalogs                -- create catalog
  GET    /catalogs                -- list catalogs (search, filters, pagination)
  GET    /catalogs/{catalog_id}   -- catalog detail with SKU count
  PUT    /catalogs/{catalog_id}   -- partial update
  DELETE /catalogs/{catalog_id}   -- delete; refused while SKUs reference it
"""

from typing import Annotated, Optional

from fastapi import APIRouter, HTTPException, Path, Query, Request
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter
from api.models import (
    MAX_ID,
    MAX_PAGE,
    CatalogCreate,
    CatalogListResponse,
    CatalogResponse,
    CatalogUpdate,
    CategoryEnum,
    ErrorDetail,
    MessageResponse,
    Pagination,
    ProductStatusEnum,
)
from core.config import get_settings
from inventory.store import EntityInUseError, InventoryStore

router = APIRouter()

_DUPLICATE_MESSAGE = "A catalog with this name and manufacturer already exists"

# Path parameter for an entity primary key.
EntityId = Annotated[int, Path(ge=1, le=MAX_ID)]


def _not_found(catalog_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ErrorDetail(
            code="catalog_not_found",
            message=f"Catalog {catalog_id} not found.",
        ).model_dump(),
    )


def _duplicate() -> HTTPException:
    return HTTPException(
        status_code=409,
        detail=ErrorDetail(code="duplicate_catalog", message=_DUPLICATE_MESSAGE).model_dump(),
    )


def page_size(limit: Optional[int]) -> int:
    """Resolve the ?limit= parameter against the configured default and maximum."""
    settings = get_settings()
    return min(limit or settings.default_page_size, settings.max_page_size)


# ---------------------------------------------------------------------------
# POST /catalogs
# ---------------------------------------------------------------------------


@limiter.limit("30/minute")
@router.post("/catalogs", response_model=CatalogResponse, status_code=201)
def create_catalog(request: Request, body: CatalogCreate) -> CatalogResponse:
    """Register a new product family. (name, manufacturer) must be unique."""
    store: InventoryStore = request.app.state.store
    try:
        catalog_id = store.create_catalog(body.to_domain())
    except IntegrityError:
        raise _duplicate()
    return CatalogResponse.from_domain(store.get_catalog(catalog_id))


# ---------------------------------------------------------------------------
# GET /catalogs
# ---------------------------------------------------------------------------


@limiter.limit("60/minute")
@router.get("/catalogs", response_model=CatalogListResponse)
def list_catalogs(
    request: Request,
    search: str = "",
    category: Optional[CategoryEnum] = None,
    status: Optional[ProductStatusEnum] = None,
    page: int = Query(default=1, ge=1, le=MAX_PAGE),
    limit: Optional[int] = Query(default=None, ge=1),
) -> CatalogListResponse:
    """Return one page of catalogs, newest first.

    search matches name, description and manufacturer (case-insensitive).
    """
    store: InventoryStore = request.app.state.store
    size = page_size(limit)
    catalogs, total = store.list_catalogs(
        search=search.strip(),
        category=category.value if category else "",
        status=status.value if status else "",
        page=page,
        limit=size,
    )
    return CatalogListResponse(
        catalogs=[CatalogResponse.from_domain(c) for c in catalogs],
        pagination=Pagination.build(page, size, total),
    )


# ---------------------------------------------------------------------------
# GET /catalogs/{catalog_id}
# ---------------------------------------------------------------------------


@limiter.limit("60/minute")
@router.get("/catalogs/{catalog_id}", response_model=CatalogResponse)
def get_catalog(request: Request, catalog_id: EntityId) -> CatalogResponse:
    store: InventoryStore = request.app.state.store
    catalog = store.get_catalog(catalog_id)
    if catalog is None:
        raise _not_found(catalog_id)
    return CatalogResponse.from_domain(catalog)


# ---------------------------------------------------------------------------
# PUT /catalogs/{catalog_id}
# ---------------------------------------------------------------------------


@limiter.limit("30/minute")
@router.put("/catalogs/{catalog_id}", response_model=CatalogResponse)
def update_catalog(request: Request, catalog_id: EntityId, body: CatalogUpdate) -> CatalogResponse:
    """Change the fields present in the body; omitted fields keep their values."""
    store: InventoryStore = request.app.state.store
    try:
        updated = store.update_catalog(catalog_id, **body.to_fields())
    except IntegrityError:
        raise _duplicate()
    if not updated:
        raise _not_found(catalog_id)
    return CatalogResponse.from_domain(store.get_catalog(catalog_id))


# ---------------------------------------------------------------------------
# DELETE /catalogs/{catalog_id}
# ---------------------------------------------------------------------------


@limiter.limit("30/minute")
@router.delete("/catalogs/{catalog_id}", response_model=MessageResponse)
def delete_catalog(request: Request, catalog_id: EntityId) -> MessageResponse:
    """Delete a catalog. Refused with 400 while any SKU still belongs to it."""
    store: InventoryStore = request.app.state.store
    try:
        deleted = store.delete_catalog(catalog_id)
    except EntityInUseError as exc:
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(code="catalog_in_use", message=str(exc)).model_dump(),
        )
    if not deleted:
        raise _not_found(catalog_id)
    return MessageResponse(message="Catalog deleted successfully")
