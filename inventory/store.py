"""
inventory/store.py -- SQLAlchemy-backed persistence layer for the AssetLedger inventory.

Uses SQLAlchemy Core (not ORM) so the domain dataclasses in core/models.py
remain the authoritative domain representation. SQLAlchemy provides a
database-agnostic abstraction: swapping SQLite for PostgreSQL is a connection
string change, not a rewrite.

Pattern: Repository + Data Mapper. InventoryStore is the repository (one clean
interface per entity). The _row_to_* functions are the mappers (they translate
raw DB rows into domain dataclasses). Route handlers never touch SQL directly.

Embedded sub-records (an asset's location, financial, deployment and
specifications; a SKU's pricing, warranty and specifications; a catalog's
attributes) are stored as JSON text. Fields that list endpoints filter on are
copied into their own columns (datacenter, environment, hostname,
go_live_date) and kept in sync on every write.

Referential integrity is enforced here rather than by the database:
  - a SKU must point at an existing catalog, an asset at an existing SKU
    (MissingReferenceError)
  - a catalog with SKUs, or a SKU with assets, cannot be deleted
    (EntityInUseError)
Uniqueness (catalog name+manufacturer, sku_code, asset_tag) is enforced by the
database and surfaces as sqlalchemy.exc.IntegrityError.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = InventoryStore()                               # SQLite default
    store = InventoryStore("postgresql://user:pw@host/db") # PostgreSQL
    catalog_id = store.create_catalog(catalog)
    assets, total = store.list_assets(status="active", page=1, limit=25)
    store.close()
"""

import json
import logging
from dataclasses import asdict
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional

from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
    event,
    func,
    or_,
    select,
    text,
)
from sqlalchemy.engine import Engine

from core.models import (
    SKU,
    Asset,
    AssetSpecifications,
    Capex,
    Catalog,
    CatalogAttributes,
    CatalogReference,
    Deployment,
    Dimensions,
    ExpandedCatalog,
    ExpandedSku,
    Financial,
    Location,
    MaintenanceContract,
    Opex,
    Pricing,
    SkuReference,
    SkuSpecifications,
    WarrantyContract,
    WarrantyTerms,
)

logger = logging.getLogger("assetledger.store")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).parent / 'assetledger.db'}"


class EntityInUseError(Exception):
    """Raised when deleting a record that other records still reference."""


class MissingReferenceError(Exception):
    """Raised when a record points at a catalog or SKU that does not exist."""


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_catalogs = Table(
    "catalogs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False),
    Column("description", String(500), nullable=False),
    Column("category", String(30), nullable=False),
    Column("manufacturer", String(100), nullable=False),
    Column("status", String(20), nullable=False, server_default="active"),
    Column("attributes", Text),  # JSON object
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    UniqueConstraint("name", "manufacturer", name="uq_catalog_name_manufacturer"),
)

_skus = Table(
    "skus",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("catalog_id", Integer, nullable=False, index=True),
    Column("sku_code", String(50), nullable=False, unique=True),
    Column("name", String(150), nullable=False),
    Column("model_name", String(100), nullable=False),
    Column("description", String(1000), nullable=False),
    Column("manufacturer", String(100), nullable=False),
    Column("status", String(20), nullable=False, server_default="active"),
    Column("specifications", Text),  # JSON object
    Column("pricing", Text, nullable=False),  # JSON object
    Column("warranty", Text),  # JSON object
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

_assets = Table(
    "assets",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("sku_id", Integer, nullable=False, index=True),
    Column("asset_tag", String(50), nullable=False, unique=True),
    Column("serial_number", String(100), nullable=False),
    Column("name", String(150), nullable=False),
    Column("status", String(20), nullable=False, server_default="active"),
    # Filter columns -- copies of values inside the JSON sub-records
    Column("datacenter", String(100), index=True),
    Column("environment", String(20)),
    Column("hostname", String(255)),
    Column("go_live_date", String(10), index=True),  # YYYY-MM-DD
    # Embedded sub-records
    Column("location", Text, nullable=False),
    Column("financial", Text, nullable=False),
    Column("deployment", Text, nullable=False),
    Column("specifications", Text),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _json_default(value: Any) -> str:
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Cannot serialise {type(value).__name__}")


def _dump(obj: Any) -> str:
    """Serialise a dataclass sub-record to JSON text (dates as YYYY-MM-DD)."""
    return json.dumps(asdict(obj), default=_json_default)


def _load(raw: Optional[str]) -> dict:
    return json.loads(raw) if raw else {}


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _page_bounds(page: int, limit: int) -> tuple[int, int]:
    page = max(1, page)
    limit = max(1, limit)
    return (page - 1) * limit, limit


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Write-side column mapping
# ---------------------------------------------------------------------------


def _catalog_values(fields: dict) -> dict:
    values = dict(fields)
    if "attributes" in values:
        values["attributes"] = _dump(values["attributes"])
    return values


def _sku_values(fields: dict) -> dict:
    values = dict(fields)
    if "catalog" in values:
        values["catalog_id"] = values.pop("catalog").id
    for key in ("specifications", "pricing", "warranty"):
        if key in values:
            values[key] = _dump(values[key])
    return values


def _asset_values(fields: dict) -> dict:
    """Translate Asset field names to columns, keeping the filter copies in sync."""
    values = dict(fields)
    if "sku" in values:
        values["sku_id"] = values.pop("sku").id
    if "location" in values:
        values["datacenter"] = values["location"].datacenter
        values["location"] = _dump(values["location"])
    if "deployment" in values:
        values["environment"] = values["deployment"].environment
        values["go_live_date"] = values["deployment"].go_live_date.isoformat()
        values["deployment"] = _dump(values["deployment"])
    if "specifications" in values:
        values["hostname"] = values["specifications"].hostname
        values["specifications"] = _dump(values["specifications"])
    if "financial" in values:
        values["financial"] = _dump(values["financial"])
    return values


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class InventoryStore:
    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # SQLite requires check_same_thread=False when used from FastAPI's
            # thread pool, where one connection may be touched by several threads.
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    # ------------------------------------------------------------------
    # Catalogs
    # ------------------------------------------------------------------

    def create_catalog(self, catalog: Catalog) -> int:
        """Insert a catalog and return its ID.

        Raises sqlalchemy.exc.IntegrityError if (name, manufacturer) is taken.
        """
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _catalogs.insert().values(
                    name=catalog.name,
                    description=catalog.description,
                    category=catalog.category,
                    manufacturer=catalog.manufacturer,
                    status=catalog.status,
                    attributes=_dump(catalog.attributes),
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            catalog_id = result.inserted_primary_key[0]
        logger.info("Created catalog %d (%s / %s)", catalog_id, catalog.manufacturer, catalog.name)
        return catalog_id

    def get_catalog(self, catalog_id: int) -> Optional[Catalog]:
        """Fetch a catalog with its SKU count. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_catalogs.select().where(_catalogs.c.id == catalog_id)).fetchone()
            if row is None:
                return None
            counts = self._sku_counts(conn, [catalog_id])
        return _row_to_catalog(row, counts.get(catalog_id, 0))

    def list_catalogs(
        self,
        search: str = "",
        category: str = "",
        status: str = "",
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Catalog], int]:
        """Return (one page of catalogs newest first, total matching count).

        search matches name, description or manufacturer, case-insensitive.
        """
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    _catalogs.c.name.ilike(pattern),
                    _catalogs.c.description.ilike(pattern),
                    _catalogs.c.manufacturer.ilike(pattern),
                )
            )
        if category:
            conditions.append(_catalogs.c.category == category)
        if status:
            conditions.append(_catalogs.c.status == status)

        offset, limit = _page_bounds(page, limit)
        stmt = (
            _catalogs.select()
            .where(*conditions)
            .order_by(_catalogs.c.created_at.desc(), _catalogs.c.id.desc())
            .offset(offset)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(_catalogs).where(*conditions)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
            total = conn.execute(count_stmt).scalar_one()
            counts = self._sku_counts(conn, [r.id for r in rows])
        return [_row_to_catalog(r, counts.get(r.id, 0)) for r in rows], total

    def update_catalog(self, catalog_id: int, **fields) -> bool:
        """Update any subset of: name, description, category, manufacturer, status, attributes.

        Returns True if a row was updated, False if catalog_id was not found.
        Raises sqlalchemy.exc.IntegrityError on a (name, manufacturer) clash.
        """
        values = _catalog_values(fields)
        values["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(_catalogs.update().where(_catalogs.c.id == catalog_id).values(**values))
            conn.commit()
        return result.rowcount > 0

    def delete_catalog(self, catalog_id: int) -> bool:
        """Delete a catalog. Returns False if it does not exist.

        Raises EntityInUseError while any SKU still references it.
        """
        with self.engine.connect() as conn:
            in_use = conn.execute(
                select(func.count()).select_from(_skus).where(_skus.c.catalog_id == catalog_id)
            ).scalar_one()
            if in_use:
                logger.info("Refused to delete catalog %d: %d SKU(s) reference it", catalog_id, in_use)
                raise EntityInUseError("Cannot delete catalog with associated SKUs")
            result = conn.execute(_catalogs.delete().where(_catalogs.c.id == catalog_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # SKUs
    # ------------------------------------------------------------------

    def create_sku(self, sku: SKU) -> int:
        """Insert a SKU and return its ID.

        Raises MissingReferenceError if the catalog does not exist and
        sqlalchemy.exc.IntegrityError if sku_code is taken.
        """
        now = _now_iso()
        with self.engine.connect() as conn:
            self._require_catalog(conn, sku.catalog.id)
            result = conn.execute(
                _skus.insert().values(
                    catalog_id=sku.catalog.id,
                    sku_code=sku.sku_code.upper(),
                    name=sku.name,
                    model_name=sku.model_name,
                    description=sku.description,
                    manufacturer=sku.manufacturer,
                    status=sku.status,
                    specifications=_dump(sku.specifications),
                    pricing=_dump(sku.pricing),
                    warranty=_dump(sku.warranty),
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_sku(self, sku_id: int) -> Optional[SKU]:
        """Fetch a SKU with its catalog expanded and its asset count. None if not found."""
        with self.engine.connect() as conn:
            skus = self._load_skus(conn, [sku_id])
        return skus.get(sku_id)

    def list_skus(
        self,
        search: str = "",
        catalog_id: Optional[int] = None,
        manufacturer: str = "",
        status: str = "",
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[SKU], int]:
        """Return (one page of SKUs newest first, total matching count).

        search matches name, sku_code, model_name or description; manufacturer
        is a case-insensitive substring match.
        """
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    _skus.c.name.ilike(pattern),
                    _skus.c.sku_code.ilike(pattern),
                    _skus.c.model_name.ilike(pattern),
                    _skus.c.description.ilike(pattern),
                )
            )
        if catalog_id is not None:
            conditions.append(_skus.c.catalog_id == catalog_id)
        if manufacturer:
            conditions.append(_skus.c.manufacturer.ilike(f"%{manufacturer}%"))
        if status:
            conditions.append(_skus.c.status == status)

        offset, limit = _page_bounds(page, limit)
        stmt = (
            select(_skus.c.id)
            .where(*conditions)
            .order_by(_skus.c.created_at.desc(), _skus.c.id.desc())
            .offset(offset)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(_skus).where(*conditions)
        with self.engine.connect() as conn:
            ids = [r.id for r in conn.execute(stmt).fetchall()]
            total = conn.execute(count_stmt).scalar_one()
            skus = self._load_skus(conn, ids)
        return [skus[i] for i in ids], total

    def update_sku(self, sku_id: int, **fields) -> bool:
        """Update any subset of SKU fields. catalog must be a CatalogRef if given.

        Returns True if a row was updated, False if sku_id was not found.
        Raises MissingReferenceError for an unknown catalog.
        """
        if "sku_code" in fields:
            fields["sku_code"] = fields["sku_code"].upper()
        values = _sku_values(fields)
        values["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            if "catalog_id" in values:
                self._require_catalog(conn, values["catalog_id"])
            result = conn.execute(_skus.update().where(_skus.c.id == sku_id).values(**values))
            conn.commit()
        return result.rowcount > 0

    def delete_sku(self, sku_id: int) -> bool:
        """Delete a SKU. Returns False if it does not exist.

        Raises EntityInUseError while any asset still references it.
        """
        with self.engine.connect() as conn:
            in_use = conn.execute(
                select(func.count()).select_from(_assets).where(_assets.c.sku_id == sku_id)
            ).scalar_one()
            if in_use:
                logger.info("Refused to delete SKU %d: %d asset(s) reference it", sku_id, in_use)
                raise EntityInUseError("Cannot delete SKU with associated assets")
            result = conn.execute(_skus.delete().where(_skus.c.id == sku_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def create_asset(self, asset: Asset) -> int:
        """Insert an asset and return its ID.

        Raises MissingReferenceError if the SKU does not exist and
        sqlalchemy.exc.IntegrityError if asset_tag is taken.
        """
        now = _now_iso()
        values = _asset_values(
            {
                "sku": asset.sku,
                "asset_tag": asset.asset_tag.upper(),
                "serial_number": asset.serial_number,
                "name": asset.name,
                "status": asset.status,
                "location": asset.location,
                "financial": asset.financial,
                "deployment": asset.deployment,
                "specifications": asset.specifications,
            }
        )
        with self.engine.connect() as conn:
            self._require_sku(conn, values["sku_id"])
            result = conn.execute(_assets.insert().values(created_at=now, updated_at=now, **values))
            conn.commit()
            return result.inserted_primary_key[0]

    def get_asset(self, asset_id: int) -> Optional[Asset]:
        """Fetch an asset with its SKU (and the SKU's catalog) expanded. None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_assets.select().where(_assets.c.id == asset_id)).fetchone()
            if row is None:
                return None
            skus = self._load_skus(conn, [row.sku_id])
        return _row_to_asset(row, skus)

    def list_assets(
        self,
        search: str = "",
        sku_id: Optional[int] = None,
        status: str = "",
        datacenter: str = "",
        environment: str = "",
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Asset], int]:
        """Return (one page of assets newest first, total matching count).

        search matches name, asset_tag, serial_number or hostname;
        datacenter is a case-insensitive substring match.
        """
        conditions = []
        if search:
            pattern = f"%{search}%"
            conditions.append(
                or_(
                    _assets.c.name.ilike(pattern),
                    _assets.c.asset_tag.ilike(pattern),
                    _assets.c.serial_number.ilike(pattern),
                    _assets.c.hostname.ilike(pattern),
                )
            )
        if sku_id is not None:
            conditions.append(_assets.c.sku_id == sku_id)
        if status:
            conditions.append(_assets.c.status == status)
        if datacenter:
            conditions.append(_assets.c.datacenter.ilike(f"%{datacenter}%"))
        if environment:
            conditions.append(_assets.c.environment == environment)

        offset, limit = _page_bounds(page, limit)
        stmt = (
            _assets.select()
            .where(*conditions)
            .order_by(_assets.c.created_at.desc(), _assets.c.id.desc())
            .offset(offset)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(_assets).where(*conditions)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
            total = conn.execute(count_stmt).scalar_one()
            skus = self._load_skus(conn, list({r.sku_id for r in rows}))
        return [_row_to_asset(r, skus) for r in rows], total

    def get_assets_for_report(self, asset_ids: Optional[list[int]] = None) -> list[Asset]:
        """Return every asset (or only asset_ids when given), SKUs expanded, oldest go-live first.

        Unknown IDs are ignored. Report builders need the whole portfolio, so
        this bypasses pagination.
        """
        stmt = _assets.select().order_by(_assets.c.go_live_date, _assets.c.id)
        if asset_ids:
            stmt = stmt.where(_assets.c.id.in_(asset_ids))
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
            skus = self._load_skus(conn, list({r.sku_id for r in rows}))
        return [_row_to_asset(r, skus) for r in rows]

    def update_asset(self, asset_id: int, **fields) -> bool:
        """Update any subset of Asset fields; sub-records are replaced whole.

        sku must be a SkuRef if given. Returns True if a row was updated,
        False if asset_id was not found. Raises MissingReferenceError for an
        unknown SKU and sqlalchemy.exc.IntegrityError for a duplicate tag.
        """
        if "asset_tag" in fields:
            fields["asset_tag"] = fields["asset_tag"].upper()
        values = _asset_values(fields)
        values["updated_at"] = _now_iso()
        with self.engine.connect() as conn:
            if "sku_id" in values:
                self._require_sku(conn, values["sku_id"])
            result = conn.execute(_assets.update().where(_assets.c.id == asset_id).values(**values))
            conn.commit()
        return result.rowcount > 0

    def delete_asset(self, asset_id: int) -> bool:
        """Delete an asset. Returns False if it does not exist."""
        with self.engine.connect() as conn:
            result = conn.execute(_assets.delete().where(_assets.c.id == asset_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _require_catalog(conn, catalog_id: int) -> None:
        found = conn.execute(select(_catalogs.c.id).where(_catalogs.c.id == catalog_id)).fetchone()
        if found is None:
            raise MissingReferenceError(f"Catalog {catalog_id} does not exist")

    @staticmethod
    def _require_sku(conn, sku_id: int) -> None:
        found = conn.execute(select(_skus.c.id).where(_skus.c.id == sku_id)).fetchone()
        if found is None:
            raise MissingReferenceError(f"SKU {sku_id} does not exist")

    @staticmethod
    def _sku_counts(conn, catalog_ids: list[int]) -> dict[int, int]:
        if not catalog_ids:
            return {}
        rows = conn.execute(
            select(_skus.c.catalog_id, func.count().label("n"))
            .where(_skus.c.catalog_id.in_(catalog_ids))
            .group_by(_skus.c.catalog_id)
        ).fetchall()
        return {r.catalog_id: r.n for r in rows}

    @staticmethod
    def _asset_counts(conn, sku_ids: list[int]) -> dict[int, int]:
        if not sku_ids:
            return {}
        rows = conn.execute(
            select(_assets.c.sku_id, func.count().label("n"))
            .where(_assets.c.sku_id.in_(sku_ids))
            .group_by(_assets.c.sku_id)
        ).fetchall()
        return {r.sku_id: r.n for r in rows}

    def _load_skus(self, conn, sku_ids: list[int]) -> dict[int, SKU]:
        """Load SKUs by ID with catalogs expanded, in three queries regardless of count."""
        if not sku_ids:
            return {}
        sku_rows = conn.execute(_skus.select().where(_skus.c.id.in_(sku_ids))).fetchall()
        catalog_ids = list({r.catalog_id for r in sku_rows})
        catalog_rows = (
            conn.execute(_catalogs.select().where(_catalogs.c.id.in_(catalog_ids))).fetchall() if catalog_ids else []
        )
        catalogs = {r.id: _row_to_catalog(r) for r in catalog_rows}
        asset_counts = self._asset_counts(conn, [r.id for r in sku_rows])
        return {r.id: _row_to_sku(r, catalogs, asset_counts.get(r.id, 0)) for r in sku_rows}


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern -- DB row -> domain dataclass)
# ---------------------------------------------------------------------------


def _row_to_catalog(row, sku_count: int = 0) -> Catalog:
    attrs = _load(row.attributes)
    return Catalog(
        id=row.id,
        name=row.name,
        description=row.description,
        category=row.category,
        manufacturer=row.manufacturer,
        status=row.status,
        attributes=CatalogAttributes(
            form_factor=attrs.get("form_factor"),
            power_consumption=attrs.get("power_consumption"),
            rack_units=attrs.get("rack_units"),
            warranty=attrs.get("warranty"),
            certifications=attrs.get("certifications") or [],
        ),
        sku_count=sku_count,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_sku(row, catalogs: dict[int, Catalog], asset_count: int = 0) -> SKU:
    specs = _load(row.specifications)
    pricing = _load(row.pricing)
    warranty = _load(row.warranty)
    catalog = catalogs.get(row.catalog_id)
    return SKU(
        id=row.id,
        catalog=ExpandedCatalog(catalog) if catalog is not None else CatalogReference(row.catalog_id),
        sku_code=row.sku_code,
        name=row.name,
        model_name=row.model_name,
        description=row.description,
        manufacturer=row.manufacturer,
        status=row.status,
        specifications=SkuSpecifications(
            cpu=specs.get("cpu"),
            memory=specs.get("memory"),
            storage=specs.get("storage"),
            network_ports=specs.get("network_ports"),
            power_supply=specs.get("power_supply"),
            dimensions=Dimensions(**(specs.get("dimensions") or {})),
            operating_system=specs.get("operating_system"),
            supported_os=specs.get("supported_os") or [],
        ),
        pricing=Pricing(
            effective_date=_parse_date(pricing["effective_date"]),
            msrp=pricing.get("msrp"),
            currency=pricing.get("currency", "USD"),
            end_date=_parse_date(pricing.get("end_date")),
        ),
        warranty=WarrantyTerms(
            standard=warranty.get("standard", 1),
            extended=warranty.get("extended"),
            support=warranty.get("support"),
        ),
        asset_count=asset_count,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _contract_kwargs(raw: dict) -> dict:
    return {
        "cost": raw["cost"],
        "start_date": _parse_date(raw["start_date"]),
        "end_date": _parse_date(raw["end_date"]),
        "vendor": raw["vendor"],
        "type": raw["type"],
        "currency": raw.get("currency", "USD"),
    }


def _row_to_asset(row, skus: dict[int, SKU]) -> Asset:
    location = _load(row.location)
    financial = _load(row.financial)
    deployment = _load(row.deployment)
    specs = _load(row.specifications)
    capex = financial["capex"]
    opex = financial.get("opex") or {}
    sku = skus.get(row.sku_id)

    return Asset(
        id=row.id,
        sku=ExpandedSku(sku) if sku is not None else SkuReference(row.sku_id),
        asset_tag=row.asset_tag,
        serial_number=row.serial_number,
        name=row.name,
        status=row.status,
        location=Location(**location),
        financial=Financial(
            capex=Capex(
                purchase_price=capex["purchase_price"],
                purchase_date=_parse_date(capex["purchase_date"]),
                vendor=capex["vendor"],
                currency=capex.get("currency", "USD"),
                po_number=capex.get("po_number"),
                depreciation_period_years=capex.get("depreciation_period_years", 4),
            ),
            opex=Opex(
                warranty=[WarrantyContract(**_contract_kwargs(w)) for w in opex.get("warranty") or []],
                maintenance=[MaintenanceContract(**_contract_kwargs(m)) for m in opex.get("maintenance") or []],
            ),
        ),
        deployment=Deployment(
            go_live_date=_parse_date(deployment["go_live_date"]),
            environment=deployment.get("environment", "production"),
            installation_date=_parse_date(deployment.get("installation_date")),
            commissioning_date=_parse_date(deployment.get("commissioning_date")),
            assigned_to=deployment.get("assigned_to"),
            purpose=deployment.get("purpose"),
        ),
        specifications=AssetSpecifications(
            hostname=specs.get("hostname"),
            ip_addresses=specs.get("ip_addresses") or [],
            mac_addresses=specs.get("mac_addresses") or [],
            configured_memory=specs.get("configured_memory"),
            configured_storage=specs.get("configured_storage"),
            installed_os=specs.get("installed_os"),
            custom_specs=specs.get("custom_specs") or {},
        ),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
