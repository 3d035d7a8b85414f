"""
core/models.py -- Domain dataclasses for the AssetLedger inventory.

These are pure data containers with zero logic. Financial calculations live in
core/financial.py; persistence lives in inventory/store.py; HTTP shapes live
in api/models.py. Every layer agrees on these types.

Ownership:
  Asset owns its location, deployment, specifications and financial records.
  SKU and Catalog are referenced, never owned. A reference is either a bare
  id or the expanded entity, modelled explicitly as a tagged union so callers
  never have to guess the shape of a loaded record.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Union

# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

CATALOG_CATEGORIES = (
    "server",
    "network-switch",
    "firewall",
    "storage",
    "laptop",
    "desktop",
    "monitor",
    "printer",
    "other",
)
PRODUCT_STATUSES = ("active", "inactive", "discontinued")
ASSET_STATUSES = ("active", "inactive", "maintenance", "retired", "disposed")
ENVIRONMENTS = ("production", "staging", "development", "testing", "backup")
WARRANTY_TYPES = ("basic", "premium", "onsite", "next-business-day")

DEFAULT_CURRENCY = "USD"
DEFAULT_DEPRECIATION_YEARS = 4


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@dataclass
class CatalogAttributes:
    form_factor: Optional[str] = None
    power_consumption: Optional[float] = None  # watts
    rack_units: Optional[int] = None
    warranty: Optional[str] = None
    certifications: list[str] = field(default_factory=list)


@dataclass
class Catalog:
    """A product family (e.g. "Enterprise Servers" from one manufacturer).

    (name, manufacturer) is unique. id is None before the record is written.
    sku_count is filled in by the store on reads and ignored on writes.
    """

    name: str
    description: str
    category: str  # one of CATALOG_CATEGORIES
    manufacturer: str
    status: str = "active"
    attributes: CatalogAttributes = field(default_factory=CatalogAttributes)
    id: Optional[int] = None
    sku_count: int = 0
    created_at: str = ""  # ISO 8601, set by store
    updated_at: str = ""


@dataclass(frozen=True)
class CatalogReference:
    """A catalog known only by id."""

    id: int


@dataclass(frozen=True)
class ExpandedCatalog:
    """A catalog loaded alongside the record that references it."""

    catalog: Catalog

    @property
    def id(self) -> int:
        return self.catalog.id


CatalogRef = Union[CatalogReference, ExpandedCatalog]


# ---------------------------------------------------------------------------
# SKU
# ---------------------------------------------------------------------------


@dataclass
class Dimensions:
    height: Optional[float] = None
    width: Optional[float] = None
    depth: Optional[float] = None
    weight: Optional[float] = None


@dataclass
class SkuSpecifications:
    cpu: Optional[str] = None
    memory: Optional[str] = None
    storage: Optional[str] = None
    network_ports: Optional[int] = None
    power_supply: Optional[str] = None
    dimensions: Dimensions = field(default_factory=Dimensions)
    operating_system: Optional[str] = None
    supported_os: list[str] = field(default_factory=list)


@dataclass
class Pricing:
    effective_date: date
    msrp: Optional[float] = None
    currency: str = DEFAULT_CURRENCY
    end_date: Optional[date] = None


@dataclass
class WarrantyTerms:
    standard: int = 1  # years
    extended: Optional[int] = None  # years
    support: Optional[str] = None


@dataclass
class SKU:
    """A purchasable model within exactly one catalog. sku_code is unique."""

    catalog: CatalogRef
    sku_code: str
    name: str
    model_name: str
    description: str
    manufacturer: str
    pricing: Pricing
    status: str = "active"
    specifications: SkuSpecifications = field(default_factory=SkuSpecifications)
    warranty: WarrantyTerms = field(default_factory=WarrantyTerms)
    id: Optional[int] = None
    asset_count: int = 0
    created_at: str = ""
    updated_at: str = ""


@dataclass(frozen=True)
class SkuReference:
    """A SKU known only by id."""

    id: int


@dataclass(frozen=True)
class ExpandedSku:
    """A SKU loaded alongside the asset that references it."""

    sku: SKU

    @property
    def id(self) -> int:
        return self.sku.id


SkuRef = Union[SkuReference, ExpandedSku]


# ---------------------------------------------------------------------------
# Asset -- financial sub-record
# ---------------------------------------------------------------------------


@dataclass
class Capex:
    """One-time purchase cost, depreciated straight-line over the period."""

    purchase_price: float
    purchase_date: date
    vendor: str
    currency: str = DEFAULT_CURRENCY
    po_number: Optional[str] = None
    depreciation_period_years: int = DEFAULT_DEPRECIATION_YEARS


@dataclass
class WarrantyContract:
    """cost is an ANNUAL figure."""

    cost: float
    start_date: date
    end_date: date
    vendor: str
    type: str  # one of WARRANTY_TYPES
    currency: str = DEFAULT_CURRENCY


@dataclass
class MaintenanceContract:
    """cost is the TOTAL over the contract period, not an annual figure."""

    cost: float
    start_date: date
    end_date: date
    vendor: str
    type: str
    currency: str = DEFAULT_CURRENCY


@dataclass
class Opex:
    warranty: list[WarrantyContract] = field(default_factory=list)
    maintenance: list[MaintenanceContract] = field(default_factory=list)


@dataclass
class Financial:
    capex: Capex
    opex: Opex = field(default_factory=Opex)


# ---------------------------------------------------------------------------
# Asset -- descriptive sub-records
# ---------------------------------------------------------------------------


@dataclass
class Location:
    datacenter: str
    city: str
    country: str
    rack: Optional[str] = None
    rack_unit: Optional[str] = None
    floor: Optional[str] = None
    building: Optional[str] = None


@dataclass
class Deployment:
    go_live_date: date
    environment: str = "production"  # one of ENVIRONMENTS
    installation_date: Optional[date] = None
    commissioning_date: Optional[date] = None
    assigned_to: Optional[str] = None
    purpose: Optional[str] = None


@dataclass
class AssetSpecifications:
    hostname: Optional[str] = None
    ip_addresses: list[str] = field(default_factory=list)
    mac_addresses: list[str] = field(default_factory=list)
    configured_memory: Optional[str] = None
    configured_storage: Optional[str] = None
    installed_os: Optional[str] = None
    custom_specs: dict = field(default_factory=dict)


@dataclass
class Asset:
    """One physically deployed unit of a SKU.

    The financial calculation engine reads only asset_tag, deployment.go_live_date
    and the financial sub-record. Everything else is inventory bookkeeping.

    id is None before the record is written to the database.
    """

    sku: SkuRef
    asset_tag: str
    serial_number: str
    name: str
    location: Location
    financial: Financial
    deployment: Deployment
    status: str = "active"  # one of ASSET_STATUSES
    specifications: AssetSpecifications = field(default_factory=AssetSpecifications)
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""
