"""
API request and response models for AssetLedger REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in core/models.py, which
own the internal domain representation. Request models convert themselves with
to_domain() / to_fields(); response models are built with from_domain().

Separation of concerns: core/ models = domain truth; api/ models = API contract.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.models import (
    SKU,
    Asset,
    AssetSpecifications,
    Capex,
    Catalog,
    CatalogAttributes,
    CatalogRef,
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
    SkuRef,
    SkuReference,
    SkuSpecifications,
    WarrantyContract,
    WarrantyTerms,
)

CURRENCY_PATTERN = r"^[A-Za-z]{3}$"

# Largest value an SQLite INTEGER column holds.
MAX_ID = 2**63 - 1
MAX_PAGE = 10_000_000


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class CategoryEnum(str, Enum):
    server = "server"
    network_switch = "network-switch"
    firewall = "firewall"
    storage = "storage"
    laptop = "laptop"
    desktop = "desktop"
    monitor = "monitor"
    printer = "printer"
    other = "other"


class ProductStatusEnum(str, Enum):
    active = "active"
    inactive = "inactive"
    discontinued = "discontinued"


class AssetStatusEnum(str, Enum):
    active = "active"
    inactive = "inactive"
    maintenance = "maintenance"
    retired = "retired"
    disposed = "disposed"


class EnvironmentEnum(str, Enum):
    production = "production"
    staging = "staging"
    development = "development"
    testing = "testing"
    backup = "backup"


class WarrantyTypeEnum(str, Enum):
    basic = "basic"
    premium = "premium"
    onsite = "onsite"
    next_business_day = "next-business-day"


# ---------------------------------------------------------------------------
# Shared base
# ---------------------------------------------------------------------------


class _Body(BaseModel):
    """Base for models that are read from request bodies and written back out.

    use_enum_values stores plain strings so the store never sees Enum members.
    from_attributes lets responses validate straight from domain dataclasses.
    """

    model_config = ConfigDict(str_strip_whitespace=True, use_enum_values=True, from_attributes=True)


def _upper_currency(value):
    return value.upper() if isinstance(value, str) else value


# ---------------------------------------------------------------------------
# Embedded sub-records
# ---------------------------------------------------------------------------


class CatalogAttributesModel(_Body):
    form_factor: Optional[str] = Field(default=None, max_length=50)
    power_consumption: Optional[float] = Field(default=None, ge=0, description="Watts")
    rack_units: Optional[int] = Field(default=None, ge=0)
    warranty: Optional[str] = Field(default=None, max_length=100)
    certifications: list[str] = Field(default_factory=list)

    def to_domain(self) -> CatalogAttributes:
        return CatalogAttributes(**self.model_dump())


class DimensionsModel(_Body):
    height: Optional[float] = Field(default=None, ge=0)
    width: Optional[float] = Field(default=None, ge=0)
    depth: Optional[float] = Field(default=None, ge=0)
    weight: Optional[float] = Field(default=None, ge=0)


class SkuSpecificationsModel(_Body):
    cpu: Optional[str] = None
    memory: Optional[str] = None
    storage: Optional[str] = None
    network_ports: Optional[int] = Field(default=None, ge=0)
    power_supply: Optional[str] = None
    dimensions: DimensionsModel = Field(default_factory=DimensionsModel)
    operating_system: Optional[str] = None
    supported_os: list[str] = Field(default_factory=list)

    def to_domain(self) -> SkuSpecifications:
        values = self.model_dump(exclude={"dimensions"})
        return SkuSpecifications(dimensions=Dimensions(**self.dimensions.model_dump()), **values)


class PricingModel(_Body):
    msrp: Optional[float] = Field(default=None, ge=0)
    currency: str = Field(default="USD", pattern=CURRENCY_PATTERN)
    effective_date: date = Field(default_factory=date.today)
    end_date: Optional[date] = None

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value):
        return _upper_currency(value)

    def to_domain(self) -> Pricing:
        return Pricing(**self.model_dump())


class WarrantyTermsModel(_Body):
    standard: int = Field(default=1, ge=0, description="Years")
    extended: Optional[int] = Field(default=None, ge=0, description="Years")
    support: Optional[str] = None

    def to_domain(self) -> WarrantyTerms:
        return WarrantyTerms(**self.model_dump())


class LocationModel(_Body):
    datacenter: str = Field(min_length=1, max_length=100)
    city: str = Field(min_length=1, max_length=100)
    country: str = Field(min_length=1, max_length=100)
    rack: Optional[str] = None
    rack_unit: Optional[str] = None
    floor: Optional[str] = None
    building: Optional[str] = None

    def to_domain(self) -> Location:
        return Location(**self.model_dump())


class CapexModel(_Body):
    purchase_price: float = Field(ge=0)
    purchase_date: date
    vendor: str = Field(min_length=1, max_length=100)
    currency: str = Field(default="USD", pattern=CURRENCY_PATTERN)
    po_number: Optional[str] = Field(default=None, max_length=50)
    depreciation_period_years: int = Field(default=4, ge=1, le=50)

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value):
        return _upper_currency(value)

    def to_domain(self) -> Capex:
        return Capex(**self.model_dump())


class _ContractModel(_Body):
    cost: float = Field(ge=0)
    start_date: date
    end_date: date
    vendor: str = Field(min_length=1, max_length=100)
    currency: str = Field(default="USD", pattern=CURRENCY_PATTERN)

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value):
        return _upper_currency(value)

    @model_validator(mode="after")
    def check_window(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class WarrantyContractModel(_ContractModel):
    """cost is the ANNUAL warranty fee."""

    type: WarrantyTypeEnum

    def to_domain(self) -> WarrantyContract:
        return WarrantyContract(**self.model_dump())


class MaintenanceContractModel(_ContractModel):
    """cost is the TOTAL over start_date..end_date."""

    type: str = Field(min_length=1, max_length=50)

    def to_domain(self) -> MaintenanceContract:
        return MaintenanceContract(**self.model_dump())


class OpexModel(_Body):
    warranty: list[WarrantyContractModel] = Field(default_factory=list)
    maintenance: list[MaintenanceContractModel] = Field(default_factory=list)


class FinancialModel(_Body):
    capex: CapexModel
    opex: OpexModel = Field(default_factory=OpexModel)

    def to_domain(self) -> Financial:
        return Financial(
            capex=self.capex.to_domain(),
            opex=Opex(
                warranty=[w.to_domain() for w in self.opex.warranty],
                maintenance=[m.to_domain() for m in self.opex.maintenance],
            ),
        )


class DeploymentModel(_Body):
    go_live_date: date
    environment: EnvironmentEnum = EnvironmentEnum.production
    installation_date: Optional[date] = None
    commissioning_date: Optional[date] = None
    assigned_to: Optional[str] = Field(default=None, max_length=100)
    purpose: Optional[str] = Field(default=None, max_length=200)

    def to_domain(self) -> Deployment:
        return Deployment(**self.model_dump())


class AssetSpecificationsModel(_Body):
    hostname: Optional[str] = Field(default=None, max_length=255)
    ip_addresses: list[str] = Field(default_factory=list)
    mac_addresses: list[str] = Field(default_factory=list)
    configured_memory: Optional[str] = None
    configured_storage: Optional[str] = None
    installed_os: Optional[str] = None
    custom_specs: dict = Field(default_factory=dict)

    @field_validator("mac_addresses", mode="before")
    @classmethod
    def normalize_macs(cls, values):
        """Upper-case MAC addresses so lookups are case-insensitive."""
        if isinstance(values, list):
            return [str(v).strip().upper() for v in values]
        return values

    def to_domain(self) -> AssetSpecifications:
        return AssetSpecifications(**self.model_dump())


def _fields_from(model: BaseModel) -> dict:
    """Domain values for the fields a partial-update body actually set.

    Explicit nulls are dropped: every top-level entity field is required.
    Sub-record models are converted with their to_domain().
    """
    fields = {}
    for name in model.model_fields_set:
        value = getattr(model, name)
        if value is None:
            continue
        fields[name] = value.to_domain() if hasattr(value, "to_domain") else value
    return fields


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------


class CatalogCreate(_Body):
    """Request body for POST /api/v1/catalogs."""

    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    category: CategoryEnum
    manufacturer: str = Field(min_length=1, max_length=100)
    status: ProductStatusEnum = ProductStatusEnum.active
    attributes: CatalogAttributesModel = Field(default_factory=CatalogAttributesModel)

    def to_domain(self) -> Catalog:
        return Catalog(
            name=self.name,
            description=self.description,
            category=self.category,
            manufacturer=self.manufacturer,
            status=self.status,
            attributes=self.attributes.to_domain(),
        )


class CatalogUpdate(_Body):
    """Request body for PUT /api/v1/catalogs/{id}. Only the fields sent are changed."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    category: Optional[CategoryEnum] = None
    manufacturer: Optional[str] = Field(default=None, min_length=1, max_length=100)
    status: Optional[ProductStatusEnum] = None
    attributes: Optional[CatalogAttributesModel] = None

    def to_fields(self) -> dict:
        return _fields_from(self)


class CatalogRefResponse(BaseModel):
    """A catalog as seen from a SKU: id always, descriptive fields when expanded."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: Optional[str] = None
    category: Optional[str] = None
    manufacturer: Optional[str] = None

    @classmethod
    def from_domain(cls, ref: CatalogRef) -> "CatalogRefResponse":
        if isinstance(ref, ExpandedCatalog):
            c = ref.catalog
            return cls(id=c.id, name=c.name, category=c.category, manufacturer=c.manufacturer)
        return cls(id=ref.id)


class CatalogResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str
    category: str
    manufacturer: str
    status: str
    attributes: CatalogAttributesModel
    sku_count: int
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, catalog: Catalog) -> "CatalogResponse":
        """Factory Method: the mapping lives beside the output model, not in route handlers."""
        return cls(
            id=catalog.id,
            name=catalog.name,
            description=catalog.description,
            category=catalog.category,
            manufacturer=catalog.manufacturer,
            status=catalog.status,
            attributes=CatalogAttributesModel.model_validate(catalog.attributes),
            sku_count=catalog.sku_count,
            created_at=catalog.created_at,
            updated_at=catalog.updated_at,
        )


# ---------------------------------------------------------------------------
# SKUs
# ---------------------------------------------------------------------------


class SkuCreate(_Body):
    """Request body for POST /api/v1/skus. sku_code is stored upper-case."""

    catalog_id: int = Field(ge=1, le=MAX_ID)
    sku_code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=150)
    model_name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    manufacturer: str = Field(min_length=1, max_length=100)
    status: ProductStatusEnum = ProductStatusEnum.active
    specifications: SkuSpecificationsModel = Field(default_factory=SkuSpecificationsModel)
    pricing: PricingModel = Field(default_factory=PricingModel)
    warranty: WarrantyTermsModel = Field(default_factory=WarrantyTermsModel)

    @field_validator("sku_code", mode="before")
    @classmethod
    def normalize_code(cls, value):
        return value.strip().upper() if isinstance(value, str) else value

    def to_domain(self) -> SKU:
        return SKU(
            catalog=CatalogReference(self.catalog_id),
            sku_code=self.sku_code,
            name=self.name,
            model_name=self.model_name,
            description=self.description,
            manufacturer=self.manufacturer,
            status=self.status,
            specifications=self.specifications.to_domain(),
            pricing=self.pricing.to_domain(),
            warranty=self.warranty.to_domain(),
        )


class SkuUpdate(_Body):
    """Request body for PUT /api/v1/skus/{id}. Only the fields sent are changed."""

    catalog_id: Optional[int] = Field(default=None, ge=1, le=MAX_ID)
    sku_code: Optional[str] = Field(default=None, min_length=1, max_length=50)
    name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    model_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    manufacturer: Optional[str] = Field(default=None, min_length=1, max_length=100)
    status: Optional[ProductStatusEnum] = None
    specifications: Optional[SkuSpecificationsModel] = None
    pricing: Optional[PricingModel] = None
    warranty: Optional[WarrantyTermsModel] = None

    def to_fields(self) -> dict:
        fields = _fields_from(self)
        if "catalog_id" in fields:
            fields["catalog"] = CatalogReference(fields.pop("catalog_id"))
        return fields


class SkuRefResponse(BaseModel):
    """A SKU as seen from an asset: id always, descriptive fields when expanded."""

    model_config = ConfigDict(frozen=True)

    id: int
    sku_code: Optional[str] = None
    name: Optional[str] = None
    model_name: Optional[str] = None
    manufacturer: Optional[str] = None
    catalog: Optional[CatalogRefResponse] = None

    @classmethod
    def from_domain(cls, ref: SkuRef) -> "SkuRefResponse":
        if isinstance(ref, ExpandedSku):
            s = ref.sku
            return cls(
                id=s.id,
                sku_code=s.sku_code,
                name=s.name,
                model_name=s.model_name,
                manufacturer=s.manufacturer,
                catalog=CatalogRefResponse.from_domain(s.catalog),
            )
        return cls(id=ref.id)


class SkuResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    catalog: CatalogRefResponse
    sku_code: str
    name: str
    model_name: str
    description: str
    manufacturer: str
    status: str
    specifications: SkuSpecificationsModel
    pricing: PricingModel
    warranty: WarrantyTermsModel
    asset_count: int
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, sku: SKU) -> "SkuResponse":
        return cls(
            id=sku.id,
            catalog=CatalogRefResponse.from_domain(sku.catalog),
            sku_code=sku.sku_code,
            name=sku.name,
            model_name=sku.model_name,
            description=sku.description,
            manufacturer=sku.manufacturer,
            status=sku.status,
            specifications=SkuSpecificationsModel.model_validate(sku.specifications),
            pricing=PricingModel.model_validate(sku.pricing),
            warranty=WarrantyTermsModel.model_validate(sku.warranty),
            asset_count=sku.asset_count,
            created_at=sku.created_at,
            updated_at=sku.updated_at,
        )


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


class AssetCreate(_Body):
    """Request body for POST /api/v1/assets. asset_tag is stored upper-case."""

    sku_id: int = Field(ge=1, le=MAX_ID)
    asset_tag: str = Field(min_length=1, max_length=50)
    serial_number: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=150)
    status: AssetStatusEnum = AssetStatusEnum.active
    location: LocationModel
    financial: FinancialModel
    deployment: DeploymentModel
    specifications: AssetSpecificationsModel = Field(default_factory=AssetSpecificationsModel)

    @field_validator("asset_tag", mode="before")
    @classmethod
    def normalize_tag(cls, value):
        return value.strip().upper() if isinstance(value, str) else value

    def to_domain(self) -> Asset:
        return Asset(
            sku=SkuReference(self.sku_id),
            asset_tag=self.asset_tag,
            serial_number=self.serial_number,
            name=self.name,
            status=self.status,
            location=self.location.to_domain(),
            financial=self.financial.to_domain(),
            deployment=self.deployment.to_domain(),
            specifications=self.specifications.to_domain(),
        )


class AssetUpdate(_Body):
    """Request body for PUT /api/v1/assets/{id}.

    Only the fields sent are changed; a sub-record that is sent replaces the
    stored one whole.
    """

    sku_id: Optional[int] = Field(default=None, ge=1, le=MAX_ID)
    asset_tag: Optional[str] = Field(default=None, min_length=1, max_length=50)
    serial_number: Optional[str] = Field(default=None, min_length=1, max_length=100)
    name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    status: Optional[AssetStatusEnum] = None
    location: Optional[LocationModel] = None
    financial: Optional[FinancialModel] = None
    deployment: Optional[DeploymentModel] = None
    specifications: Optional[AssetSpecificationsModel] = None

    def to_fields(self) -> dict:
        fields = _fields_from(self)
        if "sku_id" in fields:
            fields["sku"] = SkuReference(fields.pop("sku_id"))
        return fields


class AssetResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    sku: SkuRefResponse
    asset_tag: str
    serial_number: str
    name: str
    status: str
    location: LocationModel
    financial: FinancialModel
    deployment: DeploymentModel
    specifications: AssetSpecificationsModel
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, asset: Asset) -> "AssetResponse":
        return cls(
            id=asset.id,
            sku=SkuRefResponse.from_domain(asset.sku),
            asset_tag=asset.asset_tag,
            serial_number=asset.serial_number,
            name=asset.name,
            status=asset.status,
            location=LocationModel.model_validate(asset.location),
            financial=FinancialModel.model_validate(asset.financial),
            deployment=DeploymentModel.model_validate(asset.deployment),
            specifications=AssetSpecificationsModel.model_validate(asset.specifications),
            created_at=asset.created_at,
            updated_at=asset.updated_at,
        )


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


class Pagination(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit)


class CatalogListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    catalogs: list[CatalogResponse]
    pagination: Pagination


class SkuListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    skus: list[SkuResponse]
    pagination: Pagination


class AssetListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    assets: list[AssetResponse]
    pagination: Pagination


# ---------------------------------------------------------------------------
# Reports, health, errors
# ---------------------------------------------------------------------------


class ReportResponse(BaseModel):
    """Response for GET /api/v1/reports/financial. Row shape depends on type."""

    model_config = ConfigDict(frozen=True)

    type: str
    data: list[dict]
    summary: dict


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
