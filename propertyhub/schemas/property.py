"""
Pydantic schemas for property requests and responses.
Handles the listing filter set, create/update payloads and the public property shape.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple
from datetime import datetime

from propertyhub.models.property import PropertyStatus
from propertyhub.utils.formatting import format_area, format_price, slugify
from propertyhub.utils.validators import parse_bool, parse_int, parse_number, parse_string_list

SORTABLE_FIELDS = ("created_at", "price", "area", "bedrooms", "bathrooms", "year_built")
DEFAULT_SORT_FIELD = "created_at"
DEFAULT_PAGE_SIZE = 9
MAX_PAGE_SIZE = 100


class PropertySearchFilters(BaseModel):
    """
    Every query parameter recognised by the property listing.

    Numeric parameters that do not parse to a finite number are dropped, as are
    blank strings, so an unusable parameter never becomes a predicate.
    """

    model_config = ConfigDict(populate_by_name=True)

    property_type: Optional[str] = Field(None, alias="type", description="Property type, exact match")
    status: Optional[str] = Field(None, description="Listing status, exact match")
    is_offplan: Optional[bool] = Field(None, alias="isOffplan")
    featured: Optional[bool] = None
    developer_id: Optional[int] = Field(None, alias="developerId")
    min_price: Optional[float] = Field(None, alias="minPrice")
    max_price: Optional[float] = Field(None, alias="maxPrice")
    bedrooms: Optional[int] = Field(None, description="Minimum bedrooms")
    bathrooms: Optional[float] = Field(None, description="Minimum bathrooms")
    min_area: Optional[float] = Field(None, alias="minArea")
    max_area: Optional[float] = Field(None, alias="maxArea")
    location: Optional[str] = Field(None, description="Case-insensitive location substring")
    year_built: Optional[int] = Field(None, alias="yearBuilt")
    search: Optional[str] = Field(None, description="Free text over title, description, location, address and city")

    sort_by: str = Field(DEFAULT_SORT_FIELD, alias="sortBy")
    sort_order: str = Field("desc", alias="sortOrder")
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @field_validator("property_type", "status", "location", "search", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("min_price", "max_price", "bathrooms", "min_area", "max_area", mode="before")
    @classmethod
    def parse_float_filter(cls, v):
        return parse_number(v)

    @field_validator("developer_id", "bedrooms", "year_built", mode="before")
    @classmethod
    def parse_int_filter(cls, v):
        return parse_int(v)

    @field_validator("is_offplan", "featured", mode="before")
    @classmethod
    def parse_flag(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return parse_bool(v)

    @field_validator("sort_by", mode="before")
    @classmethod
    def normalize_sort_by(cls, v):
        """Accept camelCase names; anything outside the allow-list sorts by creation time."""
        if not v:
            return DEFAULT_SORT_FIELD
        field = "".join(f"_{c.lower()}" if c.isupper() else c for c in str(v).strip())
        return field if field in SORTABLE_FIELDS else DEFAULT_SORT_FIELD

    @field_validator("sort_order", mode="before")
    @classmethod
    def normalize_sort_order(cls, v):
        return "asc" if str(v or "").strip().lower() == "asc" else "desc"

    @field_validator("page", mode="before")
    @classmethod
    def parse_page(cls, v):
        page = parse_int(v)
        return page if page and page > 0 else 1

    @field_validator("limit", mode="before")
    @classmethod
    def parse_limit(cls, v):
        limit = parse_int(v)
        if not limit or limit < 1:
            return DEFAULT_PAGE_SIZE
        return min(limit, MAX_PAGE_SIZE)

    @classmethod
    def from_query(cls, params: Mapping[str, Any]) -> "PropertySearchFilters":
        return cls.model_validate(dict(params))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def echo(self) -> Dict[str, Any]:
        """Effective filter values, keyed by their query parameter names."""
        return self.model_dump(mode="json", by_alias=True, exclude={"page", "limit"})

    def cache_params(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class DeveloperSummary(BaseModel):
    """Developer fields attached to a property."""

    id: int
    name: str
    logo: Optional[str] = None
    slug: str


class AgentSummary(BaseModel):
    """Agent fields attached to a property."""

    id: int
    name: str
    email: str
    phone: Optional[str] = None


class PropertyResponse(BaseModel):
    """Public property shape: storage field names plus display fields and relations."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    price: float
    property_type: str
    status: str
    is_offplan: bool
    location: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    bedrooms: int
    bathrooms: float
    area: float
    bedroom_range: Optional[str] = None
    year_built: Optional[int] = None
    payment_plan: Optional[str] = None
    images: List[str] = []
    features: List[str] = []
    main_image: str
    header_image: Optional[str] = None
    developer_id: Optional[int] = None
    agent_id: Optional[int] = None
    featured: bool
    created_at: datetime
    updated_at: datetime
    developer: Optional[DeveloperSummary] = None
    agent: Optional[AgentSummary] = None

    @computed_field(alias="priceFormatted")
    @property
    def price_formatted(self) -> str:
        return format_price(self.price)

    @computed_field(alias="areaFormatted")
    @property
    def area_formatted(self) -> str:
        return format_area(self.area)

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class PropertyDetailResponse(PropertyResponse):
    """Single property page payload."""

    inquiry_count: int = Field(0, serialization_alias="inquiryCount")
    similar_properties: List[PropertyResponse] = Field(default_factory=list, serialization_alias="similarProperties")

    @computed_field
    @property
    def slug(self) -> str:
        return slugify(self.title)


class PropertyWrite(BaseModel):
    """Fields shared by create and update, keyed by their form names."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    property_type: Optional[str] = Field(None, alias="propertyType", max_length=50)
    status: Optional[PropertyStatus] = None
    is_offplan: Optional[bool] = Field(None, alias="isOffplan")
    location: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = Field(None, alias="zipCode")
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    bedrooms: Optional[int] = Field(None, ge=0, le=100)
    bathrooms: Optional[float] = Field(None, ge=0, le=100)
    area: Optional[float] = Field(None, ge=0)
    bedroom_range: Optional[str] = Field(None, alias="bedroomRange")
    year_built: Optional[int] = Field(None, alias="yearBuilt", ge=1800, le=2200)
    payment_plan: Optional[str] = Field(None, alias="paymentPlan")
    features: Optional[List[str]] = None
    developer_id: Optional[int] = Field(None, alias="developerId")
    agent_id: Optional[int] = Field(None, alias="agentId")
    featured: Optional[bool] = None
    main_image: Optional[str] = Field(None, alias="mainImage")

    @field_validator("features", mode="before")
    @classmethod
    def parse_features(cls, v):
        if v is None:
            return None
        return parse_string_list(v)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class PropertyCreate(PropertyWrite):
    """Property creation payload. Required fields are checked before model validation."""

    REQUIRED_FIELDS: ClassVar[Tuple[str, ...]] = ("title", "description", "price", "location", "propertyType")

    @model_validator(mode="after")
    def apply_defaults(self):
        if self.status is None:
            self.status = PropertyStatus.FOR_SALE
        if self.is_offplan is None:
            self.is_offplan = False
        if self.featured is None:
            self.featured = False
        if self.bedrooms is None:
            self.bedrooms = 0
        if self.bathrooms is None:
            self.bathrooms = 0
        if self.area is None:
            self.area = 0
        if self.features is None:
            self.features = []
        return self

    @classmethod
    def required_fields(cls, data: Mapping[str, Any]) -> List[str]:
        """Area is only required for ready (not off-plan) properties."""
        fields = list(cls.REQUIRED_FIELDS)
        if not parse_bool(data.get("isOffplan")):
            fields.append("area")
        return fields


class PropertyUpdate(PropertyWrite):
    """Partial update payload; only submitted fields are applied."""

    existing_images: Optional[List[str]] = Field(None, alias="existingImages")
    header_image: Optional[str] = Field(None, alias="headerImage")

    @field_validator("existing_images", mode="before")
    @classmethod
    def parse_existing_images(cls, v):
        if v is None:
            return None
        return parse_string_list(v)
