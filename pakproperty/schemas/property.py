from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from pakproperty.models.enums import (
    AreaUnit, Category, City, Condition, Currency, Furnishing, PropertyStatus,
    PropertyType, RentType, SortOrder,
)

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class Coordinates(CamelModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None

class Location(CamelModel):
    address: str = Field(min_length=1)
    city: City
    area: str = Field(min_length=1)
    sector: Optional[str] = None
    town: Optional[str] = None
    block: Optional[str] = None
    street: Optional[str] = None
    postal_code: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    @field_validator("address", "area", mode="before")
    @classmethod
    def strip(cls, v):
        return v.strip() if isinstance(v, str) else v

class Specifications(CamelModel):
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    kitchens: int = Field(default=1, ge=0)
    drawing_rooms: int = Field(default=1, ge=0)
    servant_quarters: int = Field(default=0, ge=0)
    parking_spaces: int = Field(default=0, ge=0)

class AreaInfo(CamelModel):
    size: float = Field(ge=0)
    unit: AreaUnit
    covered_area: Optional[float] = Field(default=None, ge=0)
    covered_area_unit: str = "sqft"

class Features(CamelModel):
    furnishing: Furnishing = Furnishing.UNFURNISHED
    condition: Condition = Condition.GOOD
    age: Optional[int] = Field(default=None, ge=0)
    floor: Optional[int] = Field(default=None, ge=0)
    total_floors: Optional[int] = Field(default=None, ge=1)

class ContactInfo(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    whatsapp: Optional[str] = None
    preferred_contact: str = Field(default="phone", pattern="^(phone|email|whatsapp)$")

class Terms(CamelModel):
    minimum_lease: int = Field(default=6, ge=1)
    pets_allowed: bool = False
    smoking_allowed: bool = False
    family_only: bool = False
    bachelor_allowed: bool = True

class ImageRef(CamelModel):
    url: str
    caption: str = ""
    is_primary: bool = False
    order: int = 0

class PropertyBase(CamelModel):
    title: Optional[str] = Field(default=None, min_length=10, max_length=100)
    description: Optional[str] = Field(default=None, min_length=50, max_length=2000)
    short_description: Optional[str] = Field(default=None, max_length=200)
    property_type: Optional[PropertyType] = None
    category: Optional[Category] = None
    rent: Optional[float] = Field(default=None, ge=0)
    rent_type: Optional[RentType] = None
    currency: Optional[Currency] = None
    security_deposit: Optional[float] = Field(default=None, ge=0)
    location: Optional[Location] = None
    specifications: Optional[Specifications] = None
    area: Optional[AreaInfo] = None
    features: Optional[Features] = None
    amenities: Optional[Dict[str, bool]] = None
    contact_info: Optional[ContactInfo] = None
    terms: Optional[Terms] = None
    available_from: Optional[datetime] = None
    status: Optional[PropertyStatus] = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

class PropertyCreate(PropertyBase):
    title: str = Field(min_length=10, max_length=100)
    description: str = Field(min_length=50, max_length=2000)
    property_type: PropertyType
    category: Category
    rent: float = Field(ge=0)
    rent_type: RentType = RentType.MONTHLY
    currency: Currency = Currency.PKR
    location: Location
    specifications: Specifications = Field(default_factory=Specifications)
    area: AreaInfo
    features: Features = Field(default_factory=Features)
    amenities: Dict[str, bool] = Field(default_factory=dict)
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    terms: Terms = Field(default_factory=Terms)
    status: PropertyStatus = PropertyStatus.AVAILABLE

    @model_validator(mode="after")
    def residential_needs_rooms(self):
        check_rooms(self.category, self.specifications.model_dump())
        return self

class PropertyUpdate(PropertyBase):
    """Every field optional; only supplied fields are merged.

    Nested documents arrive as partial patches. They are merged into the
    stored document and validated as a whole by the service layer.
    """

    location: Optional[Dict[str, Any]] = None
    specifications: Optional[Dict[str, Any]] = None
    area: Optional[Dict[str, Any]] = None
    features: Optional[Dict[str, Any]] = None
    contact_info: Optional[Dict[str, Any]] = None
    terms: Optional[Dict[str, Any]] = None

DOCUMENT_MODELS = {
    "location": Location,
    "specifications": Specifications,
    "area": AreaInfo,
    "features": Features,
    "contact_info": ContactInfo,
    "terms": Terms,
}

def check_rooms(category, specifications: dict):
    """Residential listings need both bedrooms and bathrooms."""
    if category in (Category.RESIDENTIAL, Category.RESIDENTIAL.value):
        if specifications.get("bedrooms") is None or specifications.get("bathrooms") is None:
            raise ValueError("Residential properties require bedrooms and bathrooms")

class StatusUpdate(CamelModel):
    status: PropertyStatus

class FeaturedUpdate(CamelModel):
    is_featured: bool

class PropertyResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    title: str
    description: str
    short_description: Optional[str] = None
    property_type: str
    category: str
    rent: float
    rent_type: str
    currency: str
    security_deposit: Optional[float] = None
    monthly_rent: float
    location: dict
    specifications: dict
    area: dict
    features: dict
    amenities: dict
    contact_info: dict
    terms: dict
    images: List[ImageRef]
    status: str
    available_from: Optional[datetime] = None
    is_featured: bool
    views: int
    saved_count: int
    inquiry_count: int = 0
    slug: Optional[str] = None
    owner_id: UUID
    agent_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PropertyQuery(CamelModel):
    """Filter parameters accepted by the listing endpoint."""

    city: Optional[City] = None
    area: Optional[str] = None
    property_type: Optional[PropertyType] = None
    category: Optional[Category] = None
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    furnishing: Optional[Furnishing] = None
    status: Optional[PropertyStatus] = None
    sort: SortOrder = SortOrder.DATE_DESC
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=12, ge=1, le=100)
    search: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def empty_is_absent(cls, v, info):
        if isinstance(v, str) and not v.strip():
            return cls.model_fields[info.field_name].default
        return v

    @model_validator(mode="after")
    def price_range(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("minPrice cannot exceed maxPrice")
        return self

def serialize_property(prop) -> dict:
    return PropertyResponse.model_validate(prop).model_dump(by_alias=True, mode="json")
