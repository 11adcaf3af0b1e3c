"""Pydantic v2 schemas for API request/response validation."""

from datetime import datetime
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from propertyhub.domain.enums import (
    LeadStatus,
    LeadType,
    ListingType,
    PropertyStatus,
    PropertyType,
    UserRole,
)


class _PartialUpdate(BaseModel):
    """Base for PATCH bodies: omitted fields stay untouched, explicit nulls
    are only accepted for columns that are nullable."""

    non_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in self.model_fields_set & self.non_nullable:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields the client actually sent, enum members reduced to values."""
        return self.model_dump(exclude_unset=True, mode="json")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class UserCreate(BaseModel):
    """Schema for registering a new user."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role: UserRole = UserRole.BROKER
    phone: str | None = None


class UserLogin(BaseModel):
    """Schema for user login."""

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    """Outward-facing user. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: str
    phone: str | None = None
    created_at: datetime


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Property
# ---------------------------------------------------------------------------


class PropertyBase(BaseModel):
    """Listing fields a broker controls."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    property_type: PropertyType
    listing_type: ListingType = ListingType.SALE
    status: PropertyStatus = PropertyStatus.AVAILABLE
    price_min: int = Field(ge=0)
    price_max: int | None = Field(default=None, ge=0)
    location: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    pincode: str | None = None
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    area: int = Field(ge=0)
    images: list[str] = []
    videos: list[str] = []
    amenities: list[str] = []
    facilities: list[str] = []
    nearby_places: list[str] = []
    featured: bool = False


class PropertyCreate(PropertyBase):
    """Schema for creating a listing. Any broker_id in the body is ignored;
    the owner is always the authenticated user."""

    pass


class PropertyUpdate(_PartialUpdate):
    """Partial listing update."""

    model_config = ConfigDict(str_strip_whitespace=True)

    non_nullable: ClassVar[frozenset[str]] = frozenset({
        "title", "description", "property_type", "listing_type", "status",
        "price_min", "location", "city", "state", "area", "images", "videos",
        "amenities", "facilities", "nearby_places", "featured",
    })

    title: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    property_type: PropertyType | None = None
    listing_type: ListingType | None = None
    status: PropertyStatus | None = None
    price_min: int | None = Field(default=None, ge=0)
    price_max: int | None = Field(default=None, ge=0)
    location: str | None = Field(default=None, min_length=1)
    city: str | None = Field(default=None, min_length=1)
    state: str | None = Field(default=None, min_length=1)
    pincode: str | None = None
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    area: int | None = Field(default=None, ge=0)
    images: list[str] | None = None
    videos: list[str] | None = None
    amenities: list[str] | None = None
    facilities: list[str] | None = None
    nearby_places: list[str] | None = None
    featured: bool | None = None


class PropertyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    broker_id: str
    title: str
    description: str
    property_type: str
    listing_type: str
    status: str
    price_min: int
    price_max: int | None = None
    location: str
    city: str
    state: str
    pincode: str | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    area: int
    images: list[str] = []
    videos: list[str] = []
    amenities: list[str] = []
    facilities: list[str] = []
    nearby_places: list[str] = []
    featured: bool
    views: int
    created_at: datetime
    updated_at: datetime


class PropertyWithBrokerResponse(PropertyResponse):
    broker: UserResponse | None = None


class PropertySearchResponse(BaseModel):
    """One revealed page of the filtered and sorted listing."""

    items: list[PropertyResponse]
    total: int
    shown: int
    page_size: int
    has_more: bool
    empty: bool


# ---------------------------------------------------------------------------
# Lead
# ---------------------------------------------------------------------------


class LeadCreate(BaseModel):
    """Public contact form submission."""

    model_config = ConfigDict(str_strip_whitespace=True)

    property_id: str | None = None
    lead_type: LeadType | None = None
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)
    message: str = Field(min_length=1)
    budget: int | None = Field(default=None, ge=0)
    requirements: str | None = None

    @field_validator("property_id")
    @classmethod
    def blank_property_is_none(cls, value: str | None) -> str | None:
        return value or None

    def resolved_lead_type(self) -> LeadType:
        """Explicit type wins; otherwise a property reference makes it an inquiry."""
        if self.lead_type is not None:
            return self.lead_type
        return LeadType.PROPERTY_INQUIRY if self.property_id else LeadType.CONTACT


class LeadUpdate(_PartialUpdate):
    """Admin patch. Status may jump between any two values."""

    model_config = ConfigDict(str_strip_whitespace=True)

    non_nullable: ClassVar[frozenset[str]] = frozenset({"lead_type", "status", "name", "email", "phone", "message"})

    property_id: str | None = None
    lead_type: LeadType | None = None
    status: LeadStatus | None = None
    name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, min_length=1)
    message: str | None = Field(default=None, min_length=1)
    budget: int | None = Field(default=None, ge=0)
    requirements: str | None = None

    @field_validator("property_id")
    @classmethod
    def blank_property_is_none(cls, value: str | None) -> str | None:
        return value or None


class LeadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    property_id: str | None = None
    lead_type: str
    status: str
    name: str
    email: str
    phone: str
    message: str
    budget: int | None = None
    requirements: str | None = None
    created_at: datetime
    updated_at: datetime


class LeadWithPropertyResponse(LeadResponse):
    property: PropertyResponse | None = None


# ---------------------------------------------------------------------------
# Object storage
# ---------------------------------------------------------------------------


class UploadURLResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    upload_url: str = Field(alias="uploadURL")


class PropertyImageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(alias="imageURL", min_length=1)


class PropertyImageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    object_path: str = Field(alias="objectPath")


class UploadedFilesResponse(BaseModel):
    urls: list[str]
