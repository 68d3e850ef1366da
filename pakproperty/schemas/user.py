from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from pakproperty.models.enums import City, Currency, Gender, Language, Role
from pakproperty.schemas.property import CamelModel

PHONE_PATTERN = r"^(\+92|0)?[0-9]{10}$"

class RegisterRequest(CamelModel):
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    password: str = Field(min_length=8)
    role: Role = Role.TENANT

    @field_validator("role")
    @classmethod
    def no_self_promotion(cls, v):
        if v == Role.ADMIN:
            raise ValueError("Admin accounts cannot be self-registered")
        return v

class LoginRequest(CamelModel):
    email: EmailStr
    password: str

class Address(CamelModel):
    street: Optional[str] = None
    city: Optional[City] = None
    area: Optional[str] = None
    postal_code: Optional[str] = None

class NotificationPreferences(CamelModel):
    email: Optional[bool] = None
    sms: Optional[bool] = None
    push: Optional[bool] = None

class Preferences(CamelModel):
    language: Optional[Language] = None
    currency: Optional[Currency] = None

class ProfileUpdate(CamelModel):
    """Self-service profile edit; only supplied fields change."""

    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    date_of_birth: Optional[datetime] = None
    gender: Optional[Gender] = None
    address: Optional[Address] = None
    preferences: Optional[Preferences] = None

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip(cls, v):
        return v.strip() if isinstance(v, str) else v

class NotificationsUpdate(CamelModel):
    notifications: NotificationPreferences

class DeactivateRequest(CamelModel):
    reason: Optional[str] = Field(default=None, max_length=500)

class AdminUserUpdate(CamelModel):
    role: Optional[Role] = None
    is_verified: Optional[bool] = None
    is_active: Optional[bool] = None

class UserResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    role: Role
    is_active: bool
    is_verified: bool = False
    profile_picture: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    gender: Optional[str] = None
    address: Optional[dict] = None
    preferences: Optional[dict] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

class UserSummary(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None

def serialize_user(user) -> dict:
    return UserResponse.model_validate(user).model_dump(by_alias=True, mode="json")

def summarize_user(user) -> dict | None:
    if user is None:
        return None
    return UserSummary.model_validate(user).model_dump(by_alias=True, mode="json")

class AdminUserQuery(CamelModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    role: Optional[Role] = None
    status: Optional[str] = Field(default=None, pattern="^(active|inactive)$")
    search: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def empty_is_absent(cls, v, info):
        if isinstance(v, str) and not v.strip():
            return cls.model_fields[info.field_name].default
        return v
