from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from pakproperty.models.enums import Currency, Employment, InquiryStatus, InquiryType, NextAction
from pakproperty.schemas.property import CamelModel

class Budget(CamelModel):
    min: Optional[float] = Field(default=None, ge=0)
    max: Optional[float] = Field(default=None, ge=0)
    currency: Currency = Currency.PKR

    @model_validator(mode="after")
    def ordered(self):
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError("Minimum budget cannot exceed maximum budget")
        return self

class Occupants(CamelModel):
    adults: int = Field(default=1, ge=1)
    children: int = Field(default=0, ge=0)
    pets: bool = False

class Requirements(CamelModel):
    move_in_date: Optional[datetime] = None
    lease_duration: Optional[int] = Field(default=None, ge=1, le=60)
    budget: Optional[Budget] = None
    occupants: Optional[Occupants] = None
    employment: Optional[Employment] = None
    income: Optional[float] = Field(default=None, ge=0)

class InquiryContact(CamelModel):
    whatsapp: Optional[str] = None
    preferred_contact: str = Field(default="phone", pattern="^(phone|email|whatsapp)$")

class InquiryCreate(CamelModel):
    property_id: UUID
    message: str = Field(min_length=10, max_length=1000)
    type: InquiryType = InquiryType.GENERAL
    requirements: Requirements = Field(default_factory=Requirements)
    contact_info: InquiryContact = Field(default_factory=InquiryContact)

    @field_validator("message", mode="before")
    @classmethod
    def strip(cls, v):
        return v.strip() if isinstance(v, str) else v

class InquiryResponseCreate(CamelModel):
    message: str = Field(min_length=10, max_length=1000)
    next_action: Optional[NextAction] = None

    @field_validator("message", mode="before")
    @classmethod
    def strip(cls, v):
        return v.strip() if isinstance(v, str) else v

class ViewingSchedule(CamelModel):
    scheduled_date: datetime
    notes: Optional[str] = Field(default=None, max_length=500)

class InquiryStatusUpdate(CamelModel):
    status: InquiryStatus

class InquiryOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    property_id: UUID
    tenant_id: UUID
    owner_id: UUID
    type: str
    status: str
    priority: str
    message: str
    requirements: dict
    contact_info: dict
    viewing: dict
    response: Optional[dict] = None
    communication: List[dict]
    total_interactions: int
    source: str
    read_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_expired: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

def serialize_inquiry(inquiry, **related) -> dict:
    """Inquiry document plus any related records (``property``, ``tenant``, ``owner``)."""
    data = InquiryOut.model_validate(inquiry).model_dump(by_alias=True, mode="json")
    data.update(related)
    return data
