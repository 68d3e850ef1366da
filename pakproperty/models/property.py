import re
import uuid

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, Uuid,
)

from pakproperty.models import Base, utcnow
from pakproperty.models.enums import PropertyStatus

class Property(Base):
    """A rental listing.

    Nested sub-documents live in JSON columns so each row reads as one
    document: ``location`` (address, city, area, ...), ``specifications``
    (bedrooms, bathrooms, ...), ``area`` (size, unit, ...), ``features``,
    ``amenities``, ``contact_info``, ``terms`` and ``images``.
    """

    __tablename__ = "properties"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    short_description = Column(String(200))
    property_type = Column(String(32), nullable=False, index=True)
    category = Column(String(32), nullable=False)
    rent = Column(Float, nullable=False, index=True)
    rent_type = Column(String(16), nullable=False, default="monthly")
    currency = Column(String(8), nullable=False, default="PKR")
    security_deposit = Column(Float)
    location = Column(JSON, nullable=False, default=dict)
    specifications = Column(JSON, nullable=False, default=dict)
    area = Column(JSON, nullable=False, default=dict)
    features = Column(JSON, nullable=False, default=dict)
    amenities = Column(JSON, nullable=False, default=dict)
    contact_info = Column(JSON, nullable=False, default=dict)
    terms = Column(JSON, nullable=False, default=dict)
    images = Column(JSON, nullable=False, default=list)
    status = Column(String(32), nullable=False, default=PropertyStatus.AVAILABLE.value, index=True)
    available_from = Column(DateTime, default=utcnow)
    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    views = Column(Integer, nullable=False, default=0)
    saved_count = Column(Integer, nullable=False, default=0)
    inquiry_count = Column(Integer, nullable=False, default=0)
    slug = Column(String(255), unique=True)
    owner_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    agent_id = Column(Uuid, ForeignKey("users.id"), index=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def generate_slug(self) -> str:
        location = self.location or {}
        parts = [self.title, f"{location.get('city', '')} {location.get('area', '')}"]
        text = "-".join(_slugify(p) for p in parts if p)
        return f"{text}-{self.id.hex[-6:]}"

    @property
    def monthly_rent(self) -> float:
        if self.rent_type == "yearly":
            return round(self.rent / 12)
        return self.rent

def _slugify(value: str) -> str:
    value = re.sub(r"[^a-z0-9\s-]", "", value.lower())
    value = re.sub(r"[\s-]+", "-", value)
    return value.strip("-")

class SavedProperty(Base):
    __tablename__ = "saved_properties"
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    property_id = Column(Uuid, ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, default=utcnow)
