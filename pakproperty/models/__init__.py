from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase

class Base(AsyncAttrs, DeclarativeBase):
    pass

def utcnow() -> datetime:
    # Stored naive, always UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)

def as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)

from pakproperty.models.user import User  # noqa: E402
from pakproperty.models.property import Property, SavedProperty  # noqa: E402
from pakproperty.models.inquiry import Inquiry  # noqa: E402

__all__ = ["Base", "Inquiry", "Property", "SavedProperty", "User", "as_naive_utc", "utcnow"]
