import uuid
from datetime import timedelta

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, Uuid

from pakproperty.models import Base, utcnow
from pakproperty.models.enums import InquiryStatus, InquiryType

INQUIRY_LIFETIME = timedelta(days=30)

def default_expiry():
    return utcnow() + INQUIRY_LIFETIME

class Inquiry(Base):
    """A prospective tenant's message about a listing.

    ``owner_id`` is the listing owner at the time of the inquiry. The
    ``viewing`` and ``response`` documents and the ``communication`` log
    are JSON columns like the listing sub-documents.
    """

    __tablename__ = "inquiries"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    tenant_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(16), nullable=False, default=InquiryType.GENERAL.value)
    status = Column(String(32), nullable=False, default=InquiryStatus.PENDING.value, index=True)
    priority = Column(String(16), nullable=False, default="medium")
    message = Column(Text, nullable=False)
    requirements = Column(JSON, nullable=False, default=dict)
    contact_info = Column(JSON, nullable=False, default=dict)
    viewing = Column(JSON, nullable=False, default=dict)
    response = Column(JSON)
    communication = Column(JSON, nullable=False, default=list)
    total_interactions = Column(Integer, nullable=False, default=0)
    source = Column(String(16), nullable=False, default="website")
    read_at = Column(DateTime)
    responded_at = Column(DateTime)
    expires_at = Column(DateTime, default=default_expiry)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at < utcnow()
