import uuid

from sqlalchemy import JSON, Boolean, Column, DateTime, String, Uuid

from pakproperty.models import Base, utcnow
from pakproperty.models.enums import Role

def default_preferences() -> dict:
    return {
        "language": "en",
        "currency": "PKR",
        "notifications": {"email": True, "sms": False, "push": True},
    }

class User(Base):
    __tablename__ = "users"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(20))
    password_hash = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default=Role.TENANT.value, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    profile_picture = Column(String(500))
    date_of_birth = Column(DateTime)
    gender = Column(String(16))
    address = Column(JSON, default=dict)
    preferences = Column(JSON, default=default_preferences)
    last_login = Column(DateTime)
    deactivation_reason = Column(String(500))
    deactivated_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
