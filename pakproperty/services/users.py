import uuid

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from pakproperty.errors import AuthenticationError, ConflictError
from pakproperty.models import Inquiry, Property, SavedProperty, User, as_naive_utc, utcnow
from pakproperty.models.enums import PropertyStatus
from pakproperty.models.user import default_preferences
from pakproperty.permissions import Capability, has_capability
from pakproperty.schemas.property import serialize_property
from pakproperty.schemas.user import (
    LoginRequest, NotificationsUpdate, ProfileUpdate, RegisterRequest, serialize_user,
)
from pakproperty.security import hash_password, verify_password
from pakproperty.services import inquiries
from pakproperty.services.properties import get_property

logger = get_logger()

async def register_user(session: AsyncSession, data: RegisterRequest) -> User:
    email = data.email.lower()
    existing = await session.scalar(select(User).where(User.email == email))
    if existing is not None:
        raise ConflictError("User with this email already exists")
    user = User(
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
        email=email,
        phone=data.phone,
        password_hash=hash_password(data.password),
        role=data.role.value,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    logger.info("Registered user", user_id=str(user.id), role=user.role)
    return user

async def authenticate(session: AsyncSession, data: LoginRequest) -> User:
    user = await session.scalar(select(User).where(User.email == data.email.lower()))
    if user is None or not verify_password(data.password, user.password_hash):
        logger.warning("Login failed", email=data.email.lower())
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")
    user.last_login = utcnow()
    await session.commit()
    logger.info("User logged in", user_id=str(user.id))
    return user

async def get_saved_properties(session: AsyncSession, user: User) -> list[Property]:
    stmt = (
        select(Property)
        .join(SavedProperty, SavedProperty.property_id == Property.id)
        .where(SavedProperty.user_id == user.id)
        .order_by(SavedProperty.created_at.desc())
    )
    return (await session.scalars(stmt)).all()

async def save_property(session: AsyncSession, user: User, property_id: uuid.UUID):
    await get_property(session, property_id)
    if await session.get(SavedProperty, (user.id, property_id)) is not None:
        raise ConflictError("Property is already saved")
    session.add(SavedProperty(user_id=user.id, property_id=property_id))
    await session.execute(
        update(Property).where(Property.id == property_id).values(saved_count=Property.saved_count + 1)
    )
    await session.commit()
    logger.info("Saved property", property_id=str(property_id), user_id=str(user.id))

async def remove_saved_property(session: AsyncSession, user: User, property_id: uuid.UUID):
    result = await session.execute(
        delete(SavedProperty).where(SavedProperty.user_id == user.id, SavedProperty.property_id == property_id)
    )
    if result.rowcount == 0:
        raise ConflictError("Property is not saved")
    await session.execute(
        update(Property)
        .where(Property.id == property_id, Property.saved_count > 0)
        .values(saved_count=Property.saved_count - 1)
    )
    await session.commit()
    logger.info("Removed saved property", property_id=str(property_id), user_id=str(user.id))

async def update_profile(session: AsyncSession, user: User, data: ProfileUpdate) -> User:
    changes = data.model_dump(exclude_unset=True)
    for key, value in changes.items():
        if key == "address":
            patch = data.address.model_dump(by_alias=True, mode="json", exclude_unset=True) if data.address else {}
            user.address = {**(user.address or {}), **patch}
        elif key == "preferences":
            patch = data.preferences.model_dump(by_alias=True, mode="json", exclude_none=True) if data.preferences else {}
            user.preferences = {**(user.preferences or default_preferences()), **patch}
        elif key == "date_of_birth":
            user.date_of_birth = as_naive_utc(value) if value else None
        elif value is not None:
            setattr(user, key, getattr(value, "value", value))
    await session.commit()
    await session.refresh(user)
    logger.info("Updated profile", user_id=str(user.id), fields=sorted(changes))
    return user

async def update_notifications(session: AsyncSession, user: User, data: NotificationsUpdate) -> dict:
    preferences = dict(user.preferences or default_preferences())
    notifications = {
        **preferences.get("notifications", {}),
        **data.notifications.model_dump(exclude_none=True),
    }
    user.preferences = {**preferences, "notifications": notifications}
    await session.commit()
    logger.info("Updated notification preferences", user_id=str(user.id))
    return notifications

async def deactivate_account(session: AsyncSession, user: User, reason: str | None = None):
    user.is_active = False
    user.deactivation_reason = reason.strip() if reason else None
    user.deactivated_at = utcnow()
    await session.commit()
    logger.info("Deactivated account", user_id=str(user.id))

async def reactivate_account(session: AsyncSession, user: User) -> User:
    user.is_active = True
    user.deactivation_reason = None
    user.deactivated_at = None
    await session.commit()
    await session.refresh(user)
    logger.info("Reactivated account", user_id=str(user.id))
    return user

def _managed_by(user: User):
    return or_(Property.owner_id == user.id, Property.agent_id == user.id)

async def user_stats(session: AsyncSession, user: User) -> dict:
    saved = await session.scalar(
        select(func.count()).select_from(SavedProperty).where(SavedProperty.user_id == user.id)
    )
    stats = {"savedProperties": saved, "totalInquiries": 0, "properties": 0}
    if has_capability(user.role, Capability.MANAGE_LISTINGS):
        stats["totalInquiries"] = await inquiries.count_for(session, Inquiry.owner_id, user.id)
        stats["properties"] = await session.scalar(
            select(func.count()).select_from(Property).where(_managed_by(user))
        )
    else:
        stats["totalInquiries"] = await inquiries.count_for(session, Inquiry.tenant_id, user.id)
    return stats

async def user_dashboard(session: AsyncSession, user: User) -> dict:
    """Counts plus the most recent saved listings, own listings and inquiries."""
    stats = await user_stats(session, user)
    saved = (await session.scalars(
        select(Property)
        .join(SavedProperty, SavedProperty.property_id == Property.id)
        .where(SavedProperty.user_id == user.id, Property.status == PropertyStatus.AVAILABLE.value)
        .order_by(SavedProperty.created_at.desc())
        .limit(6)
    )).all()
    properties = []
    if has_capability(user.role, Capability.MANAGE_LISTINGS):
        properties = (await session.scalars(
            select(Property).where(_managed_by(user)).order_by(Property.created_at.desc()).limit(6)
        )).all()
        recent = await inquiries.list_received(session, user, limit=5)
    else:
        recent = await inquiries.list_sent(session, user, limit=5)
    return {
        "user": serialize_user(user),
        "propertiesCount": stats["properties"],
        "inquiriesCount": stats["totalInquiries"],
        "savedCount": stats["savedProperties"],
        "savedProperties": [serialize_property(p) for p in saved],
        "properties": [serialize_property(p) for p in properties],
        "recentInquiries": recent,
    }
