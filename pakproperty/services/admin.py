import math
import uuid

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from pakproperty.errors import ConflictError, NotFoundError, ValidationError
from pakproperty.models import Inquiry, Property, SavedProperty, User
from pakproperty.models.enums import PropertyStatus
from pakproperty.schemas.inquiry import serialize_inquiry
from pakproperty.schemas.property import serialize_property
from pakproperty.schemas.user import AdminUserQuery, AdminUserUpdate, serialize_user

logger = get_logger()

async def list_users(session: AsyncSession, query: AdminUserQuery) -> dict:
    conditions = []
    if query.role:
        conditions.append(User.role == query.role.value)
    if query.status:
        conditions.append(User.is_active.is_(query.status == "active"))
    if query.search:
        term = query.search.strip()
        conditions.append(or_(
            User.first_name.icontains(term, autoescape=True),
            User.last_name.icontains(term, autoescape=True),
            User.email.icontains(term, autoescape=True),
            User.phone.icontains(term, autoescape=True),
        ))
    total = await session.scalar(select(func.count()).select_from(User).where(*conditions))
    users = (await session.scalars(
        select(User)
        .where(*conditions)
        .order_by(User.created_at.desc(), User.id)
        .offset((query.page - 1) * query.limit)
        .limit(query.limit)
    )).all()
    return {
        "success": True,
        "count": len(users),
        "total": total,
        "pagination": {"page": query.page, "limit": query.limit, "pages": math.ceil(total / query.limit)},
        "data": [serialize_user(u) for u in users],
    }

async def get_user(session: AsyncSession, user_id: uuid.UUID) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user

async def update_user(session: AsyncSession, user_id: uuid.UUID, data: AdminUserUpdate) -> User:
    user = await get_user(session, user_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in changes.items():
        setattr(user, key, getattr(value, "value", value))
    await session.commit()
    await session.refresh(user)
    return user

async def delete_user(session: AsyncSession, admin: User, user_id: uuid.UUID):
    """Remove an account along with its saved listings and sent inquiries.

    Accounts that still own or manage listings are refused; their listings
    have to be deleted or reassigned first.
    """
    user = await get_user(session, user_id)
    if user.id == admin.id:
        raise ValidationError("Cannot delete your own account")
    listings = await session.scalar(
        select(func.count()).select_from(Property)
        .where(or_(Property.owner_id == user.id, Property.agent_id == user.id))
    )
    if listings:
        raise ConflictError("User still has listings; delete or reassign them first")
    saved_ids = (await session.scalars(
        select(SavedProperty.property_id).where(SavedProperty.user_id == user.id)
    )).all()
    inquired_ids = (await session.scalars(
        select(Inquiry.property_id).where(Inquiry.tenant_id == user.id)
    )).all()
    for property_id in saved_ids:
        await session.execute(
            update(Property)
            .where(Property.id == property_id, Property.saved_count > 0)
            .values(saved_count=Property.saved_count - 1)
        )
    for property_id in inquired_ids:
        await session.execute(
            update(Property)
            .where(Property.id == property_id, Property.inquiry_count > 0)
            .values(inquiry_count=Property.inquiry_count - 1)
        )
    await session.execute(delete(SavedProperty).where(SavedProperty.user_id == user.id))
    await session.execute(delete(Inquiry).where(or_(Inquiry.tenant_id == user.id, Inquiry.owner_id == user.id)))
    await session.delete(user)
    await session.commit()

async def _count(session: AsyncSession, model, *conditions) -> int:
    return await session.scalar(select(func.count()).select_from(model).where(*conditions))

async def get_dashboard(session: AsyncSession) -> dict:
    """Platform totals, breakdowns and the latest activity for the admin dashboard."""
    stats = {
        "totalUsers": await _count(session, User),
        "totalProperties": await _count(session, Property),
        "totalInquiries": await _count(session, Inquiry),
        "activeUsers": await _count(session, User, User.is_active.is_(True)),
        "verifiedUsers": await _count(session, User, User.is_verified.is_(True)),
        "availableProperties": await _count(session, Property, Property.status == PropertyStatus.AVAILABLE.value),
    }
    by_role = (await session.execute(select(User.role, func.count()).group_by(User.role))).all()
    city = Property.location["city"].as_string()
    by_city = (await session.execute(
        select(city, func.count()).group_by(city).order_by(func.count().desc(), city)
    )).all()
    recent_users = (await session.scalars(select(User).order_by(User.created_at.desc()).limit(5))).all()
    recent_properties = (await session.scalars(select(Property).order_by(Property.created_at.desc()).limit(5))).all()
    recent_inquiries = (await session.scalars(select(Inquiry).order_by(Inquiry.created_at.desc()).limit(5))).all()
    return {
        "stats": stats,
        "userStats": [{"role": role, "count": count} for role, count in sorted(by_role)],
        "propertyStats": [{"city": name, "count": count} for name, count in by_city],
        "recentActivities": {
            "users": [serialize_user(u) for u in recent_users],
            "properties": [serialize_property(p) for p in recent_properties],
            "inquiries": [serialize_inquiry(i) for i in recent_inquiries],
        },
    }
