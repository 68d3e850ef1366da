import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from pakproperty.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from pakproperty.models import Inquiry, Property, User, as_naive_utc, utcnow
from pakproperty.models.enums import OPEN_INQUIRY_STATUSES, InquiryStatus, PropertyStatus
from pakproperty.permissions import can_handle_inquiry, can_view_inquiry
from pakproperty.schemas.inquiry import (
    InquiryCreate, InquiryResponseCreate, ViewingSchedule, serialize_inquiry,
)
from pakproperty.schemas.user import summarize_user
from pakproperty.services.properties import get_property

logger = get_logger()

def summarize_property(prop) -> dict | None:
    if prop is None:
        return None
    return {
        "id": str(prop.id),
        "title": prop.title,
        "location": prop.location,
        "rent": prop.rent,
        "images": prop.images or [],
    }

async def create_inquiry(session: AsyncSession, user: User, data: InquiryCreate) -> Inquiry:
    prop = await get_property(session, data.property_id)
    if prop.status != PropertyStatus.AVAILABLE.value:
        raise ValidationError("Property is not available for inquiry")
    existing = await session.scalar(
        select(Inquiry.id).where(
            Inquiry.property_id == prop.id,
            Inquiry.tenant_id == user.id,
            Inquiry.status.in_([s.value for s in OPEN_INQUIRY_STATUSES]),
        )
    )
    if existing is not None:
        raise ConflictError("You have already inquired about this property")
    contact = data.contact_info.model_dump(by_alias=True, mode="json")
    contact.update(name=user.full_name, phone=user.phone, email=user.email)
    inquiry = Inquiry(
        property_id=prop.id,
        tenant_id=user.id,
        owner_id=prop.owner_id,
        type=data.type.value,
        message=data.message,
        requirements=data.requirements.model_dump(by_alias=True, mode="json", exclude_none=True),
        contact_info=contact,
        viewing={},
        communication=[],
    )
    session.add(inquiry)
    await session.execute(
        update(Property).where(Property.id == prop.id).values(inquiry_count=Property.inquiry_count + 1)
    )
    await session.commit()
    await session.refresh(inquiry)
    logger.info("Created inquiry", inquiry_id=str(inquiry.id), property_id=str(prop.id), tenant_id=str(user.id))
    return inquiry

async def _with_related(session: AsyncSession, condition, counterpart, key: str, limit: int | None = None) -> list[dict]:
    stmt = (
        select(Inquiry, Property, User)
        .outerjoin(Property, Property.id == Inquiry.property_id)
        .outerjoin(User, User.id == counterpart)
        .where(condition)
        .order_by(Inquiry.created_at.desc())
        .limit(limit)
    )
    rows = (await session.execute(stmt)).all()
    return [
        serialize_inquiry(inquiry, property=summarize_property(prop), **{key: summarize_user(other)})
        for inquiry, prop, other in rows
    ]

async def list_sent(session: AsyncSession, user: User, limit: int | None = None) -> list[dict]:
    return await _with_related(session, Inquiry.tenant_id == user.id, Inquiry.owner_id, "owner", limit)

async def list_received(session: AsyncSession, user: User, limit: int | None = None) -> list[dict]:
    return await _with_related(session, Inquiry.owner_id == user.id, Inquiry.tenant_id, "tenant", limit)

async def get_inquiry(session: AsyncSession, inquiry_id: uuid.UUID) -> Inquiry:
    inquiry = await session.get(Inquiry, inquiry_id)
    if inquiry is None:
        raise NotFoundError("Inquiry not found")
    return inquiry

async def view_inquiry(session: AsyncSession, user: User, inquiry_id: uuid.UUID) -> dict:
    """Fetch one inquiry for its tenant or owner; the owner's first view marks it read."""
    inquiry = await get_inquiry(session, inquiry_id)
    if not can_view_inquiry(user, inquiry):
        logger.warning("Inquiry access denied", inquiry_id=str(inquiry_id), user_id=str(user.id))
        raise AuthorizationError("Not authorized to view this inquiry")
    if user.id == inquiry.owner_id and inquiry.read_at is None:
        inquiry.read_at = utcnow()
        await session.commit()
        await session.refresh(inquiry)
    return serialize_inquiry(
        inquiry,
        property=summarize_property(await session.get(Property, inquiry.property_id)),
        tenant=summarize_user(await session.get(User, inquiry.tenant_id)),
        owner=summarize_user(await session.get(User, inquiry.owner_id)),
    )

async def get_handled_inquiry(session: AsyncSession, user: User, inquiry_id: uuid.UUID, action: str) -> Inquiry:
    inquiry = await get_inquiry(session, inquiry_id)
    if not can_handle_inquiry(user, inquiry):
        logger.warning("Inquiry ownership check failed", inquiry_id=str(inquiry_id), user_id=str(user.id), action=action)
        raise AuthorizationError(f"Not authorized to {action} this inquiry")
    return inquiry

async def respond(session: AsyncSession, user: User, inquiry_id: uuid.UUID, data: InquiryResponseCreate) -> Inquiry:
    inquiry = await get_handled_inquiry(session, user, inquiry_id, "respond to")
    now = utcnow()
    inquiry.response = {
        "message": data.message,
        "respondedAt": now.isoformat(),
        "respondedBy": str(user.id),
        "nextAction": data.next_action.value if data.next_action else None,
    }
    inquiry.status = InquiryStatus.RESPONDED.value
    inquiry.responded_at = now
    # JSON columns only track reassignment
    inquiry.communication = list(inquiry.communication or []) + [{
        "type": "email",
        "direction": "outbound",
        "message": data.message,
        "timestamp": now.isoformat(),
        "status": "sent",
    }]
    inquiry.total_interactions = (inquiry.total_interactions or 0) + 1
    await session.commit()
    await session.refresh(inquiry)
    logger.info("Responded to inquiry", inquiry_id=str(inquiry_id), user_id=str(user.id), next_action=inquiry.response["nextAction"])
    return inquiry

async def schedule_viewing(session: AsyncSession, user: User, inquiry_id: uuid.UUID, data: ViewingSchedule) -> Inquiry:
    inquiry = await get_handled_inquiry(session, user, inquiry_id, "schedule viewing for")
    inquiry.viewing = {
        **(inquiry.viewing or {}),
        "scheduledDate": as_naive_utc(data.scheduled_date).isoformat(),
        "notes": data.notes,
    }
    inquiry.status = InquiryStatus.VIEWING_SCHEDULED.value
    await session.commit()
    await session.refresh(inquiry)
    logger.info("Scheduled viewing", inquiry_id=str(inquiry_id), scheduled_date=inquiry.viewing["scheduledDate"])
    return inquiry

async def update_status(session: AsyncSession, user: User, inquiry_id: uuid.UUID, status: InquiryStatus) -> Inquiry:
    inquiry = await get_handled_inquiry(session, user, inquiry_id, "update")
    inquiry.status = InquiryStatus(status).value
    await session.commit()
    await session.refresh(inquiry)
    logger.info("Updated inquiry status", inquiry_id=str(inquiry_id), status=inquiry.status, user_id=str(user.id))
    return inquiry

async def count_for(session: AsyncSession, column, user_id) -> int:
    return await session.scalar(select(func.count()).select_from(Inquiry).where(column == user_id))

async def inquiry_stats(session: AsyncSession, user: User) -> dict:
    rows = (await session.execute(
        select(Inquiry.status, func.count())
        .where(Inquiry.owner_id == user.id)
        .group_by(Inquiry.status)
    )).all()
    breakdown = {status: count for status, count in rows}
    total = sum(breakdown.values())
    responded = breakdown.get(InquiryStatus.RESPONDED.value, 0)
    return {
        "total": total,
        "pending": breakdown.get(InquiryStatus.PENDING.value, 0),
        "responded": responded,
        "responseRate": round(responded / total * 100, 2) if total else 0,
        "statusBreakdown": [{"status": status, "count": count} for status, count in sorted(breakdown.items())],
    }
