import math
import uuid

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from pakproperty.config import settings
from pakproperty.errors import AuthorizationError, NotFoundError, ValidationError
from pakproperty.models import Inquiry, Property, SavedProperty, User, as_naive_utc, utcnow
from pakproperty.models.enums import PropertyStatus, SortOrder
from pakproperty.permissions import can_manage_property
from pakproperty.schemas.property import (
    DOCUMENT_MODELS, PropertyCreate, PropertyQuery, PropertyUpdate, check_rooms, serialize_property,
)
from pakproperty.services import cache
from pakproperty.services.images import IncomingImage, delete_images, store_images, validate_images

logger = get_logger()

_SORT_COLUMNS = {
    SortOrder.PRICE_ASC: Property.rent.asc(),
    SortOrder.PRICE_DESC: Property.rent.desc(),
    SortOrder.DATE_ASC: Property.created_at.asc(),
    SortOrder.DATE_DESC: Property.created_at.desc(),
    SortOrder.NEWEST: Property.created_at.desc(),
    SortOrder.SIZE_ASC: Property.area["size"].as_float().asc(),
    SortOrder.SIZE_DESC: Property.area["size"].as_float().desc(),
}

def format_errors(errors) -> list[dict]:
    return [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")), "message": err.get("msg", "")}
        for err in errors
    ]

def validate_model(model, data: dict):
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        errors = format_errors(e.errors())
        message = errors[0]["message"] if len(errors) == 1 else "Validation failed"
        raise ValidationError(message, errors=errors) from e

def build_conditions(query: PropertyQuery) -> list:
    """Every supplied filter becomes one AND-ed condition."""
    conditions = []
    if query.city:
        conditions.append(Property.location["city"].as_string() == query.city.value)
    if query.area:
        conditions.append(Property.location["area"].as_string().icontains(query.area, autoescape=True))
    if query.property_type:
        conditions.append(Property.property_type == query.property_type.value)
    if query.category:
        conditions.append(Property.category == query.category.value)
    if query.min_price is not None:
        conditions.append(Property.rent >= query.min_price)
    if query.max_price is not None:
        conditions.append(Property.rent <= query.max_price)
    if query.bedrooms is not None:
        conditions.append(Property.specifications["bedrooms"].as_integer() >= query.bedrooms)
    if query.bathrooms is not None:
        conditions.append(Property.specifications["bathrooms"].as_integer() >= query.bathrooms)
    if query.furnishing:
        conditions.append(Property.features["furnishing"].as_string() == query.furnishing.value)
    if query.status:
        conditions.append(Property.status == query.status.value)
    if query.search:
        term = query.search.strip()
        conditions.append(or_(
            Property.title.icontains(term, autoescape=True),
            Property.description.icontains(term, autoescape=True),
            Property.location["address"].as_string().icontains(term, autoescape=True),
            Property.location["area"].as_string().icontains(term, autoescape=True),
        ))
    return conditions

async def list_properties(session: AsyncSession, query: PropertyQuery) -> dict:
    conditions = build_conditions(query)
    total = await session.scalar(select(func.count()).select_from(Property).where(*conditions))
    stmt = (
        select(Property)
        .where(*conditions)
        .order_by(_SORT_COLUMNS[query.sort], Property.id)
        .offset((query.page - 1) * query.limit)
        .limit(query.limit)
    )
    items = (await session.scalars(stmt)).all()
    return {
        "success": True,
        "count": len(items),
        "total": total,
        "pagination": {"page": query.page, "limit": query.limit, "pages": math.ceil(total / query.limit)},
        "data": [serialize_property(p) for p in items],
    }

async def get_featured(session: AsyncSession) -> dict:
    cached = await cache.get_cached(cache.FEATURED_KEY)
    if cached is not None:
        return cached
    stmt = (
        select(Property)
        .where(Property.is_featured.is_(True), Property.status == PropertyStatus.AVAILABLE.value)
        .order_by(Property.created_at.desc())
        .limit(settings.FEATURED_LIMIT)
    )
    items = (await session.scalars(stmt)).all()
    result = {"success": True, "count": len(items), "data": [serialize_property(p) for p in items]}
    await cache.set_cached(cache.FEATURED_KEY, result, settings.FEATURED_CACHE_SECONDS)
    return result

async def get_my_properties(session: AsyncSession, user: User) -> list[Property]:
    stmt = (
        select(Property)
        .where(or_(Property.owner_id == user.id, Property.agent_id == user.id))
        .order_by(Property.created_at.desc())
    )
    return (await session.scalars(stmt)).all()

async def get_property(session: AsyncSession, property_id: uuid.UUID) -> Property:
    prop = await session.get(Property, property_id)
    if prop is None:
        raise NotFoundError("Property not found")
    return prop

async def view_property(session: AsyncSession, property_id: uuid.UUID) -> Property:
    await get_property(session, property_id)
    await session.execute(
        update(Property).where(Property.id == property_id).values(views=Property.views + 1)
    )
    await session.commit()
    prop = await get_property(session, property_id)
    await session.refresh(prop)
    return prop

async def get_managed_property(session: AsyncSession, user: User, property_id: uuid.UUID, action: str = "update") -> Property:
    prop = await get_property(session, property_id)
    if not can_manage_property(user, prop):
        logger.warning("Ownership check failed", property_id=str(property_id), user_id=str(user.id), action=action)
        raise AuthorizationError(f"Not authorized to {action} this property")
    return prop

def _document(model) -> dict:
    return model.model_dump(by_alias=True, mode="json", exclude_unset=False)

async def create_property(session: AsyncSession, user: User, data: PropertyCreate, images: list[IncomingImage]) -> Property:
    validate_images(images)
    fields = data.model_dump(mode="json", exclude={"location", "specifications", "area", "features", "contact_info", "terms", "available_from"})
    prop = Property(
        id=uuid.uuid4(),
        owner_id=user.id,
        location=_document(data.location),
        specifications=_document(data.specifications),
        area=_document(data.area),
        features=_document(data.features),
        contact_info=_document(data.contact_info),
        terms=_document(data.terms),
        available_from=as_naive_utc(data.available_from) if data.available_from else utcnow(),
        **fields,
    )
    prop.images = await store_images(images)
    prop.slug = prop.generate_slug()
    session.add(prop)
    await session.commit()
    await session.refresh(prop)
    await cache.invalidate(cache.FEATURED_KEY)
    logger.info("Created property", property_id=str(prop.id), owner_id=str(user.id))
    return prop

def _deep_merge(stored: dict, patch: dict) -> dict:
    merged = dict(stored)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged

def merge_document(name: str, stored: dict | None, patch: dict) -> dict:
    """Apply a partial patch to a stored sub-document and revalidate it whole."""
    model = DOCUMENT_MODELS[name]
    fields = model.model_fields
    patch = {(fields[k].alias or k) if k in fields else k: v for k, v in patch.items()}
    try:
        return _document(model.model_validate(_deep_merge(stored or {}, patch)))
    except PydanticValidationError as e:
        prefix = to_camel(name)
        errors = [
            {"field": f"{prefix}.{err['field']}" if err["field"] else prefix, "message": err["message"]}
            for err in format_errors(e.errors())
        ]
        raise ValidationError(errors[0]["message"] if len(errors) == 1 else "Validation failed", errors=errors) from e

async def update_property(session: AsyncSession, user: User, property_id: uuid.UUID, data: PropertyUpdate, images: list[IncomingImage]) -> Property:
    prop = await get_managed_property(session, user, property_id)
    validate_images(images)
    changes = data.model_dump(exclude_unset=True)
    values = {}
    for key, value in changes.items():
        if value is None:
            continue
        if key in DOCUMENT_MODELS:
            value = merge_document(key, getattr(prop, key), value)
        elif key == "available_from":
            value = as_naive_utc(value)
        elif hasattr(value, "value"):
            value = value.value
        values[key] = value
    try:
        check_rooms(values.get("category", prop.category), values.get("specifications", prop.specifications) or {})
    except ValueError as e:
        raise ValidationError(str(e), errors=[{"field": "specifications", "message": str(e)}]) from e
    for key, value in values.items():
        setattr(prop, key, value)
    if images:
        existing = list(prop.images or [])
        prop.images = existing + await store_images(images, start_order=len(existing), first_is_primary=not existing)
    if {"title", "location"} & changes.keys():
        prop.slug = prop.generate_slug()
    await session.commit()
    await session.refresh(prop)
    await cache.invalidate(cache.FEATURED_KEY)
    logger.info("Updated property", property_id=str(property_id), fields=sorted(changes), new_images=len(images))
    return prop

async def update_status(session: AsyncSession, user: User, property_id: uuid.UUID, status: PropertyStatus) -> Property:
    prop = await get_managed_property(session, user, property_id)
    # Single-row UPDATE; the store applies it atomically
    await session.execute(
        update(Property)
        .where(Property.id == property_id)
        .values(status=PropertyStatus(status).value, updated_at=utcnow())
    )
    await session.commit()
    await session.refresh(prop)
    await cache.invalidate(cache.FEATURED_KEY)
    logger.info("Updated property status", property_id=str(property_id), status=prop.status, user_id=str(user.id))
    return prop

async def set_featured(session: AsyncSession, property_id: uuid.UUID, is_featured: bool) -> Property:
    prop = await get_property(session, property_id)
    await session.execute(
        update(Property).where(Property.id == property_id).values(is_featured=is_featured)
    )
    await session.commit()
    await session.refresh(prop)
    await cache.invalidate(cache.FEATURED_KEY)
    logger.info("Updated property featured flag", property_id=str(property_id), is_featured=is_featured)
    return prop

async def delete_property(session: AsyncSession, user: User, property_id: uuid.UUID):
    prop = await get_managed_property(session, user, property_id, action="delete")
    urls = [img.get("url") for img in (prop.images or []) if img.get("url")]
    await session.execute(delete(SavedProperty).where(SavedProperty.property_id == property_id))
    await session.execute(delete(Inquiry).where(Inquiry.property_id == property_id))
    await session.delete(prop)
    await session.commit()
    await delete_images(urls)
    await cache.invalidate(cache.FEATURED_KEY)
    logger.info("Deleted property", property_id=str(property_id), user_id=str(user.id), images=len(urls))

async def property_analytics(session: AsyncSession, user: User, property_id: uuid.UUID) -> dict:
    prop = await get_managed_property(session, user, property_id, action="view analytics for")
    days_listed = (utcnow() - prop.created_at).days if prop.created_at else 0
    return {
        "views": prop.views,
        "savedCount": prop.saved_count,
        "daysListed": days_listed,
        "inquiries": prop.inquiry_count,
        "averageViewsPerDay": round(prop.views / days_listed, 2) if days_listed > 0 else prop.views,
    }
