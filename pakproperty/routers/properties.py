import json
import uuid

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile
from structlog import get_logger

from pakproperty.db import get_session
from pakproperty.dependencies.auth import require_capability
from pakproperty.errors import ValidationError
from pakproperty.models import User
from pakproperty.permissions import Capability
from pakproperty.schemas.property import (
    FeaturedUpdate, PropertyCreate, PropertyQuery, PropertyUpdate, StatusUpdate, serialize_property,
)
from pakproperty.services import properties as service
from pakproperty.services.images import IncomingImage

logger = get_logger()
router = APIRouter(prefix="/api/properties", tags=["properties"])

manage_listings = require_capability(Capability.MANAGE_LISTINGS)
administer = require_capability(Capability.ADMINISTER)

NESTED_FIELDS = {"location", "specifications", "area", "features", "amenities", "contactInfo", "contact_info", "terms"}

def property_query(request: Request) -> PropertyQuery:
    return service.validate_model(PropertyQuery, dict(request.query_params))

async def read_property_form(request: Request) -> tuple[dict, list[IncomingImage]]:
    """Split a multipart listing body into field values and image uploads.
    Nested documents arrive JSON-encoded; ``imageCaption{n}`` names the
    n-th uploaded file.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            return await request.json(), []
        except json.JSONDecodeError as e:
            raise ValidationError("Malformed JSON body") from e
    form = await request.form()
    data, files = {}, []
    for key, value in form.multi_items():
        if key == "images":
            if isinstance(value, UploadFile):
                files.append(value)
            continue
        if key.startswith("imageCaption"):
            continue
        if key in NESTED_FIELDS and isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                raise ValidationError(f"{key} must be a JSON object") from e
        data[key] = value
    images = []
    for index, upload in enumerate(files):
        caption = form.get(f"imageCaption{index}") or ""
        images.append(IncomingImage(
            filename=upload.filename or "",
            content=await upload.read(),
            content_type=upload.content_type or "",
            caption=caption if isinstance(caption, str) else "",
        ))
    return data, images

@router.get("")
async def list_properties(query: PropertyQuery = Depends(property_query), session: AsyncSession = Depends(get_session)):
    result = await service.list_properties(session, query)
    logger.info("Fetched properties", total=result["total"], page=query.page)
    return result

@router.get("/featured")
async def featured_properties(session: AsyncSession = Depends(get_session)):
    return await service.get_featured(session)

@router.get("/my-properties")
async def my_properties(user: User = Depends(manage_listings), session: AsyncSession = Depends(get_session)):
    items = await service.get_my_properties(session, user)
    return {"success": True, "count": len(items), "data": [serialize_property(p) for p in items]}

@router.patch("/{property_id}/status")
async def update_property_status(
    property_id: uuid.UUID,
    body: StatusUpdate,
    user: User = Depends(manage_listings),
    session: AsyncSession = Depends(get_session),
):
    prop = await service.update_status(session, user, property_id, body.status)
    return {"success": True, "message": "Property status updated successfully", "data": serialize_property(prop)}

@router.patch("/{property_id}/featured")
async def update_property_featured(
    property_id: uuid.UUID,
    body: FeaturedUpdate,
    user: User = Depends(administer),
    session: AsyncSession = Depends(get_session),
):
    prop = await service.set_featured(session, property_id, body.is_featured)
    logger.info("Featured flag changed by admin", admin_id=str(user.id), property_id=str(property_id))
    return {"success": True, "message": "Property featured status updated successfully", "data": serialize_property(prop)}

@router.get("/{property_id}/analytics")
async def analytics(property_id: uuid.UUID, user: User = Depends(manage_listings), session: AsyncSession = Depends(get_session)):
    return {"success": True, "data": await service.property_analytics(session, user, property_id)}

@router.get("/{property_id}")
async def get_property(property_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    prop = await service.view_property(session, property_id)
    return {"success": True, "data": serialize_property(prop)}

@router.post("", status_code=201)
async def create_property(request: Request, user: User = Depends(manage_listings), session: AsyncSession = Depends(get_session)):
    data, images = await read_property_form(request)
    payload = service.validate_model(PropertyCreate, data)
    prop = await service.create_property(session, user, payload, images)
    return {"success": True, "data": serialize_property(prop)}

@router.put("/{property_id}")
async def update_property(
    property_id: uuid.UUID,
    request: Request,
    user: User = Depends(manage_listings),
    session: AsyncSession = Depends(get_session),
):
    data, images = await read_property_form(request)
    payload = service.validate_model(PropertyUpdate, data)
    prop = await service.update_property(session, user, property_id, payload, images)
    return {"success": True, "data": serialize_property(prop)}

@router.delete("/{property_id}")
async def delete_property(property_id: uuid.UUID, user: User = Depends(manage_listings), session: AsyncSession = Depends(get_session)):
    await service.delete_property(session, user, property_id)
    return {"success": True, "message": "Property deleted successfully"}
