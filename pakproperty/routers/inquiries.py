import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from pakproperty.db import get_session
from pakproperty.dependencies.auth import require_capability
from pakproperty.models import User
from pakproperty.permissions import Capability
from pakproperty.schemas.inquiry import (
    InquiryCreate, InquiryResponseCreate, InquiryStatusUpdate, ViewingSchedule, serialize_inquiry,
)
from pakproperty.services import inquiries as service

logger = get_logger()
router = APIRouter(prefix="/api/inquiries", tags=["inquiries"])

send_inquiries = require_capability(Capability.SEND_INQUIRIES)
manage_listings = require_capability(Capability.MANAGE_LISTINGS)

@router.post("", status_code=201)
async def create_inquiry(body: InquiryCreate, user: User = Depends(send_inquiries), session: AsyncSession = Depends(get_session)):
    inquiry = await service.create_inquiry(session, user, body)
    return {"success": True, "message": "Inquiry sent successfully", "data": serialize_inquiry(inquiry)}

@router.get("/my-inquiries")
async def my_inquiries(user: User = Depends(send_inquiries), session: AsyncSession = Depends(get_session)):
    items = await service.list_sent(session, user)
    return {"success": True, "count": len(items), "data": items}

@router.get("/received")
async def received_inquiries(user: User = Depends(manage_listings), session: AsyncSession = Depends(get_session)):
    items = await service.list_received(session, user)
    logger.info("Fetched received inquiries", user_id=str(user.id), count=len(items))
    return {"success": True, "count": len(items), "data": items}

@router.get("/stats")
async def inquiry_stats(user: User = Depends(manage_listings), session: AsyncSession = Depends(get_session)):
    return {"success": True, "data": await service.inquiry_stats(session, user)}

@router.get("/{inquiry_id}")
async def get_inquiry(inquiry_id: uuid.UUID, user: User = Depends(send_inquiries), session: AsyncSession = Depends(get_session)):
    return {"success": True, "data": await service.view_inquiry(session, user, inquiry_id)}

@router.put("/{inquiry_id}/respond")
async def respond(inquiry_id: uuid.UUID, body: InquiryResponseCreate, user: User = Depends(manage_listings), session: AsyncSession = Depends(get_session)):
    inquiry = await service.respond(session, user, inquiry_id, body)
    return {"success": True, "message": "Response sent successfully", "data": serialize_inquiry(inquiry)}

@router.put("/{inquiry_id}/schedule-viewing")
async def schedule_viewing(inquiry_id: uuid.UUID, body: ViewingSchedule, user: User = Depends(manage_listings), session: AsyncSession = Depends(get_session)):
    inquiry = await service.schedule_viewing(session, user, inquiry_id, body)
    return {"success": True, "message": "Viewing scheduled successfully", "data": serialize_inquiry(inquiry)}

@router.put("/{inquiry_id}/status")
async def update_status(inquiry_id: uuid.UUID, body: InquiryStatusUpdate, user: User = Depends(manage_listings), session: AsyncSession = Depends(get_session)):
    inquiry = await service.update_status(session, user, inquiry_id, body.status)
    return {"success": True, "message": "Inquiry status updated successfully", "data": serialize_inquiry(inquiry)}
