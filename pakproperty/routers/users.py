import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from pakproperty.db import get_session
from pakproperty.dependencies.auth import get_account_user, get_current_user, require_capability
from pakproperty.models import User
from pakproperty.permissions import Capability
from pakproperty.schemas.property import serialize_property
from pakproperty.schemas.user import DeactivateRequest, NotificationsUpdate, ProfileUpdate, serialize_user
from pakproperty.services import users as service

logger = get_logger()
router = APIRouter(prefix="/api/users", tags=["users"])

save_listings = require_capability(Capability.SAVE_LISTINGS)

@router.get("/profile")
async def get_profile(user: User = Depends(get_current_user)):
    return {"success": True, "data": serialize_user(user)}

@router.put("/profile")
async def update_profile(body: ProfileUpdate, user: User = Depends(get_current_user), session: AsyncSession = Depends(get_session)):
    user = await service.update_profile(session, user, body)
    return {"success": True, "data": serialize_user(user)}

@router.get("/dashboard")
async def dashboard(user: User = Depends(get_current_user), session: AsyncSession = Depends(get_session)):
    return {"success": True, "data": await service.user_dashboard(session, user)}

@router.get("/stats")
async def stats(user: User = Depends(get_current_user), session: AsyncSession = Depends(get_session)):
    return {"success": True, "data": await service.user_stats(session, user)}

@router.put("/notifications")
async def update_notifications(body: NotificationsUpdate, user: User = Depends(get_current_user), session: AsyncSession = Depends(get_session)):
    return {"success": True, "data": await service.update_notifications(session, user, body)}

@router.put("/deactivate")
async def deactivate(body: DeactivateRequest | None = None, user: User = Depends(get_current_user), session: AsyncSession = Depends(get_session)):
    await service.deactivate_account(session, user, body.reason if body else None)
    return {"success": True, "message": "Account deactivated successfully"}

@router.put("/reactivate")
async def reactivate(user: User = Depends(get_account_user), session: AsyncSession = Depends(get_session)):
    user = await service.reactivate_account(session, user)
    return {"success": True, "message": "Account reactivated successfully", "data": serialize_user(user)}

@router.get("/saved-properties")
async def saved_properties(user: User = Depends(save_listings), session: AsyncSession = Depends(get_session)):
    items = await service.get_saved_properties(session, user)
    return {"success": True, "count": len(items), "data": [serialize_property(p) for p in items]}

@router.post("/saved-properties/{property_id}")
async def save_property(property_id: uuid.UUID, user: User = Depends(save_listings), session: AsyncSession = Depends(get_session)):
    await service.save_property(session, user, property_id)
    return {"success": True, "message": "Property saved successfully"}

@router.delete("/saved-properties/{property_id}")
async def remove_saved_property(property_id: uuid.UUID, user: User = Depends(save_listings), session: AsyncSession = Depends(get_session)):
    await service.remove_saved_property(session, user, property_id)
    return {"success": True, "message": "Property removed from saved list"}
