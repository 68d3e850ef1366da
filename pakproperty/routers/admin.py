import uuid

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from pakproperty.db import get_session
from pakproperty.dependencies.auth import require_capability
from pakproperty.dependencies.rate_limit import rate_limited
from pakproperty.models import User
from pakproperty.permissions import Capability
from pakproperty.schemas.user import AdminUserQuery, AdminUserUpdate, serialize_user
from pakproperty.services import admin as service
from pakproperty.services.properties import validate_model

logger = get_logger()
router = APIRouter(prefix="/api/admin", tags=["admin"])

get_current_admin = require_capability(Capability.ADMINISTER)

def user_query(request: Request) -> AdminUserQuery:
    return validate_model(AdminUserQuery, dict(request.query_params))

@router.get("/dashboard", dependencies=[Depends(rate_limited(times=10, seconds=60))])
async def dashboard(admin: User = Depends(get_current_admin), session: AsyncSession = Depends(get_session)):
    data = await service.get_dashboard(session)
    logger.info("Fetched admin dashboard", admin_id=str(admin.id))
    return {"success": True, "data": data}

@router.get("/users", dependencies=[Depends(rate_limited(times=5, seconds=60))])
async def list_users(query: AdminUserQuery = Depends(user_query), admin: User = Depends(get_current_admin), session: AsyncSession = Depends(get_session)):
    result = await service.list_users(session, query)
    logger.info("Fetched users", admin_id=str(admin.id), total=result["total"])
    return result

@router.get("/users/{user_id}", dependencies=[Depends(rate_limited(times=10, seconds=60))])
async def get_user_detail(user_id: uuid.UUID, admin: User = Depends(get_current_admin), session: AsyncSession = Depends(get_session)):
    user = await service.get_user(session, user_id)
    logger.info("Fetched user detail", user_id=str(user_id), admin_id=str(admin.id))
    return {"success": True, "data": serialize_user(user)}

@router.put("/users/{user_id}")
async def update_user(user_id: uuid.UUID, body: AdminUserUpdate, admin: User = Depends(get_current_admin), session: AsyncSession = Depends(get_session)):
    user = await service.update_user(session, user_id, body)
    logger.info("Updated user", user_id=str(user_id), admin_id=str(admin.id), fields=sorted(body.model_dump(exclude_unset=True)))
    return {"success": True, "data": serialize_user(user)}

@router.delete("/users/{user_id}")
async def delete_user(user_id: uuid.UUID, admin: User = Depends(get_current_admin), session: AsyncSession = Depends(get_session)):
    await service.delete_user(session, admin, user_id)
    logger.info("Deleted user", user_id=str(user_id), admin_id=str(admin.id))
    return {"success": True, "message": "User deleted successfully"}
