from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from pakproperty.db import get_session
from pakproperty.dependencies.auth import get_current_user
from pakproperty.dependencies.rate_limit import rate_limited
from pakproperty.models import User
from pakproperty.schemas.user import LoginRequest, RegisterRequest, serialize_user
from pakproperty.security import create_access_token
from pakproperty.services import users as service

logger = get_logger()
router = APIRouter(prefix="/api/auth", tags=["auth"])

def _token_response(user: User) -> dict:
    return {"success": True, "token": create_access_token(user), "user": serialize_user(user)}

@router.post("/register", status_code=201)
async def register(body: RegisterRequest, session: AsyncSession = Depends(get_session)):
    user = await service.register_user(session, body)
    return _token_response(user)

@router.post("/login", dependencies=[Depends(rate_limited(times=5, seconds=60))])
async def login(body: LoginRequest, session: AsyncSession = Depends(get_session)):
    user = await service.authenticate(session, body)
    return _token_response(user)

@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return {"success": True, "user": serialize_user(user)}
