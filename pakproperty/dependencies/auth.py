import uuid

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from pakproperty.db import get_session
from pakproperty.errors import AuthenticationError, AuthorizationError
from pakproperty.models import User
from pakproperty.permissions import Capability, has_capability
from pakproperty.security import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)
logger = get_logger()

async def get_account_user(
    token: str | None = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_session),
) -> User:
    """Resolve the bearer token to a user, active or not.
    The token must decode with our secret and name a user that still exists.
    """
    if not token:
        raise AuthenticationError()
    payload = decode_access_token(token)
    try:
        user_id = uuid.UUID(str(payload["id"]))
    except ValueError as e:
        raise AuthenticationError() from e
    user = await session.get(User, user_id)
    if user is None:
        logger.warning("Token for unknown user", user_id=str(user_id))
        raise AuthenticationError("User not found")
    return user

async def get_current_user(user: User = Depends(get_account_user)) -> User:
    if not user.is_active:
        raise AuthenticationError("Account is deactivated")
    return user

def require_capability(capability: Capability):
    async def checker(user: User = Depends(get_current_user)) -> User:
        if not has_capability(user.role, capability):
            logger.warning("Capability denied", user_id=str(user.id), role=user.role, capability=capability.value)
            raise AuthorizationError(f"User role {user.role} is not authorized to access this route")
        return user
    return checker
