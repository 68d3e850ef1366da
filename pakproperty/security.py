from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from pakproperty.config import settings
from pakproperty.errors import AuthenticationError

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12)).decode("utf-8")

def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False

def create_access_token(user) -> str:
    """Issue a bearer token carrying the user's id, email and role."""
    payload = {
        "id": str(user.id),
        "email": user.email,
        "role": user.role,
        "exp": datetime.now(timezone.utc) + timedelta(days=settings.JWT_EXPIRE_DAYS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.PyJWTError as e:
        raise AuthenticationError("Not authorized to access this route") from e
    if not payload.get("id"):
        raise AuthenticationError("Not authorized to access this route")
    return payload
