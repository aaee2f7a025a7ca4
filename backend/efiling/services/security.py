"""Password hashing and JWT issue/verify."""
import time
import uuid
from typing import Any, Optional

import bcrypt
import jwt

from efiling.config import settings


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _encode(user_id: uuid.UUID, token_type: str, ttl_seconds: int, secret: str) -> str:
    now = int(time.time())
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + ttl_seconds,
        "type": token_type,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


def _decode(token: str, token_type: str, secret: str) -> Optional[dict[str, Any]]:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def create_access_token(user_id: uuid.UUID) -> str:
    return _encode(user_id, "access", settings.ACCESS_TOKEN_TTL_MINUTES * 60, settings.JWT_SECRET)


def create_refresh_token(user_id: uuid.UUID) -> str:
    return _encode(
        user_id, "refresh", settings.REFRESH_TOKEN_TTL_DAYS * 24 * 3600, settings.JWT_REFRESH_SECRET
    )


def decode_access_token(token: str) -> Optional[dict[str, Any]]:
    return _decode(token, "access", settings.JWT_SECRET)


def decode_refresh_token(token: str) -> Optional[dict[str, Any]]:
    return _decode(token, "refresh", settings.JWT_REFRESH_SECRET)


def get_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    if not auth_header:
        return None
    parts = auth_header.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None
