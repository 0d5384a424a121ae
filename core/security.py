# app/core/security.py
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import jwt, JWTError
from passlib.context import CryptContext

from core.cache import get_cache, set_cache
from core.config import settings
from core.exceptions import AuthenticationError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_credential(credential: str) -> str:
    return pwd_context.hash(credential)


def verify_credential(credential: str, hashed: str) -> bool:
    return pwd_context.verify(credential, hashed)


def create_access_token(subject: str, expires_minutes: int = None, extra_data: dict = None) -> str:
    if expires_minutes is None:
        expires_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES

    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "exp": now + timedelta(minutes=expires_minutes),
        "iat": now,
        "type": "access",
        "jti": str(uuid.uuid4()),
    }

    if extra_data:
        payload.update(extra_data)

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_payload(token: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise AuthenticationError("Invalid or expired token")
    if payload.get("sub") is None:
        raise AuthenticationError("Invalid token")
    return payload


async def revoke_token(payload: Dict[str, Any]) -> None:
    jti = payload.get("jti")
    if not jti:
        return
    ttl = int(payload.get("exp", 0) - datetime.now(timezone.utc).timestamp())
    await set_cache(f"revoked_token:{jti}", "1", ttl=max(ttl, 1))


async def is_token_revoked(payload: Dict[str, Any]) -> bool:
    jti = payload.get("jti")
    return bool(jti) and await get_cache(f"revoked_token:{jti}") is not None


async def decode_token(token: str) -> str:
    """Principal of a valid, unrevoked access token."""
    payload = decode_payload(token)
    if await is_token_revoked(payload):
        raise AuthenticationError("Token has been revoked")
    return payload["sub"]
