# app/core/permissions.py
import json
import logging
from typing import List, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from core.cache import get_cache, set_cache
from core.config import settings
from core.database import get_db
from core.exceptions import AuthenticationError, PermissionDeniedError
from core.roles import AdminPermission
from core.security import decode_token
from services.admin_service import AdminService, permission_cache_key

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/token",
    auto_error=False
)


async def get_current_identity(token: Optional[str] = Depends(oauth2_scheme)) -> str:
    if not token:
        raise AuthenticationError("Not authenticated")
    return await decode_token(token)


async def get_current_identity_optional(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    if not token:
        return None
    try:
        return await decode_token(token)
    except AuthenticationError:
        return None


async def get_admin_permissions(principal: str, db: AsyncSession) -> List[str]:
    cache_key = permission_cache_key(principal)

    cached = await get_cache(cache_key)
    if cached is not None:
        return json.loads(cached)

    permissions = [p.value for p in await AdminService(db).get_permissions(principal)]
    await set_cache(cache_key, json.dumps(permissions), ttl=settings.PERMISSION_CACHE_TTL)
    return permissions


async def identity_has_permission(principal: Optional[str], permission: AdminPermission, db: AsyncSession) -> bool:
    if not principal:
        return False
    return permission.value in await get_admin_permissions(principal, db)


def require_admin_permission(permission: AdminPermission):

    async def checker(
        principal: str = Depends(get_current_identity),
        db: AsyncSession = Depends(get_db)
    ) -> str:
        if not await identity_has_permission(principal, permission, db):
            logger.warning(f"{principal} denied: missing {permission.value} permission")
            raise PermissionDeniedError("Permission denied")
        return principal

    return checker
