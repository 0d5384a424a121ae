# app/api/v1/endpoints/admins.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from core.database import get_db
from core.exceptions import NotFoundError
from core.permissions import require_admin_permission
from core.roles import AdminPermission
from schemas.admin import AdminCreate, AdminStats, AdminUpdate, AdminUser
from schemas.audit import AuditAction, AuditEntry
from services.admin_service import AdminService
from services.audit_service import AuditService

router = APIRouter()

require_users = require_admin_permission(AdminPermission.USERS)


@router.get("/", response_model=List[AdminUser])
async def list_admins(
        include_deleted: bool = False,
        db: AsyncSession = Depends(get_db),
        _=Depends(require_users)
):
    """List admin accounts"""
    return await AdminService(db).list_admins(include_deleted=include_deleted)


@router.get("/stats", response_model=AdminStats)
async def admin_stats(
        db: AsyncSession = Depends(get_db),
        _=Depends(require_users)
):
    """Admin counts per permission"""
    return await AdminService(db).get_stats()


@router.get("/audit", response_model=List[AuditEntry])
async def admin_audit(
        action: Optional[AuditAction] = None,
        target_user_id: Optional[str] = None,
        performed_by: Optional[str] = None,
        limit: int = Query(100, ge=1, le=1000),
        db: AsyncSession = Depends(get_db),
        _=Depends(require_users)
):
    """Admin audit trail, newest first"""
    return await AuditService(db).list_entries(
        action=action.value if action else None,
        target_user_id=target_user_id,
        performed_by=performed_by,
        limit=limit,
    )


@router.get("/{user_id}", response_model=AdminUser)
async def get_admin(
        user_id: str,
        db: AsyncSession = Depends(get_db),
        _=Depends(require_users)
):
    admin = await AdminService(db).get_admin(user_id)
    if admin is None or admin.deleted:
        raise NotFoundError(f"Admin not found: {user_id}")
    return admin


@router.post("/", response_model=AdminUser, status_code=201)
async def add_admin(
        data: AdminCreate,
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(require_users)
):
    """Grant admin rights to a user (super admins only)"""
    return await AdminService(db).add_admin(
        data.user_id,
        principal,
        role=data.role,
        permissions=data.permissions,
        email=data.email,
        name=data.name,
    )


@router.patch("/{user_id}", response_model=AdminUser)
async def update_admin(
        user_id: str,
        data: AdminUpdate,
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(require_users)
):
    return await AdminService(db).update_admin(
        user_id,
        principal,
        role=data.role,
        permissions=data.permissions,
        email=data.email,
        name=data.name,
    )


@router.delete("/{user_id}", response_model=AdminUser)
async def remove_admin(
        user_id: str,
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(require_users)
):
    """Soft delete an admin account"""
    return await AdminService(db).remove_admin(user_id, principal)
