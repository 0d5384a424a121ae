# app/services/admin_service.py
import json
import logging
from typing import Iterable, List, Optional, Union

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from core.cache import delete_cache
from core.constants import ADMIN_COLLECTION
from core.exceptions import (
    AuditError, BackendError, ConflictError, NotFoundError,
    PermissionDeniedError, RollbackError, ValidationFailedError,
)
from core.roles import AdminPermission, AdminRole, permissions_for, validate_role_permissions
from schemas.admin import AdminStats, AdminUser
from schemas.audit import AuditAction
from services.audit_service import AuditService
from services.document_store import DocumentStore
from services.hooks import is_valid_email
from utils.timestamps import now_ms

logger = logging.getLogger(__name__)


def permission_cache_key(user_id: str) -> str:
    return f"admin_permissions:{user_id}"


def _ordered(permissions: Iterable[Union[AdminPermission, str]]) -> List[AdminPermission]:
    """Deduplicate and sort permissions in table order."""
    wanted = {AdminPermission(p) for p in permissions}
    return [p for p in AdminPermission if p in wanted]


class AdminService:
    """Registry of admin accounts backed by the admins collection."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = DocumentStore(db)
        self.audit = AuditService(db, self.store)

    # ---------- lookups ----------
    async def get_admin(self, user_id: str) -> Optional[AdminUser]:
        """Direct key lookup, soft-deleted records included."""
        doc = await self.store.get_doc(ADMIN_COLLECTION, user_id)
        if doc is None:
            return None
        return AdminUser(**doc.data)

    async def list_admins(self, include_deleted: bool = False) -> List[AdminUser]:
        docs = await self.store.list_docs(ADMIN_COLLECTION)
        admins = [AdminUser(**doc.data) for doc in docs.items]
        if include_deleted:
            return admins
        return [admin for admin in admins if not admin.deleted]

    async def is_admin(self, user_id: str) -> bool:
        try:
            admin = await self.get_admin(user_id)
        except HTTPException as e:
            logger.error(f"Failed to check admin status of {user_id}: {e.detail}")
            return False
        return admin is not None and not admin.deleted

    async def get_permissions(self, user_id: str) -> List[AdminPermission]:
        admin = await self.get_admin(user_id)
        if admin is None or admin.deleted:
            return []
        return list(admin.permissions)

    async def has_permission(self, user_id: str, permission: Union[AdminPermission, str]) -> bool:
        try:
            permissions = await self.get_permissions(user_id)
        except HTTPException as e:
            logger.error(f"Failed to check permissions of {user_id}: {e.detail}")
            return False
        return AdminPermission(permission) in permissions

    async def get_stats(self) -> AdminStats:
        admins = await self.list_admins()

        def count(permission: AdminPermission) -> int:
            return sum(1 for admin in admins if permission in admin.permissions)

        return AdminStats(
            total_admins=len(admins),
            super_admins=count(AdminPermission.SUPER),
            content_admins=count(AdminPermission.CONTENT),
            user_admins=count(AdminPermission.USERS),
            settings_admins=count(AdminPermission.SETTINGS),
        )

    # ---------- mutations ----------
    async def add_admin(
            self,
            user_id: str,
            creator_id: str,
            role: Union[AdminRole, str] = AdminRole.VIEWER,
            permissions: Optional[List[Union[AdminPermission, str]]] = None,
            email: str = "",
            name: str = "",
    ) -> AdminUser:
        if not user_id or not creator_id:
            raise ValidationFailedError("Missing required fields: user_id and creator_id")

        role = AdminRole(role)
        granted = _ordered(permissions) if permissions is not None else permissions_for(role)
        if not validate_role_permissions(role, granted):
            raise ValidationFailedError(
                f"Permissions {[p.value for p in granted]} not allowed for role {role.value}"
            )

        existing = await self.store.get_doc(ADMIN_COLLECTION, user_id)
        if existing is not None and not existing.data.get("deleted"):
            raise ConflictError(f"Admin already exists: {user_id}")

        now = now_ms()
        admin = AdminUser(
            user_id=user_id,
            email=email,
            name=name,
            role=role,
            permissions=granted,
            created_at=now,
            created_by=creator_id,
            last_active=now,
        )

        try:
            await self.store.set_doc(
                ADMIN_COLLECTION, user_id, admin.model_dump(mode="json"), caller=creator_id
            )
        except PermissionDeniedError as e:
            logger.warning(f"Admin creation of {user_id} by {creator_id} denied: {e.detail}")
            raise PermissionDeniedError("Permission denied: Requires super admin privileges") from e

        await delete_cache(permission_cache_key(user_id))
        await self.audit.log(
            AuditAction.ADD_ADMIN.value,
            user_id,
            creator_id,
            details=json.dumps({"role": role.value, "permissions": [p.value for p in granted]}),
        )
        logger.info(f"Admin {user_id} added by {creator_id} as {role.value}")
        return admin

    async def remove_admin(self, user_id: str, remover_id: str) -> AdminUser:
        """Soft delete. The change is reverted when its audit entry cannot be written."""
        if not user_id or not remover_id:
            raise ValidationFailedError("Missing required fields: user_id and remover_id")

        existing = await self.store.get_doc(ADMIN_COLLECTION, user_id)
        if existing is None or existing.data.get("deleted"):
            raise NotFoundError(f"Admin not found: {user_id}")

        original = dict(existing.data)
        updated = {
            **original,
            "deleted": True,
            "deleted_at": now_ms(),
            "deleted_by": remover_id,
        }

        await self.store.set_doc(ADMIN_COLLECTION, user_id, updated, caller=remover_id)
        await delete_cache(permission_cache_key(user_id))

        try:
            await self.audit.log(AuditAction.REMOVE_ADMIN.value, user_id, remover_id, strict=True)
        except AuditError as audit_error:
            logger.error(f"Audit failed after removing admin {user_id}, rolling back")
            try:
                await self.store.set_doc(ADMIN_COLLECTION, user_id, original, caller=remover_id)
            except HTTPException as e:
                logger.critical(f"Rollback of admin {user_id} removal failed: {e.detail}")
                raise BackendError(
                    f"Admin removal rollback failed after audit failure: {e.detail}"
                ) from e
            finally:
                await delete_cache(permission_cache_key(user_id))
            raise RollbackError(
                f"Admin removal rolled back due to audit failure: {audit_error.detail}"
            ) from audit_error

        logger.info(f"Admin {user_id} removed by {remover_id}")
        return AdminUser(**updated)

    async def update_admin(
            self,
            user_id: str,
            updater_id: str,
            role: Optional[Union[AdminRole, str]] = None,
            permissions: Optional[List[Union[AdminPermission, str]]] = None,
            email: Optional[str] = None,
            name: Optional[str] = None,
    ) -> AdminUser:
        if not user_id or not updater_id:
            raise ValidationFailedError("Missing required fields: user_id and updater_id")

        existing = await self.store.get_doc(ADMIN_COLLECTION, user_id)
        if existing is None or existing.data.get("deleted"):
            raise NotFoundError(f"Admin not found: {user_id}")
        current = AdminUser(**existing.data)

        new_role = AdminRole(role) if role is not None else current.role
        role_changed = new_role != current.role
        permissions_changed = (
            permissions is not None and set(_ordered(permissions)) != set(current.permissions)
        )

        if (role_changed or permissions_changed) and not await self.has_permission(
                updater_id, AdminPermission.SUPER
        ):
            raise PermissionDeniedError("Only super admins can change roles")

        if permissions is not None:
            new_permissions = _ordered(permissions)
        elif role_changed:
            new_permissions = permissions_for(new_role)
        else:
            new_permissions = list(current.permissions)

        updated = current.model_copy(update={
            "role": new_role,
            "permissions": new_permissions,
            "email": email if email else current.email,
            "name": name if name else current.name,
            "updated_at": now_ms(),
            "updated_by": updater_id,
        })

        if not self._is_valid(updated):
            raise ValidationFailedError("Invalid admin data")

        await self.store.set_doc(
            ADMIN_COLLECTION, user_id, updated.model_dump(mode="json"), caller=updater_id
        )
        await delete_cache(permission_cache_key(user_id))

        changes = {"role": role, "permissions": permissions, "email": email, "name": name}
        await self.audit.log(
            AuditAction.UPDATE_ADMIN.value,
            user_id,
            updater_id,
            details=json.dumps({k: v for k, v in changes.items() if v is not None}, default=str),
        )
        return updated

    @staticmethod
    def _is_valid(admin: AdminUser) -> bool:
        return (
            bool(admin.user_id)
            and is_valid_email(admin.email)
            and bool(admin.created_at)
            and bool(admin.created_by)
            and validate_role_permissions(admin.role, admin.permissions)
        )
