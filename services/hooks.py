# services/hooks.py
"""Assertions the document store runs before accepting a write.

Each hook receives the store and an ``AssertContext`` and raises to reject
the write. They mirror the checks the satellite enforced server side, so they
hold whatever client performs the write.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.constants import (
    ADMIN_COLLECTION, AUDIT_COLLECTION, AUDIT_ACTIONS, HEALTH_CHECK_KEY, SYSTEM_CALLER
)
from core.exceptions import ConflictError, PermissionDeniedError, ValidationFailedError
from core.roles import AdminPermission, validate_role_permissions

logger = logging.getLogger(__name__)


@dataclass
class AssertContext:
    collection: str
    key: str
    caller: Optional[str]
    before: Optional[Dict[str, Any]]
    proposed: Optional[Dict[str, Any]] = None


def is_valid_email(email: str) -> bool:
    return bool(email) and "@" in email and len(email) <= 254


def _privileges_changed(before: Dict[str, Any], proposed: Dict[str, Any]) -> bool:
    return (
        before.get("role") != proposed.get("role")
        or sorted(before.get("permissions") or []) != sorted(proposed.get("permissions") or [])
    )


def _is_active_super(data: Dict[str, Any]) -> bool:
    return not data.get("deleted") and AdminPermission.SUPER.value in (data.get("permissions") or [])


async def _assert_admin_authority(store, ctx: AssertContext) -> None:
    caller = ctx.caller
    if caller is None or caller == SYSTEM_CALLER:
        return

    # admins may edit their own profile but not their own privileges
    if caller == ctx.key and ctx.before is not None and not _privileges_changed(ctx.before, ctx.proposed):
        return

    caller_doc = await store.get_doc(ADMIN_COLLECTION, caller)
    if caller_doc is not None and _is_active_super(caller_doc.data):
        return

    admins = await store.list_docs(ADMIN_COLLECTION)
    if not any(_is_active_super(doc.data) for doc in admins.items):
        logger.warning(f"No active super admin, accepting bootstrap write of {ctx.key} by {caller}")
        return

    raise PermissionDeniedError("Only super admins can manage admin accounts")


async def assert_admin_write(store, ctx: AssertContext) -> None:
    proposed = ctx.proposed or {}

    email = proposed.get("email") or ""
    if not is_valid_email(email):
        raise ValidationFailedError("Invalid admin email format")

    role = proposed.get("role")
    permissions = proposed.get("permissions") or []
    try:
        consistent = validate_role_permissions(role, permissions)
    except ValueError:
        raise ValidationFailedError(f"Invalid role: {role}")
    if not consistent:
        raise ValidationFailedError(f"Permissions {permissions} not allowed for role {role}")

    admins = await store.list_docs(ADMIN_COLLECTION)
    for doc in admins.items:
        if doc.key == ctx.key or doc.data.get("deleted"):
            continue
        if (doc.data.get("email") or "").lower() == email.lower():
            raise ConflictError(f"Email {email} already exists")

    await _assert_admin_authority(store, ctx)


async def assert_admin_delete(store, ctx: AssertContext) -> None:
    raise PermissionDeniedError("Admin records are soft-deleted, hard delete is not allowed")


async def assert_audit_write(store, ctx: AssertContext) -> None:
    action = (ctx.proposed or {}).get("action")
    if action not in AUDIT_ACTIONS:
        raise ValidationFailedError(f"Invalid audit action: {action}")

    if ctx.before is not None and ctx.key != HEALTH_CHECK_KEY:
        raise PermissionDeniedError("Audit entries are append-only")


async def assert_audit_delete(store, ctx: AssertContext) -> None:
    raise PermissionDeniedError("Audit entries are append-only")


SET_ASSERTIONS = {
    ADMIN_COLLECTION: assert_admin_write,
    AUDIT_COLLECTION: assert_audit_write,
}

DELETE_ASSERTIONS = {
    ADMIN_COLLECTION: assert_admin_delete,
    AUDIT_COLLECTION: assert_audit_delete,
}
