# app/core/roles.py
import enum
from typing import Iterable, List, Union


class AdminRole(str, enum.Enum):
    VIEWER = "viewer"
    EDITOR = "editor"
    MANAGER = "manager"
    SUPER_ADMIN = "super_admin"


class AdminPermission(str, enum.Enum):
    CONTENT = "content"
    USERS = "users"
    SETTINGS = "settings"
    SUPER = "super"


ROLE_HIERARCHY: List[AdminRole] = [
    AdminRole.VIEWER,
    AdminRole.EDITOR,
    AdminRole.MANAGER,
    AdminRole.SUPER_ADMIN,
]

ROLE_PERMISSIONS = {
    AdminRole.VIEWER: [AdminPermission.CONTENT],
    AdminRole.EDITOR: [AdminPermission.CONTENT, AdminPermission.USERS],
    AdminRole.MANAGER: [AdminPermission.CONTENT, AdminPermission.USERS, AdminPermission.SETTINGS],
    AdminRole.SUPER_ADMIN: [
        AdminPermission.CONTENT, AdminPermission.USERS, AdminPermission.SETTINGS, AdminPermission.SUPER
    ],
}


def _as_role(role: Union[AdminRole, str]) -> AdminRole:
    try:
        return AdminRole(role)
    except ValueError:
        raise ValueError(f"Unknown admin role: {role}")


def permissions_for(role: Union[AdminRole, str]) -> List[AdminPermission]:
    """Permissions granted by a role, in table order."""
    return list(ROLE_PERMISSIONS[_as_role(role)])


def role_rank(role: Union[AdminRole, str]) -> int:
    return ROLE_HIERARCHY.index(_as_role(role))


def can_assign_role(assigner_role: Union[AdminRole, str], target_role: Union[AdminRole, str]) -> bool:
    return role_rank(assigner_role) >= role_rank(target_role)


def has_minimum_role(user_role: Union[AdminRole, str], required_role: Union[AdminRole, str]) -> bool:
    return role_rank(user_role) >= role_rank(required_role)


def validate_role_permissions(
        role: Union[AdminRole, str],
        permissions: Iterable[Union[AdminPermission, str]],
) -> bool:
    """True when every permission is granted by the role.

    A super admin must additionally hold the complete permission set.
    """
    allowed = {p.value for p in permissions_for(role)}
    granted = set()
    for permission in permissions:
        value = permission.value if isinstance(permission, AdminPermission) else str(permission)
        if value not in allowed:
            return False
        granted.add(value)

    if _as_role(role) == AdminRole.SUPER_ADMIN and granted != allowed:
        return False
    return True
