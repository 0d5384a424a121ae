# constants.py

# ---------- collections ----------
ADMIN_COLLECTION = "admins"
AUDIT_COLLECTION = "admin_audit"
USER_COLLECTION = "users"
WAQF_COLLECTION = "waqfs"
DONATIONS_COLLECTION = "donations"
ALLOCATIONS_COLLECTION = "allocations"
CAUSE_COLLECTION = "causes"
# one document per (cause, principal) follow
CAUSE_FOLLOWERS_COLLECTION = "cause_followers"

CAUSE_IMAGES_COLLECTION = "cause_images"
WAQF_DOCUMENTS_COLLECTION = "waqf_documents"

HEALTH_CHECK_KEY = "__healthcheck__"

# writes made by the platform itself (seed scripts, health checks)
SYSTEM_CALLER = "system"

ROLES = {
    "viewer": "Viewer - read access to content",
    "editor": "Editor - manages content and users",
    "manager": "Manager - content, users and settings",
    "super_admin": "Super admin (full access)",
}

PERMISSIONS = {
    "content": "Manage causes, waqfs and reports",
    "users": "Manage admin accounts and donors",
    "settings": "Platform settings and health",
    "super": "Change roles and permissions of other admins",
}

AUDIT_ACTIONS = {
    "add_admin": "Admin account created",
    "update_admin": "Admin account updated",
    "remove_admin": "Admin account removed",
    "health_check": "Health probe write",
}
