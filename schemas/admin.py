# app/schemas/admin.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

from core.roles import AdminPermission, AdminRole


class AdminUser(BaseModel):
    """Admin account as stored in the admins collection"""
    user_id: str
    email: str
    name: str = ""
    role: AdminRole = AdminRole.VIEWER
    permissions: List[AdminPermission] = []

    created_at: int  # epoch ms
    created_by: str
    updated_at: Optional[int] = None
    updated_by: Optional[str] = None
    last_active: Optional[int] = None

    deleted: bool = False
    deleted_at: Optional[int] = None
    deleted_by: Optional[str] = None


class AdminCreate(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=254)
    name: str = Field("", max_length=200)
    role: AdminRole = AdminRole.VIEWER
    permissions: Optional[List[AdminPermission]] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class AdminUpdate(BaseModel):
    role: Optional[AdminRole] = None
    permissions: Optional[List[AdminPermission]] = None
    email: Optional[str] = Field(None, max_length=254)
    name: Optional[str] = Field(None, max_length=200)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if v else v


class AdminStats(BaseModel):
    total_admins: int = 0
    super_admins: int = 0
    content_admins: int = 0
    user_admins: int = 0
    settings_admins: int = 0
