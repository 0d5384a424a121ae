# app/schemas/audit.py
from pydantic import BaseModel
from typing import Dict, Optional
from enum import Enum


class AuditAction(str, Enum):
    ADD_ADMIN = "add_admin"
    UPDATE_ADMIN = "update_admin"
    REMOVE_ADMIN = "remove_admin"
    HEALTH_CHECK = "health_check"


class AuditEntry(BaseModel):
    key: Optional[str] = None
    action: str  # one of AuditAction, checked by the store
    target_user_id: str
    performed_by: str
    timestamp: int  # epoch ms
    details: str = ""
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None
    metadata: Optional[Dict[str, str]] = None
