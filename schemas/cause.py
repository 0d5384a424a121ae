# app/schemas/cause.py
import re
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from enum import Enum

_MARKDOWN_MARKERS = re.compile(r"[#*_~`\[\]]")


class CauseStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def _check_description(v: str) -> str:
    plain_text = _MARKDOWN_MARKERS.sub("", v)
    if not plain_text.strip():
        raise ValueError("Description is required")
    if len(plain_text) < 20:
        raise ValueError("Description must contain at least 20 characters of meaningful content")
    if len(v) > 5000:
        raise ValueError("Description must be less than 5000 characters")
    return v


class CauseCreate(BaseModel):
    name: str = Field(..., max_length=200)
    description: str
    icon: str = "❤️"
    category: str = "general"
    cover_image: Optional[str] = None
    is_active: bool = True
    status: CauseStatus = CauseStatus.APPROVED
    sort_order: int = 0

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Cause name is required")
        if len(v) < 3:
            raise ValueError("Cause name must be at least 3 characters")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        return _check_description(v)

    @field_validator("sort_order")
    @classmethod
    def validate_sort_order(cls, v):
        if v < 0:
            raise ValueError("Sort order cannot be negative")
        return v


class CauseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = None
    icon: Optional[str] = None
    category: Optional[str] = None
    cover_image: Optional[str] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        return _check_description(v) if v is not None else v


class CauseStatusUpdate(BaseModel):
    status: CauseStatus


class Cause(BaseModel):
    id: str
    name: str
    description: str
    icon: str = "❤️"
    category: str = "general"
    cover_image: Optional[str] = None
    is_active: bool = True
    status: CauseStatus = CauseStatus.APPROVED
    sort_order: int = 0
    followers: int = 0
    funds_raised: float = 0.0
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
