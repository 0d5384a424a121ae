# app/schemas/document.py
from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class ListOrderField(str, Enum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"
    KEY = "key"


class ListParams(BaseModel):
    """Filter for listing documents of a collection"""
    limit: Optional[int] = Field(None, ge=1)
    start_after: Optional[int] = Field(None, ge=0)  # number of matches to skip
    order_by: ListOrderField = ListOrderField.CREATED_AT
    descending: bool = False
    owner: Optional[str] = None
    key_prefix: Optional[str] = None
