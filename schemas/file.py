# app/schemas/file.py
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class AssetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    collection: str
    full_path: str
    filename: str
    content_type: str
    size: int
    sha256: str
    owner: Optional[str] = None
    download_url: str
    created_at: datetime
