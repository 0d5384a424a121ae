# app/models/asset.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint

from models.base import Base


class Asset(Base):
    __tablename__ = "assets"
    __table_args__ = (
        UniqueConstraint("collection", "stored_filename", name="uq_assets_collection_name"),
    )

    id = Column(Integer, primary_key=True)
    collection = Column(String(100), index=True, nullable=False)
    full_path = Column(String(500), unique=True, nullable=False)  # /cause_images/<name>

    filename = Column(String(255), nullable=False)  # original name
    stored_filename = Column(String(255), nullable=False)
    storage_path = Column(String(500), nullable=False)
    content_type = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)
    sha256 = Column(String(64), index=True, nullable=False)

    owner = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    @property
    def download_url(self) -> str:
        return f"/api/v1/files{self.full_path}"
