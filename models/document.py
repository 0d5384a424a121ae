# app/models/document.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, JSON, UniqueConstraint

from models.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Document(Base):
    """A JSON document in a named collection of the satellite store."""
    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("collection", "key", name="uq_documents_collection_key"),
    )

    id = Column(Integer, primary_key=True)
    collection = Column(String(100), index=True, nullable=False)
    key = Column(String(255), nullable=False)

    data = Column(JSON, nullable=False, default=dict)
    owner = Column(String(100), nullable=True)  # identity that last wrote the doc
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
