# services/storage_service.py
import hashlib
import logging
import mimetypes
import uuid
from pathlib import Path
from typing import List, Optional, Tuple

import aiofiles
from fastapi import UploadFile, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.exceptions import BackendError, NotFoundError, ValidationFailedError
from models.asset import Asset

logger = logging.getLogger(__name__)


class StorageService:
    """Asset collections: uploaded files addressable by a download URL."""

    def __init__(self, db: AsyncSession, storage_path: Optional[str] = None):
        self.db = db
        self.storage_path = storage_path or settings.FILE_STORAGE_PATH
        self.max_file_size = settings.MAX_FILE_SIZE
        self.allowed_mime_types = set(settings.ALLOWED_FILE_TYPES)
        self.collections = set(settings.ASSET_COLLECTIONS)

    async def upload(self, collection: str, file: UploadFile, owner: Optional[str] = None) -> Asset:
        """Store an uploaded file in an asset collection"""
        if collection not in self.collections:
            raise NotFoundError(f"Unknown asset collection: {collection}")

        content = await file.read()
        if len(content) > self.max_file_size:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File size exceeds limit: {self.max_file_size // (1024 * 1024)}MB"
            )
        if not content:
            raise ValidationFailedError("Empty file")

        filename = file.filename or "upload"
        mime_type = file.content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        if mime_type not in self.allowed_mime_types:
            raise HTTPException(
                status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
                detail=f"File type {mime_type} is not allowed"
            )

        file_ext = Path(filename).suffix or (mimetypes.guess_extension(mime_type) or "")
        stored_filename = f"{uuid.uuid4().hex}{file_ext}"
        storage_path = Path(self.storage_path) / collection / stored_filename

        await self._save_file(storage_path, content)

        asset = Asset(
            collection=collection,
            full_path=f"/{collection}/{stored_filename}",
            filename=filename,
            stored_filename=stored_filename,
            storage_path=str(storage_path),
            content_type=mime_type,
            size=len(content),
            sha256=hashlib.sha256(content).hexdigest(),
            owner=owner,
        )
        try:
            self.db.add(asset)
            await self.db.commit()
            await self.db.refresh(asset)
        except SQLAlchemyError as e:
            await self.db.rollback()
            storage_path.unlink(missing_ok=True)
            logger.error(f"Failed to record asset {collection}/{stored_filename}: {str(e)}")
            raise BackendError("Failed to store asset") from e

        logger.info(f"Asset {asset.full_path} uploaded by {owner} ({asset.size} bytes)")
        return asset

    async def get_asset(self, collection: str, stored_filename: str) -> Asset:
        result = await self.db.execute(
            select(Asset).where(
                Asset.collection == collection,
                Asset.stored_filename == stored_filename,
            )
        )
        asset = result.scalar_one_or_none()
        if asset is None:
            raise NotFoundError("Asset not found")
        return asset

    async def read_asset(self, collection: str, stored_filename: str) -> Tuple[Asset, bytes]:
        asset = await self.get_asset(collection, stored_filename)
        try:
            async with aiofiles.open(asset.storage_path, "rb") as f:
                return asset, await f.read()
        except FileNotFoundError:
            raise NotFoundError("File not found in storage")

    async def list_assets(self, collection: Optional[str] = None) -> List[Asset]:
        query = select(Asset).order_by(Asset.created_at.desc(), Asset.id.desc())
        if collection:
            query = query.where(Asset.collection == collection)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count_assets(self) -> int:
        result = await self.db.execute(select(func.count(Asset.id)))
        return result.scalar() or 0

    async def delete_asset(self, collection: str, stored_filename: str) -> None:
        asset = await self.get_asset(collection, stored_filename)
        path = Path(asset.storage_path)
        if path.exists():
            path.unlink()
        await self.db.delete(asset)
        await self.db.commit()
        logger.info(f"Asset {asset.full_path} deleted")

    async def _save_file(self, path: Path, content: bytes):
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, "wb") as f:
            await f.write(content)
