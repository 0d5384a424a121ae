# api/v1/endpoints/files.py
from fastapi import APIRouter, Depends, UploadFile, File as FastAPIFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from core.database import get_db
from core.permissions import get_current_identity, require_admin_permission
from core.roles import AdminPermission
from schemas.auth import MessageResponse
from schemas.file import AssetRead
from services.storage_service import StorageService

router = APIRouter()


# ---------- upload ----------
@router.post("/{collection}", response_model=AssetRead, status_code=201)
async def upload_file(
        collection: str,
        file: UploadFile = FastAPIFile(...),
        principal: str = Depends(get_current_identity),
        db: AsyncSession = Depends(get_db)
):
    """Upload a file into an asset collection"""
    return await StorageService(db).upload(collection, file, owner=principal)


@router.get("/{collection}", response_model=List[AssetRead])
async def list_files(
        collection: str,
        db: AsyncSession = Depends(get_db),
        _=Depends(require_admin_permission(AdminPermission.CONTENT))
):
    return await StorageService(db).list_assets(collection)


# ---------- download ----------
@router.get("/{collection}/{stored_filename}")
async def download_file(
        collection: str,
        stored_filename: str,
        db: AsyncSession = Depends(get_db)
):
    asset, content = await StorageService(db).read_asset(collection, stored_filename)
    return Response(
        content=content,
        media_type=asset.content_type,
        headers={"Content-Disposition": f'inline; filename="{asset.filename}"'}
    )


@router.delete("/{collection}/{stored_filename}", response_model=MessageResponse)
async def delete_file(
        collection: str,
        stored_filename: str,
        db: AsyncSession = Depends(get_db),
        _=Depends(require_admin_permission(AdminPermission.CONTENT))
):
    await StorageService(db).delete_asset(collection, stored_filename)
    return MessageResponse(message="File deleted")
