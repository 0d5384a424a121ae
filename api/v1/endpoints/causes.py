# app/api/v1/endpoints/causes.py
from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from core.constants import CAUSE_IMAGES_COLLECTION
from core.database import get_db
from core.permissions import get_current_identity, require_admin_permission
from core.roles import AdminPermission
from schemas.cause import Cause, CauseCreate, CauseStatus, CauseStatusUpdate, CauseUpdate
from schemas.auth import MessageResponse
from services.cause_service import CauseService
from services.storage_service import StorageService

router = APIRouter()

require_content = require_admin_permission(AdminPermission.CONTENT)


# ---------- public ----------
@router.get("/", response_model=List[Cause])
async def list_causes(db: AsyncSession = Depends(get_db)):
    """Active, approved causes"""
    return await CauseService(db).list_causes(status=CauseStatus.APPROVED)


@router.get("/admin", response_model=List[Cause])
async def list_all_causes(
        status: Optional[CauseStatus] = None,
        db: AsyncSession = Depends(get_db),
        _=Depends(require_content)
):
    """All causes, inactive included"""
    return await CauseService(db).list_causes(include_inactive=True, status=status)


@router.get("/{cause_id}", response_model=Cause)
async def get_cause(cause_id: str, db: AsyncSession = Depends(get_db)):
    return await CauseService(db).get_cause(cause_id)


@router.post("/{cause_id}/follow", response_model=Cause)
async def follow_cause(
        cause_id: str,
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(get_current_identity)
):
    return await CauseService(db).follow_cause(cause_id, principal)


# ---------- admin ----------
@router.post("/", response_model=Cause, status_code=201)
async def create_cause(
        data: CauseCreate,
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(require_content)
):
    return await CauseService(db).create_cause(data, principal)


@router.patch("/{cause_id}", response_model=Cause)
async def update_cause(
        cause_id: str,
        data: CauseUpdate,
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(require_content)
):
    return await CauseService(db).update_cause(cause_id, data, principal)


@router.put("/{cause_id}/status", response_model=Cause)
async def set_cause_status(
        cause_id: str,
        data: CauseStatusUpdate,
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(require_content)
):
    """Approve or reject a cause"""
    return await CauseService(db).set_cause_status(cause_id, data.status, principal)


@router.post("/{cause_id}/image", response_model=Cause)
async def upload_cause_image(
        cause_id: str,
        file: UploadFile = File(...),
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(require_content)
):
    """Upload a cover image and attach it to the cause"""
    service = CauseService(db)
    await service.get_cause(cause_id)
    asset = await StorageService(db).upload(CAUSE_IMAGES_COLLECTION, file, owner=principal)
    return await service.update_cause(cause_id, CauseUpdate(cover_image=asset.download_url), principal)


@router.delete("/{cause_id}", response_model=MessageResponse)
async def delete_cause(
        cause_id: str,
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(require_content)
):
    await CauseService(db).delete_cause(cause_id, principal)
    return MessageResponse(message="Cause deleted")
