# app/api/v1/endpoints/health.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.permissions import require_admin_permission
from core.roles import AdminPermission
from schemas.health import HealthDashboard
from services.health_service import get_health_dashboard

router = APIRouter()


@router.get("/admin", response_model=HealthDashboard)
async def admin_health(
        db: AsyncSession = Depends(get_db),
        _=Depends(require_admin_permission(AdminPermission.SETTINGS))
):
    """Run the admin health check now"""
    return await get_health_dashboard(db)
