# app/api/v1/endpoints/dashboard.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.permissions import get_current_identity, require_admin_permission
from core.roles import AdminPermission
from schemas.dashboard import AdminDashboard, DonorDashboard
from services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/admin", response_model=AdminDashboard)
async def admin_dashboard(
        db: AsyncSession = Depends(get_db),
        _=Depends(require_admin_permission(AdminPermission.CONTENT))
):
    """Platform overview for content admins"""
    return await DashboardService(db).get_admin_dashboard()


@router.get("/donor", response_model=DonorDashboard)
async def donor_dashboard(
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(get_current_identity)
):
    """Waqf summary of the signed-in donor"""
    return await DashboardService(db).get_donor_dashboard(principal)
