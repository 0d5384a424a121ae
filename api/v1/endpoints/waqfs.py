# app/api/v1/endpoints/waqfs.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Literal, Union

from core.database import get_db
from core.exceptions import PermissionDeniedError
from core.permissions import get_current_identity, identity_has_permission, require_admin_permission
from core.roles import AdminPermission
from schemas.document import ListOrderField
from schemas.donation import (
    AllocationCreate, AllocationGroup, AnalyticsPeriod, Donation, DonationCreate,
    WaqfAnalytics, WaqfGrowth, WaqfPerformance,
)
from schemas.report import ContributionsReport, FinancialReport, ImpactReport, ReportType
from schemas.waqf import WaqfCreate, WaqfProfile, WaqfUpdate
from services.report_service import ReportService
from services.waqf_service import WaqfService
from utils.pagination import PaginatedResponse

router = APIRouter()

require_content = require_admin_permission(AdminPermission.CONTENT)


async def get_owned_waqf(
        waqf_id: str,
        principal: str = Depends(get_current_identity),
        db: AsyncSession = Depends(get_db)
) -> WaqfProfile:
    """The waqf, if the caller created it or is a content admin"""
    waqf = await WaqfService(db).get_waqf(waqf_id)
    if waqf.created_by != principal and not await identity_has_permission(
            principal, AdminPermission.CONTENT, db
    ):
        raise PermissionDeniedError("Not allowed to access this waqf")
    return waqf


# ---------- profiles ----------
@router.post("/", response_model=WaqfProfile, status_code=201)
async def create_waqf(
        data: WaqfCreate,
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(get_current_identity)
):
    """Create a waqf owned by the caller"""
    return await WaqfService(db).create_waqf(data, principal)


@router.get("/", response_model=List[WaqfProfile])
async def list_waqfs(
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(get_current_identity)
):
    """Own waqfs for donors, every waqf for content admins"""
    if await identity_has_permission(principal, AdminPermission.CONTENT, db):
        return await WaqfService(db).list_waqfs()
    return await WaqfService(db).list_waqfs(created_by=principal)


@router.get("/paginated", response_model=PaginatedResponse[WaqfProfile])
async def paginated_waqfs(
        page: int = Query(1, ge=1),
        limit: int = Query(20, ge=1, le=100),
        sort_by: ListOrderField = ListOrderField.CREATED_AT,
        sort_order: Literal["asc", "desc"] = "desc",
        db: AsyncSession = Depends(get_db),
        _=Depends(require_content)
):
    return await WaqfService(db).get_paginated_waqfs(
        limit=limit, page=page, sort_by=sort_by, sort_order=sort_order
    )


@router.get("/{waqf_id}", response_model=WaqfProfile)
async def get_waqf(waqf: WaqfProfile = Depends(get_owned_waqf)):
    return waqf


@router.patch("/{waqf_id}", response_model=WaqfProfile)
async def update_waqf(
        data: WaqfUpdate,
        waqf: WaqfProfile = Depends(get_owned_waqf),
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(get_current_identity)
):
    return await WaqfService(db).update_waqf(waqf.id, data, principal)


@router.post("/{waqf_id}/activate", response_model=WaqfProfile)
async def activate_waqf(
        waqf: WaqfProfile = Depends(get_owned_waqf),
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(get_current_identity)
):
    return await WaqfService(db).activate_waqf(waqf.id, principal)


@router.post("/{waqf_id}/deactivate", response_model=WaqfProfile)
async def deactivate_waqf(
        waqf: WaqfProfile = Depends(get_owned_waqf),
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(get_current_identity)
):
    return await WaqfService(db).deactivate_waqf(waqf.id, principal)


@router.post("/{waqf_id}/archive", response_model=WaqfProfile)
async def archive_waqf(
        waqf: WaqfProfile = Depends(get_owned_waqf),
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(get_current_identity)
):
    return await WaqfService(db).archive_waqf(waqf.id, principal)


# ---------- donations & allocations ----------
@router.get("/{waqf_id}/donations", response_model=List[Donation])
async def get_donations(
        waqf: WaqfProfile = Depends(get_owned_waqf),
        db: AsyncSession = Depends(get_db)
):
    return await WaqfService(db).get_waqf_donations(waqf.id)


@router.post("/{waqf_id}/donations", response_model=Donation, status_code=201)
async def record_donation(
        waqf_id: str,
        data: DonationCreate,
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(get_current_identity)
):
    """Record a donation to the waqf in the path"""
    data = data.model_copy(update={"waqf_id": waqf_id})
    return await WaqfService(db).record_donation(data, principal)


@router.get("/{waqf_id}/allocations", response_model=List[AllocationGroup])
async def get_allocations(
        waqf: WaqfProfile = Depends(get_owned_waqf),
        db: AsyncSession = Depends(get_db)
):
    return await WaqfService(db).get_waqf_allocations(waqf.id)


@router.post("/{waqf_id}/allocations", response_model=AllocationGroup, status_code=201)
async def allocate_returns(
        waqf_id: str,
        data: AllocationCreate,
        db: AsyncSession = Depends(get_db),
        principal: str = Depends(require_content)
):
    """Distribute waqf returns across causes"""
    return await WaqfService(db).allocate_returns(waqf_id, data.allocations, principal)


# ---------- analytics ----------
@router.get("/{waqf_id}/performance", response_model=WaqfPerformance)
async def performance(
        waqf: WaqfProfile = Depends(get_owned_waqf),
        db: AsyncSession = Depends(get_db)
):
    return await WaqfService(db).get_waqf_performance(waqf.id)


@router.get("/{waqf_id}/analytics", response_model=WaqfAnalytics)
async def analytics(
        period: AnalyticsPeriod = AnalyticsPeriod.MONTHLY,
        waqf: WaqfProfile = Depends(get_owned_waqf),
        db: AsyncSession = Depends(get_db)
):
    return await WaqfService(db).get_waqf_analytics(waqf.id, period)


@router.get("/{waqf_id}/growth", response_model=WaqfGrowth)
async def growth(
        period: AnalyticsPeriod = AnalyticsPeriod.MONTHLY,
        waqf: WaqfProfile = Depends(get_owned_waqf),
        db: AsyncSession = Depends(get_db)
):
    service = WaqfService(db)
    result = await service.calculate_growth(waqf.id)
    result.donation_growth_rate = await service.calculate_donation_growth_rate(waqf.id, period)
    return result


@router.get(
    "/{waqf_id}/reports/{report_type}",
    response_model=Union[FinancialReport, ImpactReport, ContributionsReport]
)
async def report(
        report_type: ReportType,
        waqf: WaqfProfile = Depends(get_owned_waqf),
        db: AsyncSession = Depends(get_db)
):
    return await ReportService(db).get_report(waqf.id, report_type)
