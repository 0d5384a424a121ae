# app/services/waqf_service.py
import logging
import uuid
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, TypeVar

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import ALLOCATIONS_COLLECTION, DONATIONS_COLLECTION, WAQF_COLLECTION
from core.exceptions import BackendError, NotFoundError, ValidationFailedError
from schemas.document import ListOrderField, ListParams
from schemas.donation import (
    AllocationGroup, AllocationItem, AnalyticsPeriod, Donation, DonationCreate,
    DonationStatus, WaqfAnalytics, WaqfGrowth, WaqfPerformance,
)
from schemas.waqf import (
    Contribution, FinancialSummary, WaqfCreate, WaqfProfile, WaqfStatus, WaqfUpdate,
)
from services.cause_service import CauseService
from services.document_store import DocumentStore
from utils.pagination import PaginatedResponse, page_offset, total_pages
from utils.timestamps import utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T")


def period_key(date: datetime, period: AnalyticsPeriod) -> str:
    if period == AnalyticsPeriod.YEARLY:
        return str(date.year)
    if period == AnalyticsPeriod.QUARTERLY:
        return f"{date.year}-Q{(date.month - 1) // 3 + 1}"
    return f"{date.year}-{date.month:02d}"


def group_by(items: List[T], get_key: Callable[[T], str]) -> Dict[str, List[T]]:
    groups: Dict[str, List[T]] = defaultdict(list)
    for item in items:
        groups[get_key(item)].append(item)
    return dict(groups)


class WaqfService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = DocumentStore(db)
        self.cause_service = CauseService(db, self.store)

    @staticmethod
    def _to_waqf(doc) -> WaqfProfile:
        return WaqfProfile(**{**doc.data, "id": doc.key})

    async def _save(self, waqf: WaqfProfile, caller: Optional[str]) -> WaqfProfile:
        await self.store.set_doc(WAQF_COLLECTION, waqf.id, waqf.model_dump(mode="json"), caller=caller)
        return waqf

    # ---------- waqf profiles ----------
    async def create_waqf(self, data: WaqfCreate, created_by: str) -> WaqfProfile:
        """Create a waqf profile, returning it with its generated id"""
        await self.cause_service.ensure_exist(data.selected_causes)

        now = utcnow()
        waqf = WaqfProfile(
            id=str(uuid.uuid4()),
            **data.model_dump(),
            financial=FinancialSummary(current_balance=data.initial_capital),
            waqf_assets=[],
            status=WaqfStatus.ACTIVE,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        await self._save(waqf, created_by)
        logger.info(f"Waqf {waqf.id} created by {created_by}")
        return waqf

    async def create_waqfs(self, items: List[WaqfCreate], created_by: str) -> List[WaqfProfile]:
        return [await self.create_waqf(item, created_by) for item in items]

    async def get_waqf(self, waqf_id: str) -> WaqfProfile:
        try:
            doc = await self.store.get_doc(WAQF_COLLECTION, waqf_id)
        except HTTPException as e:
            logger.error(f"Error fetching waqf {waqf_id}: {e.detail}")
            raise BackendError(f"Failed to fetch waqf {waqf_id}") from e
        if doc is None:
            raise NotFoundError("Waqf not found")
        return self._to_waqf(doc)

    async def update_waqf(self, waqf_id: str, data: WaqfUpdate, updated_by: str) -> WaqfProfile:
        waqf = await self.get_waqf(waqf_id)
        changes = data.model_dump(exclude_unset=True, exclude={"impact_metrics"})

        if data.selected_causes is not None:
            await self.cause_service.ensure_exist(data.selected_causes)

        update: Dict[str, Any] = {
            key: getattr(data, key) for key in changes
            if getattr(data, key) is not None
        }
        if data.impact_metrics is not None:
            update["financial"] = waqf.financial.model_copy(update={"impact_metrics": data.impact_metrics})
        update["updated_at"] = utcnow()

        return await self._save(waqf.model_copy(update=update), updated_by)

    async def list_waqfs(self, created_by: Optional[str] = None) -> List[WaqfProfile]:
        try:
            docs = await self.store.list_docs(WAQF_COLLECTION)
        except HTTPException as e:
            logger.error(f"Error listing waqfs: {e.detail}")
            raise BackendError("Failed to list waqfs") from e

        waqfs = [self._to_waqf(doc) for doc in docs.items]
        if created_by is not None:
            waqfs = [w for w in waqfs if w.created_by == created_by]
        return waqfs

    async def get_paginated_waqfs(
            self,
            limit: int = 20,
            page: int = 1,
            sort_by: ListOrderField = ListOrderField.CREATED_AT,
            sort_order: str = "desc",
    ) -> PaginatedResponse[WaqfProfile]:
        docs = await self.store.list_docs(
            WAQF_COLLECTION,
            ListParams(
                limit=limit,
                start_after=page_offset(page, limit),
                order_by=sort_by,
                descending=sort_order == "desc",
            ),
        )
        logger.debug(f"Fetched {docs.items_length} of {docs.matches_length} waqfs (page {page})")
        return PaginatedResponse[WaqfProfile](
            items=[self._to_waqf(doc) for doc in docs.items],
            total=docs.matches_length,
            page=page,
            limit=limit,
            total_pages=total_pages(docs.matches_length, limit),
        )

    async def _set_status(self, waqf_id: str, status: WaqfStatus, caller: str) -> WaqfProfile:
        waqf = await self.get_waqf(waqf_id)
        waqf = waqf.model_copy(update={"status": status, "updated_at": utcnow()})
        await self._save(waqf, caller)
        logger.info(f"Waqf {waqf_id} set to {status.value} by {caller}")
        return waqf

    async def activate_waqf(self, waqf_id: str, caller: str) -> WaqfProfile:
        return await self._set_status(waqf_id, WaqfStatus.ACTIVE, caller)

    async def deactivate_waqf(self, waqf_id: str, caller: str) -> WaqfProfile:
        return await self._set_status(waqf_id, WaqfStatus.INACTIVE, caller)

    async def archive_waqf(self, waqf_id: str, caller: str) -> WaqfProfile:
        return await self._set_status(waqf_id, WaqfStatus.ARCHIVED, caller)

    # ---------- donations ----------
    async def record_donation(self, data: DonationCreate, caller: str) -> Donation:
        waqf = await self.get_waqf(data.waqf_id)
        if waqf.status == WaqfStatus.ARCHIVED:
            raise ValidationFailedError("Cannot donate to an archived waqf")

        donation = Donation(
            id=str(uuid.uuid4()),
            waqf_id=data.waqf_id,
            amount=data.amount,
            currency=data.currency,
            date=data.date or utcnow(),
            status=DonationStatus.COMPLETED,
            donor_email=data.donor_email,
            message=data.message,
        )
        await self.store.set_doc(
            DONATIONS_COLLECTION, donation.id, donation.model_dump(mode="json"), caller=caller
        )

        financial = waqf.financial.model_copy(update={
            "total_donations": round(waqf.financial.total_donations + donation.amount, 2),
            "current_balance": round(waqf.financial.current_balance + donation.amount, 2),
        })
        contribution = Contribution(
            donation_id=donation.id,
            amount=donation.amount,
            date=donation.date,
            status=donation.status.value,
        )
        await self._save(waqf.model_copy(update={
            "financial": financial,
            "waqf_assets": [*waqf.waqf_assets, contribution],
            "updated_at": utcnow(),
        }), caller)

        return donation

    async def record_donations(self, items: List[DonationCreate], caller: str) -> List[Donation]:
        return [await self.record_donation(item, caller) for item in items]

    async def get_waqf_donations(self, waqf_id: str) -> List[Donation]:
        try:
            docs = await self.store.list_docs(DONATIONS_COLLECTION)
        except HTTPException as e:
            logger.error(f"Error fetching donations of waqf {waqf_id}: {e.detail}")
            raise BackendError(f"Failed to fetch donations for waqf {waqf_id}") from e

        return [
            Donation(**{**doc.data, "id": doc.key})
            for doc in docs.items
            if doc.data.get("waqf_id") == waqf_id
        ]

    # ---------- allocations ----------
    async def allocate_returns(
            self,
            waqf_id: str,
            allocations: List[AllocationItem],
            caller: str,
    ) -> AllocationGroup:
        if not allocations:
            raise ValidationFailedError("At least one allocation is required")

        waqf = await self.get_waqf(waqf_id)
        await self.cause_service.ensure_exist([a.cause_id for a in allocations])

        total = round(sum(a.amount for a in allocations), 2)
        if total > waqf.financial.current_balance:
            raise ValidationFailedError(
                f"Allocation total ({total}) exceeds current balance ({waqf.financial.current_balance})"
            )

        group = AllocationGroup(
            id=str(uuid.uuid4()),
            waqf_id=waqf_id,
            allocations=allocations,
            allocated_at=utcnow(),
            total_amount=total,
            allocated_by=caller,
        )
        await self.store.set_doc(
            ALLOCATIONS_COLLECTION, group.id, group.model_dump(mode="json"), caller=caller
        )

        cause_allocations = dict(waqf.financial.cause_allocations)
        for item in allocations:
            cause_allocations[item.cause_id] = round(cause_allocations.get(item.cause_id, 0.0) + item.amount, 2)
        financial = waqf.financial.model_copy(update={
            "total_distributed": round(waqf.financial.total_distributed + total, 2),
            "current_balance": round(waqf.financial.current_balance - total, 2),
            "cause_allocations": cause_allocations,
        })
        await self._save(waqf.model_copy(update={"financial": financial, "updated_at": utcnow()}), caller)

        for item in allocations:
            await self.cause_service.add_funds(item.cause_id, item.amount, caller)

        logger.info(f"Allocated {total} from waqf {waqf_id} across {len(allocations)} causes")
        return group

    async def get_waqf_allocations(self, waqf_id: str) -> List[AllocationGroup]:
        try:
            docs = await self.store.list_docs(ALLOCATIONS_COLLECTION)
        except HTTPException as e:
            logger.error(f"Error fetching allocations of waqf {waqf_id}: {e.detail}")
            raise BackendError(f"Failed to fetch allocations for waqf {waqf_id}") from e

        return [
            AllocationGroup(**{**doc.data, "id": doc.key})
            for doc in docs.items
            if doc.data.get("waqf_id") == waqf_id
        ]

    # ---------- analytics ----------
    async def get_waqf_performance(self, waqf_id: str) -> WaqfPerformance:
        donations = await self.get_waqf_donations(waqf_id)
        allocations = await self.get_waqf_allocations(waqf_id)

        total_donations = sum(d.amount for d in donations)
        total_allocations = sum(
            sum(item.amount for item in group.allocations) for group in allocations
        )

        return WaqfPerformance(
            total_donations=total_donations,
            total_allocations=total_allocations,
            net_growth=total_donations - total_allocations,
            donation_count=len(donations),
            allocation_count=len(allocations),
        )

    async def get_waqf_analytics(
            self,
            waqf_id: str,
            period: AnalyticsPeriod = AnalyticsPeriod.MONTHLY,
    ) -> WaqfAnalytics:
        donations = await self.get_waqf_donations(waqf_id)
        allocations = await self.get_waqf_allocations(waqf_id)

        return WaqfAnalytics(
            period=period,
            donations=group_by(donations, lambda d: period_key(d.date, period)),
            allocations=group_by(allocations, lambda a: period_key(a.allocated_at, period)),
        )

    async def calculate_donation_growth_rate(self, waqf_id: str, period: AnalyticsPeriod) -> float:
        analytics = await self.get_waqf_analytics(waqf_id, period)
        periods = sorted(analytics.donations)

        if len(periods) < 2:
            return 0.0

        current = sum(d.amount for d in analytics.donations[periods[-1]])
        previous = sum(d.amount for d in analytics.donations[periods[-2]])

        return ((current - previous) / previous) * 100 if previous > 0 else 100.0

    async def calculate_growth(self, waqf_id: str) -> WaqfGrowth:
        performance = await self.get_waqf_performance(waqf_id)
        return WaqfGrowth(
            absolute_growth=performance.net_growth,
            relative_growth=(
                (performance.net_growth / performance.total_allocations) * 100
                if performance.total_allocations > 0 else 100.0
            ),
        )
