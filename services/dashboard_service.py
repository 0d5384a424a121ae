# app/services/dashboard_service.py
from collections import Counter

from sqlalchemy.ext.asyncio import AsyncSession

from schemas.dashboard import AdminDashboard, DonorDashboard, DonorWaqfSummary
from services.admin_service import AdminService
from services.cause_service import CauseService
from services.storage_service import StorageService
from services.waqf_service import WaqfService


class DashboardService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.admin_service = AdminService(db)
        self.cause_service = CauseService(db)
        self.waqf_service = WaqfService(db)
        self.storage_service = StorageService(db)

    async def get_admin_dashboard(self) -> AdminDashboard:
        causes = await self.cause_service.list_causes(include_inactive=True)
        waqfs = await self.waqf_service.list_waqfs()
        statuses = Counter(w.status.value for w in waqfs)

        return AdminDashboard(
            admin_stats=await self.admin_service.get_stats(),
            total_causes=len(causes),
            active_causes=sum(1 for c in causes if c.is_active),
            total_assets=await self.storage_service.count_assets(),
            total_funds_raised=round(sum(c.funds_raised for c in causes), 2),
            total_waqfs=len(waqfs),
            waqfs_by_status=dict(statuses),
        )

    async def get_donor_dashboard(self, principal: str) -> DonorDashboard:
        waqfs = await self.waqf_service.list_waqfs(created_by=principal)
        causes = {cause_id for w in waqfs for cause_id in w.selected_causes}

        return DonorDashboard(
            waqfs=[
                DonorWaqfSummary(
                    id=w.id,
                    name=w.name,
                    status=w.status.value,
                    current_balance=w.financial.current_balance,
                    total_donations=w.financial.total_donations,
                    total_distributed=w.financial.total_distributed,
                )
                for w in waqfs
            ],
            total_donations=round(sum(w.financial.total_donations for w in waqfs), 2),
            total_distributed=round(sum(w.financial.total_distributed for w in waqfs), 2),
            causes_supported=len(causes),
        )
