# app/services/report_service.py
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from schemas.report import ContributionsReport, FinancialReport, ImpactReport, ReportType
from schemas.waqf import WaqfProfile
from services.waqf_service import WaqfService


def format_currency(amount: float, currency: str = "USD") -> str:
    symbol = "$" if currency == "USD" else f"{currency} "
    return f"{symbol}{amount:,.2f}"


def format_rate(rate: Optional[float]) -> Optional[str]:
    if rate is None:
        return None
    return f"{round(rate * 100)}%"


class ReportService:
    """Per-waqf reports shown in the donor and admin dashboards"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.waqf_service = WaqfService(db)

    @staticmethod
    def financial_report(waqf: WaqfProfile) -> FinancialReport:
        financial = waqf.financial
        metrics = financial.impact_metrics
        return FinancialReport(
            waqf_id=waqf.id,
            waqf_name=waqf.name,
            total_donations=format_currency(financial.total_donations),
            total_distributed=format_currency(financial.total_distributed),
            current_balance=format_currency(financial.current_balance),
            investment_return=format_currency(financial.total_investment_return),
            completion_rate=format_rate(metrics.completion_rate) if metrics else None,
        )

    @staticmethod
    def impact_report(waqf: WaqfProfile) -> ImpactReport:
        metrics = waqf.financial.impact_metrics
        return ImpactReport(
            waqf_id=waqf.id,
            waqf_name=waqf.name,
            causes_supported=len(waqf.selected_causes),
            beneficiaries_supported=metrics.beneficiaries_supported if metrics else None,
            projects_completed=metrics.projects_completed if metrics else None,
            completion_rate=format_rate(metrics.completion_rate) if metrics else None,
        )

    @staticmethod
    def contributions_report(waqf: WaqfProfile) -> ContributionsReport:
        return ContributionsReport(
            waqf_id=waqf.id,
            waqf_name=waqf.name,
            contributions=waqf.waqf_assets,
            contribution_count=len(waqf.waqf_assets),
            total_contributed=format_currency(sum(c.amount for c in waqf.waqf_assets)),
        )

    async def get_report(
            self,
            waqf_id: str,
            report_type: ReportType,
    ) -> Union[FinancialReport, ImpactReport, ContributionsReport]:
        waqf = await self.waqf_service.get_waqf(waqf_id)
        if report_type == ReportType.FINANCIAL:
            return self.financial_report(waqf)
        if report_type == ReportType.IMPACT:
            return self.impact_report(waqf)
        return self.contributions_report(waqf)
