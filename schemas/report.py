# app/schemas/report.py
from pydantic import BaseModel
from typing import List, Optional
from enum import Enum

from schemas.waqf import Contribution


class ReportType(str, Enum):
    FINANCIAL = "financial"
    IMPACT = "impact"
    CONTRIBUTIONS = "contributions"


class FinancialReport(BaseModel):
    waqf_id: str
    waqf_name: str
    total_donations: str
    total_distributed: str
    current_balance: str
    investment_return: str
    completion_rate: Optional[str] = None


class ImpactReport(BaseModel):
    waqf_id: str
    waqf_name: str
    causes_supported: int
    beneficiaries_supported: Optional[int] = None
    projects_completed: Optional[int] = None
    completion_rate: Optional[str] = None


class ContributionsReport(BaseModel):
    waqf_id: str
    waqf_name: str
    contributions: List[Contribution]
    contribution_count: int
    total_contributed: str
