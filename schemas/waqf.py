# app/schemas/waqf.py
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Dict
from datetime import datetime
from enum import Enum


class WaqfStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class ReportFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class DonorInfo(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: str = ""
    address: str = ""


class ImpactMetrics(BaseModel):
    beneficiaries_supported: int = 0
    projects_completed: int = 0
    completion_rate: float = Field(0.0, ge=0, le=1)


class InvestmentReturn(BaseModel):
    amount: float
    date: datetime
    note: str = ""


class FinancialSummary(BaseModel):
    total_donations: float = 0.0
    total_distributed: float = 0.0
    current_balance: float = 0.0
    investment_returns: List[InvestmentReturn] = []
    total_investment_return: float = 0.0
    growth_rate: float = 0.0
    cause_allocations: Dict[str, float] = {}
    impact_metrics: Optional[ImpactMetrics] = None


class Contribution(BaseModel):
    """One entry of the contribution history"""
    donation_id: str
    amount: float
    date: datetime
    status: str = "completed"


class ReportingPreferences(BaseModel):
    frequency: ReportFrequency = ReportFrequency.YEARLY
    report_types: List[str] = ["financial"]
    delivery_method: str = "email"


class NotificationPreferences(BaseModel):
    contribution_reminders: bool = True
    impact_reports: bool = True
    financial_updates: bool = True


# ---------- create ----------
class WaqfCreate(BaseModel):
    """Donor-facing waqf form"""
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    donor: DonorInfo
    initial_capital: float = Field(0.0, ge=0)
    selected_causes: List[str] = []
    reporting_preferences: ReportingPreferences = Field(default_factory=ReportingPreferences)
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Waqf name is required")
        return v.strip()


class WaqfUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    donor: Optional[DonorInfo] = None
    selected_causes: Optional[List[str]] = None
    reporting_preferences: Optional[ReportingPreferences] = None
    notifications: Optional[NotificationPreferences] = None
    impact_metrics: Optional[ImpactMetrics] = None


class WaqfProfile(BaseModel):
    id: str
    name: str
    description: str = ""
    donor: DonorInfo
    initial_capital: float = 0.0
    selected_causes: List[str] = []
    financial: FinancialSummary = Field(default_factory=FinancialSummary)
    waqf_assets: List[Contribution] = []
    reporting_preferences: ReportingPreferences = Field(default_factory=ReportingPreferences)
    notifications: NotificationPreferences = Field(default_factory=NotificationPreferences)
    status: WaqfStatus = WaqfStatus.ACTIVE
    created_by: str = ""
    created_at: datetime
    updated_at: datetime

