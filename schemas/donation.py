# app/schemas/donation.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict
from datetime import datetime
from enum import Enum


class DonationStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalyticsPeriod(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


# ---------- donations ----------
class DonationCreate(BaseModel):
    waqf_id: str
    amount: float = Field(..., gt=0)
    currency: str = Field("USD", min_length=3, max_length=3)
    date: Optional[datetime] = None
    donor_email: Optional[EmailStr] = None
    message: Optional[str] = Field(None, max_length=1000)


class Donation(BaseModel):
    id: str
    waqf_id: str
    amount: float
    currency: str = "USD"
    date: datetime
    status: DonationStatus = DonationStatus.COMPLETED
    donor_email: Optional[str] = None
    message: Optional[str] = None


# ---------- allocations ----------
class AllocationItem(BaseModel):
    cause_id: str
    amount: float = Field(..., gt=0)
    rationale: str = ""


class AllocationCreate(BaseModel):
    allocations: List[AllocationItem] = Field(..., min_length=1)


class AllocationGroup(BaseModel):
    id: str
    waqf_id: str
    allocations: List[AllocationItem]
    allocated_at: datetime
    total_amount: float
    allocated_by: Optional[str] = None


# ---------- analytics ----------
class WaqfPerformance(BaseModel):
    total_donations: float
    total_allocations: float
    net_growth: float
    donation_count: int
    allocation_count: int


class WaqfAnalytics(BaseModel):
    period: AnalyticsPeriod
    donations: Dict[str, List[Donation]]
    allocations: Dict[str, List[AllocationGroup]]


class WaqfGrowth(BaseModel):
    absolute_growth: float
    relative_growth: float
    donation_growth_rate: Optional[float] = None
