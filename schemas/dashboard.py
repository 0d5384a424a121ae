# app/schemas/dashboard.py
from pydantic import BaseModel
from typing import Dict, List

from schemas.admin import AdminStats


class AdminDashboard(BaseModel):
    admin_stats: AdminStats
    total_causes: int = 0
    active_causes: int = 0
    total_assets: int = 0
    total_funds_raised: float = 0.0
    total_waqfs: int = 0
    waqfs_by_status: Dict[str, int] = {}


class DonorWaqfSummary(BaseModel):
    id: str
    name: str
    status: str
    current_balance: float
    total_donations: float
    total_distributed: float


class DonorDashboard(BaseModel):
    waqfs: List[DonorWaqfSummary] = []
    total_donations: float = 0.0
    total_distributed: float = 0.0
    causes_supported: int = 0
