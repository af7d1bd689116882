# api/dashboard/models.py
"""
Pydantic models for dashboard responses.
"""
from pydantic import BaseModel


class AssetCounters(BaseModel):
    total: int = 0
    available: int = 0
    assigned: int = 0
    in_repair: int = 0
    retired: int = 0
    total_value: float = 0.0


class AssignmentCounters(BaseModel):
    active: int = 0
    pending: int = 0
    returned: int = 0


class DashboardOverview(BaseModel):
    """Headline numbers for the admin dashboard."""
    stats: AssetCounters
    status_totals: dict[str, int]
    utilization_rate: float
    maintenance_rate: float
    average_age_years: float
    assignments: AssignmentCounters


class CategoryStat(BaseModel):
    name: str
    count: int
    value: float


class UpcomingTask(BaseModel):
    task: str
    due: str
    priority: str
    count: int
