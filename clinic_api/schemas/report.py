from typing import Dict, List, Union
from pydantic import BaseModel


class ChartData(BaseModel):
    labels: List[str]
    data: List[int]


class MonthlyAmount(BaseModel):
    month: str
    amount: int


class MonthlyCount(BaseModel):
    month: str
    count: int


class DepartmentRevenue(BaseModel):
    department: str
    amount: int


class TypeCount(BaseModel):
    type: str
    count: int


class OverviewReport(BaseModel):
    total_patients: int
    total_appointments: int
    total_revenue: float
    avg_revenue_per_patient: float
    revenue_growth: float
    current_month_revenue: float
    previous_month_revenue: float


DashboardStats = Dict[str, Union[int, float]]
