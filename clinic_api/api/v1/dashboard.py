from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_caller
from ...services.access_policy import Caller
from ...services.reporting_service import ReportingService
from ...schemas.report import ChartData, DashboardStats

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """Headline counts; the set of keys depends on the caller's role."""
    return ReportingService(db).dashboard_stats(caller)

@router.get("/monthly-data", response_model=ChartData)
def get_monthly_data(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """Appointments per month of the current year, scoped to the caller."""
    return ReportingService(db).monthly_appointments(caller)

@router.get("/specialization-data", response_model=ChartData)
def get_specialization_data(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return ReportingService(db).specialization_breakdown(caller)
