from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_current_caller
from ...services.access_policy import Caller
from ...services.reporting_service import ReportingService
from ...schemas.report import (
    DepartmentRevenue, MonthlyAmount, MonthlyCount, OverviewReport, TypeCount
)

router = APIRouter(prefix="/reports", tags=["Reports"])

# Admin only, except /patients and /appointments-by-type which doctors may read

@router.get("/revenue", response_model=List[MonthlyAmount])
def get_revenue_report(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return ReportingService(db).revenue(caller)

@router.get("/patients", response_model=List[MonthlyCount])
def get_patient_report(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """New patient registrations per month of the current year."""
    return ReportingService(db).patient_registrations(caller)

@router.get("/department-revenue", response_model=List[DepartmentRevenue])
def get_department_revenue(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return ReportingService(db).department_revenue(caller)

@router.get("/appointments-by-type", response_model=List[TypeCount])
def get_appointments_by_type(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return ReportingService(db).appointments_by_type(caller)

@router.get("/overview", response_model=OverviewReport)
def get_overview_report(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return ReportingService(db).overview(caller)
