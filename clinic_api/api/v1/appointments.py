from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from ...core.database import get_db
from ...api.deps import get_current_caller, get_current_user, get_patient_user
from ...services.access_policy import Caller
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import (
    AppointmentCreate, AppointmentResponse, AppointmentStatusUpdate,
    AppointmentUpdate, AvailabilityResponse
)
from ...schemas.common import MessageResponse

router = APIRouter(prefix="/appointments", tags=["Appointments"])

@router.get(
    "/doctor/{doctor_id}/availability",
    response_model=AvailabilityResponse,
    dependencies=[Depends(get_current_user)]
)
def get_doctor_availability(
    doctor_id: str,
    date: Optional[str] = Query(None, description="Calendar day, YYYY-MM-DD"),
    db: Session = Depends(get_db)
):
    """Free slots for a doctor on a given day, in opening-hour order."""
    return AppointmentService(db).doctor_availability(doctor_id, date)

@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_patient_user)]
)
def create_appointment(
    appointment_data: AppointmentCreate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """Book a pending appointment as the calling patient."""
    return AppointmentService(db).create_appointment(caller, appointment_data)

@router.get("", response_model=List[AppointmentResponse])
def list_appointments(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """Admins see all, doctors their own schedule, everyone else their bookings."""
    return AppointmentService(db).list_appointments(caller)

@router.put("/{appointment_id}/status", response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: str,
    status_data: AppointmentStatusUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return AppointmentService(db).update_status(caller, appointment_id, status_data)

@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return AppointmentService(db).get_appointment(caller, appointment_id)

@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: str,
    appointment_data: AppointmentUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """Diagnosis, notes and follow-up date, written by the owning doctor."""
    return AppointmentService(db).update_appointment(caller, appointment_id, appointment_data)

@router.delete("/{appointment_id}", response_model=MessageResponse)
def delete_appointment(
    appointment_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    AppointmentService(db).delete_appointment(caller, appointment_id)
    return {"message": "Appointment removed"}
