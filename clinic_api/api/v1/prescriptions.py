from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_current_caller, get_doctor_user, patient_subject
from ...services.access_policy import Caller
from ...services.prescription_service import PrescriptionService
from ...services.subject_resolver import RouteShape
from ...schemas.common import MessageResponse
from ...schemas.prescription import (
    PrescriptionCreate, PrescriptionResponse, PrescriptionStatusUpdate, PrescriptionUpdate
)

router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])

@router.post(
    "",
    response_model=PrescriptionResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_doctor_user)]
)
def create_prescription(
    prescription_data: PrescriptionCreate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """Issue a prescription and link it to the matching medical record."""
    return PrescriptionService(db).create_prescription(caller, prescription_data)

@router.get("", response_model=List[PrescriptionResponse])
def list_prescriptions(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return PrescriptionService(db).list_prescriptions(caller)

@router.get("/patient/me", response_model=List[PrescriptionResponse])
def list_my_prescriptions(
    caller: Caller = Depends(get_current_caller),
    patient_id: int = Depends(patient_subject(RouteShape.SELF)),
    db: Session = Depends(get_db)
):
    return PrescriptionService(db).list_patient_prescriptions(caller, patient_id)

@router.get("/patient/{patient_id}", response_model=List[PrescriptionResponse])
def list_patient_prescriptions(
    caller: Caller = Depends(get_current_caller),
    subject_id: int = Depends(patient_subject(RouteShape.BY_ID)),
    db: Session = Depends(get_db)
):
    return PrescriptionService(db).list_patient_prescriptions(caller, subject_id)

@router.put("/{prescription_id}/status", response_model=PrescriptionResponse)
def update_prescription_status(
    prescription_id: str,
    status_data: PrescriptionStatusUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return PrescriptionService(db).update_status(caller, prescription_id, status_data)

@router.get("/{prescription_id}", response_model=PrescriptionResponse)
def get_prescription(
    prescription_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return PrescriptionService(db).get_prescription(caller, prescription_id)

@router.put("/{prescription_id}", response_model=PrescriptionResponse)
def update_prescription(
    prescription_id: str,
    prescription_data: PrescriptionUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return PrescriptionService(db).update_prescription(caller, prescription_id, prescription_data)

@router.delete("/{prescription_id}", response_model=MessageResponse)
def delete_prescription(
    prescription_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    PrescriptionService(db).delete_prescription(caller, prescription_id)
    return {"message": "Prescription removed"}
