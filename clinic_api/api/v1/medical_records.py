from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_current_caller, get_doctor_or_admin_user, patient_subject
from ...services.access_policy import Caller
from ...services.medical_record_service import MedicalRecordService
from ...services.subject_resolver import RouteShape
from ...schemas.common import MessageResponse
from ...schemas.medical_record import (
    MedicalRecordCreate, MedicalRecordResponse, MedicalRecordUpdate
)

router = APIRouter(prefix="/medical-records", tags=["Medical Records"])

# /patient/me is registered before /patient/{patient_id} and /{record_id}

@router.get("/patient/me", response_model=List[MedicalRecordResponse])
def list_my_medical_records(
    caller: Caller = Depends(get_current_caller),
    patient_id: int = Depends(patient_subject(RouteShape.SELF)),
    db: Session = Depends(get_db)
):
    """The calling patient's own records."""
    return MedicalRecordService(db).list_patient_records(caller, patient_id)

@router.get("/patient/{patient_id}", response_model=List[MedicalRecordResponse])
def list_patient_medical_records(
    caller: Caller = Depends(get_current_caller),
    subject_id: int = Depends(patient_subject(RouteShape.BY_ID)),
    db: Session = Depends(get_db)
):
    """A patient's records for doctors and admins; patients always get their own."""
    return MedicalRecordService(db).list_patient_records(caller, subject_id)

@router.post(
    "",
    response_model=MedicalRecordResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_doctor_or_admin_user)]
)
def create_medical_record(
    record_data: MedicalRecordCreate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return MedicalRecordService(db).create_record(caller, record_data)

@router.get(
    "",
    response_model=List[MedicalRecordResponse],
    dependencies=[Depends(get_doctor_or_admin_user)]
)
def list_medical_records(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return MedicalRecordService(db).list_records(caller)

@router.get("/{record_id}", response_model=MedicalRecordResponse)
def get_medical_record(
    record_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return MedicalRecordService(db).get_record(caller, record_id)

@router.put("/{record_id}", response_model=MedicalRecordResponse)
def update_medical_record(
    record_id: str,
    record_data: MedicalRecordUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return MedicalRecordService(db).update_record(caller, record_id, record_data)

@router.delete("/{record_id}", response_model=MessageResponse)
def delete_medical_record(
    record_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    MedicalRecordService(db).delete_record(caller, record_id)
    return {"message": "Medical record removed"}
