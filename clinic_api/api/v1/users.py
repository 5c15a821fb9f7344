from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...core.security import UserRole
from ...api.deps import (
    get_admin_user, get_current_caller, get_current_user, get_doctor_or_admin_user
)
from ...services.access_policy import Caller
from ...services.user_service import UserService
from ...schemas.auth import UserResponse
from ...schemas.common import MessageResponse
from ...schemas.user import PatientDetails, UserUpdate

router = APIRouter(prefix="/users", tags=["Users"])

# Literal paths first, so they are never read as an id

@router.get("/doctors", response_model=List[UserResponse], dependencies=[Depends(get_current_user)])
def list_doctors(db: Session = Depends(get_db)):
    """Approved doctors, for booking."""
    return UserService(db).list_by_role(UserRole.DOCTOR, approved_only=True)

@router.get("/pharmacists", response_model=List[UserResponse], dependencies=[Depends(get_admin_user)])
def list_pharmacists(db: Session = Depends(get_db)):
    return UserService(db).list_by_role(UserRole.PHARMACIST)

@router.get("/pending-approval", response_model=List[UserResponse], dependencies=[Depends(get_admin_user)])
def list_pending_approval(db: Session = Depends(get_db)):
    """Doctors and pharmacists waiting for an admin."""
    return UserService(db).list_pending_approval()

@router.get("/patients", response_model=List[UserResponse], dependencies=[Depends(get_doctor_or_admin_user)])
def list_patients(db: Session = Depends(get_db)):
    return UserService(db).list_by_role(UserRole.PATIENT)

@router.get(
    "/patient/{patient_id}/details",
    response_model=PatientDetails,
    dependencies=[Depends(get_doctor_or_admin_user)]
)
def get_patient_details(patient_id: str, db: Session = Depends(get_db)):
    """Patient profile with appointments, prescriptions and medical records."""
    return UserService(db).get_patient_details(patient_id)

@router.get("", response_model=List[UserResponse], dependencies=[Depends(get_admin_user)])
def list_users(db: Session = Depends(get_db)):
    return UserService(db).list_users()

@router.put("/{user_id}/approve", response_model=UserResponse, dependencies=[Depends(get_admin_user)])
def approve_user(
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return UserService(db).approve_user(caller, user_id)

@router.get("/{user_id}", response_model=UserResponse, dependencies=[Depends(get_doctor_or_admin_user)])
def get_user(
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return UserService(db).get_user(caller, user_id)

@router.put("/{user_id}", response_model=UserResponse, dependencies=[Depends(get_admin_user)])
def update_user(
    user_id: str,
    user_data: UserUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """Admin update; the only path that can change an account's role."""
    return UserService(db).update_user(caller, user_id, user_data)

@router.delete("/{user_id}", response_model=MessageResponse, dependencies=[Depends(get_admin_user)])
def delete_user(
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    UserService(db).delete_user(caller, user_id)
    return {"message": "User removed"}
