from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from ..core.security import UserRole
from .appointment import AppointmentResponse
from .auth import Gender, UserResponse
from .common import not_null
from .medical_record import MedicalRecordResponse
from .prescription import PrescriptionResponse


class UserUpdate(BaseModel):
    """Admin-side account update, including role and approval."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    specialization: Optional[str] = None
    license_id: Optional[str] = None
    is_approved: Optional[bool] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    gender: Optional[Gender] = None

    @field_validator("name", "email", "role", "is_approved")
    @classmethod
    def required_fields(cls, v):
        return not_null(v)


class PatientDetails(BaseModel):
    patient: UserResponse
    appointments: List[AppointmentResponse]
    prescriptions: List[PrescriptionResponse]
    medical_records: List[MedicalRecordResponse]
