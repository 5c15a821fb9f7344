from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from ..core.exceptions import MAX_IDENTIFIER
from .common import ORMModel, UserSummary, not_null
from .prescription import PrescriptionResponse


class VitalSigns(BaseModel):
    temperature: Optional[str] = None
    blood_pressure: Optional[str] = None
    heart_rate: Optional[str] = None
    respiratory_rate: Optional[str] = None
    oxygen_saturation: Optional[str] = None


class MedicalRecordCreate(BaseModel):
    patient_id: int = Field(..., gt=0, le=MAX_IDENTIFIER)
    visit_type: str = Field(..., min_length=1)
    vital_signs: Optional[VitalSigns] = None
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    notes: Optional[str] = None
    appointment_id: Optional[int] = Field(None, gt=0, le=MAX_IDENTIFIER)
    blood_type: Optional[str] = None


class MedicalRecordUpdate(BaseModel):
    visit_type: Optional[str] = Field(None, min_length=1)
    vital_signs: Optional[VitalSigns] = None
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    notes: Optional[str] = None
    blood_type: Optional[str] = None

    @field_validator("visit_type")
    @classmethod
    def visit_type_required(cls, v):
        return not_null(v)


class MedicalRecordResponse(ORMModel):
    id: int
    patient_id: int
    doctor_id: int
    appointment_id: Optional[int] = None
    date: datetime
    visit_type: str
    vital_signs: Optional[VitalSigns] = None
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    notes: Optional[str] = None
    blood_type: Optional[str] = None
    prescriptions: List[PrescriptionResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    patient: Optional[UserSummary] = None
    doctor: Optional[UserSummary] = None
