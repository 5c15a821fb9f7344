from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from ..models.prescription import PrescriptionStatus
from ..core.exceptions import MAX_IDENTIFIER
from .common import ORMModel, UserSummary, not_null


class MedicationEntry(ORMModel):
    name: str = Field(..., min_length=1)
    dosage: str = Field(..., min_length=1)
    frequency: str = Field(..., min_length=1)
    duration: str = Field(..., min_length=1)


class PrescriptionCreate(BaseModel):
    patient_id: int = Field(..., gt=0, le=MAX_IDENTIFIER)
    medications: List[MedicationEntry] = Field(..., min_length=1)
    expiry_date: Optional[datetime] = None
    notes: Optional[str] = None
    appointment_id: Optional[int] = Field(None, gt=0, le=MAX_IDENTIFIER)


class PrescriptionUpdate(BaseModel):
    medications: Optional[List[MedicationEntry]] = Field(None, min_length=1)
    expiry_date: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("medications")
    @classmethod
    def medications_required(cls, v):
        return not_null(v)


class PrescriptionStatusUpdate(BaseModel):
    status: PrescriptionStatus


class PrescriptionResponse(ORMModel):
    id: int
    patient_id: int
    doctor_id: int
    appointment_id: Optional[int] = None
    date: datetime
    expiry_date: Optional[datetime] = None
    status: PrescriptionStatus
    notes: Optional[str] = None
    medications: List[MedicationEntry]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    patient: Optional[UserSummary] = None
    doctor: Optional[UserSummary] = None
