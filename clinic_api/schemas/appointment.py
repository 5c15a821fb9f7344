from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from ..models.appointment import AppointmentStatus
from ..services.availability import SLOT_CATALOG, normalize_date
from ..core.exceptions import MAX_IDENTIFIER
from .common import ORMModel, UserSummary


class AppointmentCreate(BaseModel):
    doctor_id: int = Field(..., gt=0, le=MAX_IDENTIFIER)
    date: datetime
    time: str
    type: str = Field(..., min_length=1)
    notes: Optional[str] = None
    symptoms: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def to_midnight_utc(cls, v):
        return normalize_date(v)

    @field_validator("time")
    @classmethod
    def known_slot(cls, v: str) -> str:
        if v not in SLOT_CATALOG:
            raise ValueError(f"time must be one of: {', '.join(SLOT_CATALOG)}")
        return v


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentUpdate(BaseModel):
    """Clinical annotations the owning doctor may write."""

    diagnosis: Optional[str] = None
    notes: Optional[str] = None
    follow_up_date: Optional[datetime] = None


class AppointmentResponse(ORMModel):
    id: int
    patient_id: int
    doctor_id: int
    date: datetime
    time: str
    type: str
    status: AppointmentStatus
    notes: Optional[str] = None
    symptoms: Optional[str] = None
    diagnosis: Optional[str] = None
    follow_up_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    patient: Optional[UserSummary] = None
    doctor: Optional[UserSummary] = None


class AvailabilityResponse(BaseModel):
    doctor_id: int
    date: str
    available_time_slots: List[str]
