from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from .common import ORMModel, UserSummary, not_null


class InventoryItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    dosage: str = Field(..., min_length=1)
    formulation: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)
    threshold: int = Field(..., ge=0)
    supplier: str = Field(..., min_length=1)
    expiry_date: datetime
    batch_number: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)

    @field_validator("name", "category", "dosage", "formulation", "supplier", "batch_number", "location")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    dosage: Optional[str] = Field(None, min_length=1)
    formulation: Optional[str] = Field(None, min_length=1)
    quantity: Optional[int] = Field(None, ge=0)
    threshold: Optional[int] = Field(None, ge=0)
    supplier: Optional[str] = Field(None, min_length=1)
    expiry_date: Optional[datetime] = None
    batch_number: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)

    @field_validator(
        "name", "category", "dosage", "formulation", "quantity", "threshold",
        "supplier", "expiry_date", "batch_number", "location", "price",
    )
    @classmethod
    def required_fields(cls, v):
        return not_null(v)


class InventoryItemResponse(ORMModel):
    id: int
    name: str
    category: str
    dosage: str
    formulation: str
    quantity: int
    threshold: int
    supplier: str
    expiry_date: datetime
    batch_number: str
    location: str
    price: Optional[float] = None
    last_updated: Optional[datetime] = None
    updated_by_id: Optional[int] = None
    updated_by: Optional[UserSummary] = None
