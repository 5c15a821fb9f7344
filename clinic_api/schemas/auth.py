from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from ..core.security import UserRole
from .common import ORMModel, not_null

Gender = Literal["male", "female", "other"]


class UserRegister(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Literal["patient", "doctor", "pharmacist"] = "patient"
    specialization: Optional[str] = None
    license_id: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    gender: Optional[Gender] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()

    @model_validator(mode="after")
    def check_professional_fields(self):
        if self.role == "doctor" and not self.specialization:
            raise ValueError("Specialization is required for doctors")
        if self.role in ("doctor", "pharmacist") and not self.license_id:
            raise ValueError("License ID is required for doctors and pharmacists")
        return self


class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(ORMModel):
    id: int
    name: str
    email: str
    role: UserRole
    is_approved: bool
    specialization: Optional[str] = None
    license_id: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    gender: Optional[str] = None
    profile_picture: Optional[str] = None
    created_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own account. Role is not one of them."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[datetime] = None
    gender: Optional[Gender] = None
    profile_picture: Optional[str] = None

    @field_validator("name", "email")
    @classmethod
    def required_fields(cls, v):
        return not_null(v)


class ChangePassword(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)
