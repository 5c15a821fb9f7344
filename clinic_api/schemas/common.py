from typing import Optional
from pydantic import BaseModel, ConfigDict

from ..core.security import UserRole


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class UserSummary(ORMModel):
    """Embedded account reference on clinical records."""

    id: int
    name: str
    email: str
    role: UserRole
    specialization: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


def not_null(value):
    """Reject an explicit null for a field that cannot be cleared."""
    if value is None:
        raise ValueError("field cannot be null")
    return value
