"""
Resolve which patient a "patient records" request is about.

The same capability is mounted twice: ``/patient/me`` (caller-relative) and
``/patient/{patient_id}`` (explicit). The router tags each route with a
``RouteShape`` when it is registered; the resolver never inspects the URL.
"""
from enum import Enum
from typing import Mapping, Optional
import logging

from sqlalchemy.orm import Session

from ..core.exceptions import AuthorizationError, NotFoundError, parse_identifier
from ..core.security import UserRole
from ..models.user import User
from .access_policy import Caller

logger = logging.getLogger(__name__)

PATIENT_ID_PARAM = "patient_id"


class RouteShape(str, Enum):
    SELF = "self"
    BY_ID = "by_id"


def resolve_subject(
    caller: Caller,
    route_params: Mapping[str, object],
    route_shape: RouteShape,
    db: Optional[Session] = None,
) -> int:
    """Return the patient id whose records the caller is asking for."""
    # Patients only ever see themselves, whatever the path carries
    if caller.role == UserRole.PATIENT:
        return caller.id

    if route_shape == RouteShape.SELF:
        logger.warning(
            f"{caller.role.value}:{caller.id} reached a caller-relative patient route"
        )
        raise AuthorizationError("Only patients can access their own records")

    if caller.role not in (UserRole.DOCTOR, UserRole.ADMIN):
        raise AuthorizationError("Only doctors and admins can access patient records")

    patient_id = parse_identifier(route_params.get(PATIENT_ID_PARAM), "patient ID")
    exists = db.query(User.id).filter(
        User.id == patient_id,
        User.role == UserRole.PATIENT
    ).first()
    if not exists:
        raise NotFoundError("Patient not found")
    return patient_id
