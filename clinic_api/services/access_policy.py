"""
Authorization policy for clinic records.

All role and ownership decisions go through ``can_access``, which walks an
ordered rule table. A rule returns ``AccessDecision`` when it applies and
``None`` when it has nothing to say; the first decision wins and the default
is deny.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional
import logging

from ..core.exceptions import AuthorizationError
from ..core.security import UserRole
from ..models.appointment import AppointmentStatus

logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    ACCOUNT = "account"
    APPOINTMENT = "appointment"
    PRESCRIPTION = "prescription"
    MEDICAL_RECORD = "medical_record"
    INVENTORY = "inventory"
    REPORT = "report"


class Verb(str, Enum):
    READ = "read"
    LIST = "list"
    CREATE = "create"
    UPDATE = "update"
    UPDATE_STATUS = "update_status"
    DELETE = "delete"


CLINICAL_KINDS = frozenset({
    ResourceKind.APPOINTMENT,
    ResourceKind.PRESCRIPTION,
    ResourceKind.MEDICAL_RECORD,
})

WRITE_VERBS = frozenset({Verb.CREATE, Verb.UPDATE, Verb.UPDATE_STATUS, Verb.DELETE})

# Appointment statuses a doctor may move their own appointment to
DOCTOR_APPOINTMENT_STATUSES = frozenset({
    AppointmentStatus.CONFIRMED.value,
    AppointmentStatus.CANCELLED.value,
    AppointmentStatus.COMPLETED.value,
})

# Reports a doctor may pull (scoped to their own data by the aggregator)
DOCTOR_REPORTS = frozenset({"patients", "appointments-by-type"})


@dataclass(frozen=True)
class Caller:
    id: int
    role: UserRole

    @classmethod
    def from_user(cls, user) -> "Caller":
        return cls(id=user.id, role=UserRole(user.role))


@dataclass(frozen=True)
class ResourceRef:
    """
    What is being accessed.

    ``resource_id`` is the record id (the account id for accounts, the
    report name for reports). ``doctor_id`` and ``patient_id`` are the
    owner and subject of clinical records; for a collection-level check
    ``patient_id`` is the subject whose records are listed.
    """
    kind: ResourceKind
    resource_id: Optional[object] = None
    doctor_id: Optional[int] = None
    patient_id: Optional[int] = None

    @classmethod
    def for_record(cls, kind: ResourceKind, record) -> "ResourceRef":
        return cls(
            kind=kind,
            resource_id=record.id,
            doctor_id=getattr(record, "doctor_id", None),
            patient_id=getattr(record, "patient_id", None),
        )


@dataclass(frozen=True)
class Action:
    verb: Verb
    target_status: Optional[str] = None

    def __post_init__(self):
        # Store plain status values so str-enum members and strings compare alike
        if isinstance(self.target_status, Enum):
            object.__setattr__(self, "target_status", self.target_status.value)


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str
    rule: str

    def __bool__(self):
        return self.allowed


def _allow(rule: str) -> AccessDecision:
    return AccessDecision(True, "allowed", rule)


def _deny(rule: str, reason: str) -> AccessDecision:
    return AccessDecision(False, reason, rule)


Rule = Callable[[Caller, ResourceRef, Action], Optional[AccessDecision]]


def admin_rule(caller: Caller, resource: ResourceRef, action: Action) -> Optional[AccessDecision]:
    if caller.role != UserRole.ADMIN:
        return None
    # Lockout guard
    if (
        resource.kind == ResourceKind.ACCOUNT
        and action.verb == Verb.DELETE
        and resource.resource_id == caller.id
    ):
        return _deny("admin", "Cannot delete your own account")
    return _allow("admin")


def owner_doctor_rule(caller: Caller, resource: ResourceRef, action: Action) -> Optional[AccessDecision]:
    if caller.role != UserRole.DOCTOR or resource.kind not in CLINICAL_KINDS:
        return None
    if resource.doctor_id != caller.id:
        return None

    if action.verb == Verb.CREATE:
        if resource.kind in (ResourceKind.PRESCRIPTION, ResourceKind.MEDICAL_RECORD):
            return _allow("owner_doctor")
        return None
    if action.verb in (Verb.READ, Verb.UPDATE):
        return _allow("owner_doctor")
    if action.verb == Verb.UPDATE_STATUS:
        if resource.kind == ResourceKind.APPOINTMENT and action.target_status not in DOCTOR_APPOINTMENT_STATUSES:
            return _deny("owner_doctor", f"Doctors cannot set appointment status to '{action.target_status}'")
        return _allow("owner_doctor")
    return None


def subject_patient_rule(caller: Caller, resource: ResourceRef, action: Action) -> Optional[AccessDecision]:
    if caller.role != UserRole.PATIENT or resource.kind not in CLINICAL_KINDS:
        return None
    if resource.patient_id != caller.id:
        return None

    if action.verb in (Verb.READ, Verb.LIST):
        return _allow("subject_patient")
    if resource.kind == ResourceKind.APPOINTMENT:
        if action.verb == Verb.CREATE:
            return _allow("subject_patient")
        if action.verb == Verb.UPDATE_STATUS:
            if action.target_status == AppointmentStatus.CANCELLED.value:
                return _allow("subject_patient")
            return _deny("subject_patient", "Patients can only cancel their own appointments")
    return None


def pharmacist_rule(caller: Caller, resource: ResourceRef, action: Action) -> Optional[AccessDecision]:
    if caller.role != UserRole.PHARMACIST:
        return None
    if resource.kind not in (ResourceKind.PRESCRIPTION, ResourceKind.INVENTORY):
        return None
    if action.verb in (Verb.READ, Verb.LIST):
        return _allow("pharmacist")
    # Stock levels are written by admins only
    return _deny("pharmacist", "Pharmacists have read-only access")


def own_account_rule(caller: Caller, resource: ResourceRef, action: Action) -> Optional[AccessDecision]:
    if resource.kind != ResourceKind.ACCOUNT or resource.resource_id != caller.id:
        return None
    if action.verb in (Verb.READ, Verb.UPDATE):
        return _allow("own_account")
    return None


def clinician_directory_rule(caller: Caller, resource: ResourceRef, action: Action) -> Optional[AccessDecision]:
    """Doctors look up accounts and pull a patient's full clinical history."""
    if caller.role != UserRole.DOCTOR:
        return None
    if resource.kind == ResourceKind.ACCOUNT and action.verb in (Verb.READ, Verb.LIST):
        return _allow("clinician_directory")
    if resource.kind in CLINICAL_KINDS and action.verb == Verb.LIST and resource.patient_id is not None:
        return _allow("clinician_directory")
    return None


def shared_inventory_rule(caller: Caller, resource: ResourceRef, action: Action) -> Optional[AccessDecision]:
    if resource.kind == ResourceKind.INVENTORY and action.verb in (Verb.READ, Verb.LIST):
        return _allow("shared_inventory")
    return None


def doctor_reports_rule(caller: Caller, resource: ResourceRef, action: Action) -> Optional[AccessDecision]:
    if (
        caller.role == UserRole.DOCTOR
        and resource.kind == ResourceKind.REPORT
        and action.verb == Verb.READ
        and resource.resource_id in DOCTOR_REPORTS
    ):
        return _allow("doctor_reports")
    return None


POLICY_RULES: List[Rule] = [
    admin_rule,
    owner_doctor_rule,
    subject_patient_rule,
    pharmacist_rule,
    own_account_rule,
    clinician_directory_rule,
    shared_inventory_rule,
    doctor_reports_rule,
]


def can_access(caller: Caller, resource: ResourceRef, action: Action) -> AccessDecision:
    """Evaluate the rule table; the first rule with an opinion decides."""
    for rule in POLICY_RULES:
        decision = rule(caller, resource, action)
        if decision is not None:
            return decision
    return _deny("default", "Not authorized")


def enforce(caller: Caller, resource: ResourceRef, action: Action) -> None:
    """Raise ``AuthorizationError`` unless the caller may perform the action."""
    decision = can_access(caller, resource, action)
    if not decision.allowed:
        logger.info(
            f"Denied {action.verb.value} on {resource.kind.value}:{resource.resource_id} "
            f"for {caller.role.value}:{caller.id} ({decision.rule})"
        )
        raise AuthorizationError(decision.reason)
