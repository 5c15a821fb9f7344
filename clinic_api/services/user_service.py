from sqlalchemy.orm import Session
from typing import List
import logging

from ..core.exceptions import ConflictError, NotFoundError, ValidationError, parse_identifier
from ..core.security import UserRole
from ..models.appointment import Appointment
from ..models.medical_record import MedicalRecord
from ..models.prescription import Prescription
from ..models.user import User
from ..schemas.user import UserUpdate
from .access_policy import Action, Caller, ResourceKind, ResourceRef, Verb, enforce

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, caller: Caller, raw_id) -> User:
        user = self._load(raw_id)
        enforce(caller, ResourceRef(ResourceKind.ACCOUNT, user.id), Action(Verb.READ))
        return user

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.id).all()

    def list_by_role(self, role: UserRole, approved_only: bool = False) -> List[User]:
        query = self.db.query(User).filter(User.role == role)
        if approved_only:
            query = query.filter(User.is_approved.is_(True))
        return query.order_by(User.name).all()

    def list_pending_approval(self) -> List[User]:
        return self.db.query(User).filter(
            User.role.in_([UserRole.DOCTOR, UserRole.PHARMACIST]),
            User.is_approved.is_(False)
        ).order_by(User.created_at).all()

    def update_user(self, caller: Caller, raw_id, user_data: UserUpdate) -> User:
        user = self._load(raw_id)
        enforce(caller, ResourceRef(ResourceKind.ACCOUNT, user.id), Action(Verb.UPDATE))

        changes = user_data.model_dump(exclude_unset=True)
        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
            taken = self.db.query(User).filter(
                User.email == changes["email"],
                User.id != user.id
            ).first()
            if taken:
                raise ConflictError("Email already registered")

        for field, value in changes.items():
            setattr(user, field, value)

        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Account {user.id} updated by {caller.id}: {sorted(changes)}")
        return user

    def delete_user(self, caller: Caller, raw_id) -> None:
        user = self._load(raw_id)
        enforce(caller, ResourceRef(ResourceKind.ACCOUNT, user.id), Action(Verb.DELETE))

        self.db.delete(user)
        self.db.commit()
        logger.info(f"Account {user.id} deleted by {caller.id}")

    def approve_user(self, caller: Caller, raw_id) -> User:
        user = self._load(raw_id)
        enforce(caller, ResourceRef(ResourceKind.ACCOUNT, user.id), Action(Verb.UPDATE))

        if user.role not in (UserRole.DOCTOR, UserRole.PHARMACIST):
            raise ValidationError("Only doctors and pharmacists can be approved by admin")

        user.is_approved = True
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Account {user.id} ({user.role.value}) approved by {caller.id}")
        return user

    def get_patient_details(self, raw_id) -> dict:
        patient_id = parse_identifier(raw_id, "patient ID")
        patient = self.db.query(User).filter(
            User.id == patient_id,
            User.role == UserRole.PATIENT
        ).first()
        if not patient:
            raise NotFoundError("Patient not found")

        return {
            "patient": patient,
            "appointments": self.db.query(Appointment).filter(
                Appointment.patient_id == patient_id
            ).order_by(Appointment.date.desc()).all(),
            "prescriptions": self.db.query(Prescription).filter(
                Prescription.patient_id == patient_id
            ).order_by(Prescription.date.desc()).all(),
            "medical_records": self.db.query(MedicalRecord).filter(
                MedicalRecord.patient_id == patient_id
            ).order_by(MedicalRecord.date.desc()).all(),
        }

    def _load(self, raw_id) -> User:
        user_id = parse_identifier(raw_id, "user ID")
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user
