from datetime import datetime
from sqlalchemy.orm import Session
from typing import List
import logging

from ..core.exceptions import NotFoundError, ValidationError, parse_identifier
from ..core.security import UserRole
from ..models.appointment import Appointment
from ..models.medical_record import MedicalRecord
from ..models.user import User
from ..schemas.medical_record import MedicalRecordCreate, MedicalRecordUpdate
from .access_policy import Action, Caller, ResourceKind, ResourceRef, Verb, enforce

logger = logging.getLogger(__name__)

class MedicalRecordService:
    def __init__(self, db: Session):
        self.db = db

    def create_record(self, caller: Caller, data: MedicalRecordCreate) -> MedicalRecord:
        enforce(
            caller,
            ResourceRef(ResourceKind.MEDICAL_RECORD, doctor_id=caller.id, patient_id=data.patient_id),
            Action(Verb.CREATE)
        )

        patient = self.db.query(User).filter(
            User.id == data.patient_id,
            User.role == UserRole.PATIENT
        ).first()
        if not patient:
            raise NotFoundError("Patient not found")

        if data.appointment_id is not None:
            appointment = self.db.query(Appointment).filter(
                Appointment.id == data.appointment_id
            ).first()
            if not appointment:
                raise NotFoundError("Appointment not found")
            if appointment.patient_id != patient.id:
                raise ValidationError("Appointment does not belong to this patient")
            if caller.role == UserRole.DOCTOR and appointment.doctor_id != caller.id:
                raise ValidationError("Appointment does not belong to this doctor")

        record = MedicalRecord(
            patient_id=patient.id,
            doctor_id=caller.id,
            appointment_id=data.appointment_id,
            date=datetime.utcnow(),
            visit_type=data.visit_type,
            vital_signs=data.vital_signs.model_dump() if data.vital_signs else None,
            diagnosis=data.diagnosis,
            treatment=data.treatment,
            notes=data.notes,
            blood_type=data.blood_type,
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)

        logger.info(f"Medical record {record.id} created by {caller.id} for patient {patient.id}")
        return record

    def list_records(self, caller: Caller) -> List[MedicalRecord]:
        query = self.db.query(MedicalRecord)
        if caller.role == UserRole.DOCTOR:
            query = query.filter(MedicalRecord.doctor_id == caller.id)
        return query.order_by(MedicalRecord.date.desc(), MedicalRecord.id.desc()).all()

    def list_patient_records(self, caller: Caller, patient_id: int) -> List[MedicalRecord]:
        enforce(caller, ResourceRef(ResourceKind.MEDICAL_RECORD, patient_id=patient_id), Action(Verb.LIST))
        return self.db.query(MedicalRecord).filter(
            MedicalRecord.patient_id == patient_id
        ).order_by(MedicalRecord.date.desc(), MedicalRecord.id.desc()).all()

    def get_record(self, caller: Caller, raw_id) -> MedicalRecord:
        record = self._load(raw_id)
        enforce(caller, ResourceRef.for_record(ResourceKind.MEDICAL_RECORD, record), Action(Verb.READ))
        return record

    def update_record(self, caller: Caller, raw_id, data: MedicalRecordUpdate) -> MedicalRecord:
        record = self._load(raw_id)
        enforce(caller, ResourceRef.for_record(ResourceKind.MEDICAL_RECORD, record), Action(Verb.UPDATE))

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(record, field, value)

        self.db.commit()
        self.db.refresh(record)
        return record

    def delete_record(self, caller: Caller, raw_id) -> None:
        record = self._load(raw_id)
        enforce(caller, ResourceRef.for_record(ResourceKind.MEDICAL_RECORD, record), Action(Verb.DELETE))

        self.db.delete(record)
        self.db.commit()
        logger.info(f"Medical record {record.id} deleted by {caller.id}")

    def _load(self, raw_id) -> MedicalRecord:
        record_id = parse_identifier(raw_id, "medical record ID")
        record = self.db.query(MedicalRecord).filter(MedicalRecord.id == record_id).first()
        if not record:
            raise NotFoundError("Medical record not found")
        return record
