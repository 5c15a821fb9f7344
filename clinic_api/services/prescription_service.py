from datetime import datetime
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from ..core.exceptions import NotFoundError, ValidationError, parse_identifier
from ..core.security import UserRole
from ..models.appointment import Appointment
from ..models.medical_record import MedicalRecord
from ..models.prescription import Medication, Prescription, PrescriptionStatus
from ..models.user import User
from ..schemas.prescription import PrescriptionCreate, PrescriptionStatusUpdate, PrescriptionUpdate
from .access_policy import Action, Caller, ResourceKind, ResourceRef, Verb, enforce

logger = logging.getLogger(__name__)

class PrescriptionService:
    def __init__(self, db: Session):
        self.db = db

    def create_prescription(self, caller: Caller, data: PrescriptionCreate) -> Prescription:
        enforce(
            caller,
            ResourceRef(ResourceKind.PRESCRIPTION, doctor_id=caller.id, patient_id=data.patient_id),
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

        prescription = Prescription(
            patient_id=patient.id,
            doctor_id=caller.id,
            appointment_id=data.appointment_id,
            date=datetime.utcnow(),
            expiry_date=data.expiry_date,
            notes=data.notes,
            status=PrescriptionStatus.ACTIVE,
            medications=[Medication(**entry.model_dump()) for entry in data.medications],
        )
        self.db.add(prescription)
        self.db.flush()

        self._link_to_medical_record(prescription)

        self.db.commit()
        self.db.refresh(prescription)
        return prescription

    def _link_to_medical_record(self, prescription: Prescription) -> Optional[MedicalRecord]:
        """Attach to the visit's record, or the latest record of the same doctor/patient pair."""
        if prescription.appointment_id is not None:
            record = self.db.query(MedicalRecord).filter(
                MedicalRecord.appointment_id == prescription.appointment_id,
                MedicalRecord.doctor_id == prescription.doctor_id
            ).first()
        else:
            record = self.db.query(MedicalRecord).filter(
                MedicalRecord.patient_id == prescription.patient_id,
                MedicalRecord.doctor_id == prescription.doctor_id
            ).order_by(MedicalRecord.date.desc(), MedicalRecord.id.desc()).first()

        if record is not None:
            record.prescriptions.append(prescription)
            logger.info(f"Prescription {prescription.id} linked to medical record {record.id}")
        return record

    def list_prescriptions(self, caller: Caller) -> List[Prescription]:
        query = self.db.query(Prescription)
        if caller.role == UserRole.DOCTOR:
            query = query.filter(Prescription.doctor_id == caller.id)
        elif caller.role == UserRole.PATIENT:
            query = query.filter(Prescription.patient_id == caller.id)
        else:
            enforce(caller, ResourceRef(ResourceKind.PRESCRIPTION), Action(Verb.LIST))
        return query.order_by(Prescription.date.desc(), Prescription.id.desc()).all()

    def list_patient_prescriptions(self, caller: Caller, patient_id: int) -> List[Prescription]:
        enforce(caller, ResourceRef(ResourceKind.PRESCRIPTION, patient_id=patient_id), Action(Verb.LIST))
        return self.db.query(Prescription).filter(
            Prescription.patient_id == patient_id
        ).order_by(Prescription.date.desc(), Prescription.id.desc()).all()

    def get_prescription(self, caller: Caller, raw_id) -> Prescription:
        prescription = self._load(raw_id)
        enforce(caller, ResourceRef.for_record(ResourceKind.PRESCRIPTION, prescription), Action(Verb.READ))
        return prescription

    def update_prescription(self, caller: Caller, raw_id, data: PrescriptionUpdate) -> Prescription:
        prescription = self._load(raw_id)
        enforce(caller, ResourceRef.for_record(ResourceKind.PRESCRIPTION, prescription), Action(Verb.UPDATE))

        changes = data.model_dump(exclude_unset=True)
        if "medications" in changes:
            prescription.medications = [
                Medication(**entry) for entry in changes.pop("medications")
            ]
        for field, value in changes.items():
            setattr(prescription, field, value)

        self.db.commit()
        self.db.refresh(prescription)
        return prescription

    def update_status(self, caller: Caller, raw_id, data: PrescriptionStatusUpdate) -> Prescription:
        prescription = self._load(raw_id)
        enforce(
            caller,
            ResourceRef.for_record(ResourceKind.PRESCRIPTION, prescription),
            Action(Verb.UPDATE_STATUS, target_status=data.status)
        )

        prescription.status = data.status
        self.db.commit()
        self.db.refresh(prescription)
        logger.info(f"Prescription {prescription.id} set to {data.status.value} by {caller.id}")
        return prescription

    def delete_prescription(self, caller: Caller, raw_id) -> None:
        prescription = self._load(raw_id)
        enforce(caller, ResourceRef.for_record(ResourceKind.PRESCRIPTION, prescription), Action(Verb.DELETE))

        self.db.delete(prescription)
        self.db.commit()

    def _load(self, raw_id) -> Prescription:
        prescription_id = parse_identifier(raw_id, "prescription ID")
        prescription = self.db.query(Prescription).filter(Prescription.id == prescription_id).first()
        if not prescription:
            raise NotFoundError("Prescription not found")
        return prescription
