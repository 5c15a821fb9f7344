from sqlalchemy.orm import Session
from typing import List
import logging

from ..core.exceptions import ConflictError, NotFoundError, ValidationError, parse_identifier
from ..core.security import UserRole
from ..models.appointment import Appointment, AppointmentStatus
from ..models.user import User
from ..schemas.appointment import AppointmentCreate, AppointmentStatusUpdate, AppointmentUpdate
from .access_policy import Action, Caller, ResourceKind, ResourceRef, Verb, enforce
from .availability import available_slots, booked_slots, normalize_date

logger = logging.getLogger(__name__)

class AppointmentService:
    def __init__(self, db: Session):
        self.db = db

    def create_appointment(self, caller: Caller, data: AppointmentCreate) -> Appointment:
        """Book a pending appointment for the calling patient."""
        enforce(
            caller,
            ResourceRef(ResourceKind.APPOINTMENT, doctor_id=data.doctor_id, patient_id=caller.id),
            Action(Verb.CREATE)
        )

        doctor = self.db.query(User).filter(
            User.id == data.doctor_id,
            User.role == UserRole.DOCTOR,
            User.is_approved.is_(True)
        ).first()
        if not doctor:
            raise NotFoundError("Doctor not found or not approved")

        # Check-then-insert: no store-level constraint, so concurrent bookings can still collide
        if data.time in booked_slots(self.db, doctor.id, data.date):
            raise ConflictError(f"The {data.time} slot is already booked")

        appointment = Appointment(
            patient_id=caller.id,
            doctor_id=doctor.id,
            date=data.date,
            time=data.time,
            type=data.type,
            notes=data.notes,
            symptoms=data.symptoms,
            status=AppointmentStatus.PENDING,
        )
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)

        logger.info(
            f"Appointment {appointment.id} booked: patient {caller.id} with doctor {doctor.id} "
            f"on {appointment.date.date()} at {appointment.time}"
        )
        return appointment

    def list_appointments(self, caller: Caller) -> List[Appointment]:
        query = self.db.query(Appointment)
        if caller.role == UserRole.DOCTOR:
            query = query.filter(Appointment.doctor_id == caller.id)
        elif caller.role != UserRole.ADMIN:
            query = query.filter(Appointment.patient_id == caller.id)
        return query.order_by(Appointment.date.desc(), Appointment.id.desc()).all()

    def get_appointment(self, caller: Caller, raw_id) -> Appointment:
        appointment = self._load(raw_id)
        enforce(caller, ResourceRef.for_record(ResourceKind.APPOINTMENT, appointment), Action(Verb.READ))
        return appointment

    def update_status(self, caller: Caller, raw_id, data: AppointmentStatusUpdate) -> Appointment:
        appointment = self._load(raw_id)
        enforce(
            caller,
            ResourceRef.for_record(ResourceKind.APPOINTMENT, appointment),
            Action(Verb.UPDATE_STATUS, target_status=data.status)
        )

        if appointment.status != data.status:
            logger.info(
                f"Appointment {appointment.id}: {appointment.status.value} -> {data.status.value} "
                f"by {caller.role.value}:{caller.id}"
            )
            appointment.status = data.status
            self.db.commit()
            self.db.refresh(appointment)
        return appointment

    def update_appointment(self, caller: Caller, raw_id, data: AppointmentUpdate) -> Appointment:
        """Write clinical annotations; only the owning doctor gets here."""
        appointment = self._load(raw_id)
        enforce(caller, ResourceRef.for_record(ResourceKind.APPOINTMENT, appointment), Action(Verb.UPDATE))

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(appointment, field, value)

        self.db.commit()
        self.db.refresh(appointment)
        return appointment

    def delete_appointment(self, caller: Caller, raw_id) -> None:
        appointment = self._load(raw_id)
        enforce(caller, ResourceRef.for_record(ResourceKind.APPOINTMENT, appointment), Action(Verb.DELETE))

        self.db.delete(appointment)
        self.db.commit()
        logger.info(f"Appointment {appointment.id} deleted by {caller.id}")

    def doctor_availability(self, raw_doctor_id, day: str) -> dict:
        doctor_id = parse_identifier(raw_doctor_id, "doctor ID")
        if not day:
            raise ValidationError("Date is required")
        try:
            normalized = normalize_date(day)
        except ValueError as e:
            raise ValidationError(str(e))

        doctor = self.db.query(User.id).filter(
            User.id == doctor_id,
            User.role == UserRole.DOCTOR
        ).first()
        if not doctor:
            raise NotFoundError("Doctor not found")

        return {
            "doctor_id": doctor_id,
            "date": normalized.date().isoformat(),
            "available_time_slots": available_slots(self.db, doctor_id, normalized),
        }

    def _load(self, raw_id) -> Appointment:
        appointment_id = parse_identifier(raw_id, "appointment ID")
        appointment = self.db.query(Appointment).filter(Appointment.id == appointment_id).first()
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment
