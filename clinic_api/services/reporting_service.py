"""
Dashboard and report rollups. Plain counting over the record tables.
"""
from collections import Counter
from datetime import datetime, timedelta
from sqlalchemy import func
from sqlalchemy.orm import Session
from typing import Dict, List
import calendar
import logging

from ..core.config import settings
from ..core.security import UserRole
from ..models.appointment import Appointment, AppointmentStatus
from ..models.inventory import InventoryItem
from ..models.prescription import Prescription
from ..models.user import User
from .access_policy import Action, Caller, ResourceKind, ResourceRef, Verb, enforce

logger = logging.getLogger(__name__)

MONTH_NAMES = list(calendar.month_name)[1:]
MONTH_ABBREVIATIONS = list(calendar.month_abbr)[1:]
BILLABLE_STATUSES = (AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED)

class ReportingService:
    def __init__(self, db: Session, now: datetime = None):
        self.db = db
        self.now = now or datetime.utcnow()

    # Dashboard
    def dashboard_stats(self, caller: Caller) -> Dict[str, float]:
        role_counts = dict(
            self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
        )
        total_doctors = role_counts.get(UserRole.DOCTOR, 0)
        total_patients = role_counts.get(UserRole.PATIENT, 0)
        total_pharmacists = role_counts.get(UserRole.PHARMACIST, 0)

        if caller.role in (UserRole.ADMIN, UserRole.PHARMACIST):
            stats = {
                "total_users": total_doctors + total_patients + total_pharmacists,
                "total_doctors": total_doctors,
                "total_patients": total_patients,
                "total_pharmacists": total_pharmacists,
                "total_prescriptions": self.db.query(Prescription).count(),
            }
            stats.update(self._inventory_stats())
            if caller.role == UserRole.ADMIN:
                appointments = self.db.query(Appointment)
                stats.update(self._appointment_counts(appointments))
            return stats

        if caller.role == UserRole.DOCTOR:
            appointments = self.db.query(Appointment).filter(Appointment.doctor_id == caller.id)
            prescriptions = self.db.query(Prescription).filter(Prescription.doctor_id == caller.id)
            stats = {"total_doctors": total_doctors, "total_patients": total_patients}
        else:
            appointments = self.db.query(Appointment).filter(Appointment.patient_id == caller.id)
            prescriptions = self.db.query(Prescription).filter(Prescription.patient_id == caller.id)
            stats = {"total_doctors": total_doctors}

        stats["total_pharmacists"] = total_pharmacists
        stats.update(self._appointment_counts(appointments))
        stats["total_prescriptions"] = prescriptions.count()
        return stats

    def _appointment_counts(self, query) -> Dict[str, int]:
        return {
            "total_appointments": query.count(),
            "pending_appointments": query.filter(Appointment.status == AppointmentStatus.PENDING).count(),
            "confirmed_appointments": query.filter(Appointment.status == AppointmentStatus.CONFIRMED).count(),
        }

    def _inventory_stats(self) -> Dict[str, float]:
        items = self.db.query(InventoryItem).all()
        horizon = self.now + timedelta(days=settings.EXPIRY_WINDOW_DAYS)
        return {
            "total_inventory_items": len(items),
            "low_stock_items": sum(1 for item in items if item.quantity <= item.threshold),
            "expiring_items": sum(1 for item in items if item.expiry_date <= horizon),
            "stock_value": sum((item.price or 0) * (item.quantity or 0) for item in items),
        }

    def monthly_appointments(self, caller: Caller) -> Dict[str, list]:
        query = self._appointments_this_year()
        if caller.role == UserRole.DOCTOR:
            query = query.filter(Appointment.doctor_id == caller.id)
        elif caller.role == UserRole.PATIENT:
            query = query.filter(Appointment.patient_id == caller.id)

        return {"labels": MONTH_NAMES, "data": self._per_month(a.date for a in query.all())}

    def specialization_breakdown(self, caller: Caller) -> Dict[str, list]:
        enforce(caller, ResourceRef(ResourceKind.REPORT, "specialization-data"), Action(Verb.READ))
        rows = self.db.query(User.specialization, func.count(User.id)).filter(
            User.role == UserRole.DOCTOR
        ).group_by(User.specialization).order_by(func.count(User.id).desc()).all()
        return {
            "labels": [name or "General" for name, _ in rows],
            "data": [count for _, count in rows],
        }

    # Reports
    def revenue(self, caller: Caller) -> List[dict]:
        enforce(caller, ResourceRef(ResourceKind.REPORT, "revenue"), Action(Verb.READ))
        monthly = self._monthly_revenue()
        return [
            {"month": month, "amount": round(amount)}
            for month, amount in zip(MONTH_ABBREVIATIONS, monthly)
        ]

    def patient_registrations(self, caller: Caller) -> List[dict]:
        enforce(caller, ResourceRef(ResourceKind.REPORT, "patients"), Action(Verb.READ))
        start, end = self._year_bounds()
        created = self.db.query(User.created_at).filter(
            User.role == UserRole.PATIENT,
            User.created_at >= start,
            User.created_at < end
        ).all()
        counts = self._per_month(row.created_at for row in created)
        return [
            {"month": month, "count": count}
            for month, count in zip(MONTH_ABBREVIATIONS, counts)
        ]

    def department_revenue(self, caller: Caller) -> List[dict]:
        enforce(caller, ResourceRef(ResourceKind.REPORT, "department-revenue"), Action(Verb.READ))
        rows = self.db.query(User.specialization, func.count(Appointment.id)).select_from(
            Appointment
        ).join(
            User, Appointment.doctor_id == User.id
        ).filter(
            Appointment.status.in_(BILLABLE_STATUSES),
            User.specialization.isnot(None)
        ).group_by(User.specialization).all()

        report = [
            {"department": name, "amount": count * settings.APPOINTMENT_FEE}
            for name, count in rows
        ]
        return sorted(report, key=lambda row: row["amount"], reverse=True)

    def appointments_by_type(self, caller: Caller) -> List[dict]:
        enforce(caller, ResourceRef(ResourceKind.REPORT, "appointments-by-type"), Action(Verb.READ))
        query = self.db.query(Appointment.type)
        if caller.role == UserRole.DOCTOR:
            query = query.filter(Appointment.doctor_id == caller.id)

        counts = Counter(row.type or "Regular Checkup" for row in query.all())
        return [{"type": kind, "count": count} for kind, count in counts.most_common()]

    def overview(self, caller: Caller) -> dict:
        enforce(caller, ResourceRef(ResourceKind.REPORT, "overview"), Action(Verb.READ))
        total_patients = self.db.query(User).filter(User.role == UserRole.PATIENT).count()
        total_appointments = self.db.query(Appointment).count()

        monthly = self._monthly_revenue()
        total_revenue = float(sum(monthly))
        current = monthly[self.now.month - 1]
        previous = monthly[self.now.month - 2] if self.now.month > 1 else monthly[11]
        growth = ((current - previous) / previous) * 100 if previous > 0 else 0.0

        return {
            "total_patients": total_patients,
            "total_appointments": total_appointments,
            "total_revenue": total_revenue,
            "avg_revenue_per_patient": total_revenue / total_patients if total_patients else 0.0,
            "revenue_growth": growth,
            "current_month_revenue": float(current),
            "previous_month_revenue": float(previous),
        }

    # Helpers
    def _year_bounds(self):
        start = datetime(self.now.year, 1, 1)
        return start, datetime(self.now.year + 1, 1, 1)

    def _appointments_this_year(self):
        start, end = self._year_bounds()
        return self.db.query(Appointment).filter(
            Appointment.date >= start,
            Appointment.date < end
        )

    def _monthly_revenue(self) -> List[float]:
        billable = self._appointments_this_year().filter(
            Appointment.status.in_(BILLABLE_STATUSES)
        ).all()
        return [
            count * settings.APPOINTMENT_FEE
            for count in self._per_month(a.date for a in billable)
        ]

    @staticmethod
    def _per_month(dates) -> List[int]:
        months = [0] * 12
        for value in dates:
            if value is not None:
                months[value.month - 1] += 1
        return months
