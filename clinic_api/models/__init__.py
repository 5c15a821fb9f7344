from .user import User
from .appointment import Appointment, AppointmentStatus
from .prescription import Prescription, PrescriptionStatus, Medication
from .medical_record import MedicalRecord, medical_record_prescriptions
from .inventory import InventoryItem

__all__ = [
    "User",
    "Appointment",
    "AppointmentStatus",
    "Prescription",
    "PrescriptionStatus",
    "Medication",
    "MedicalRecord",
    "medical_record_prescriptions",
    "InventoryItem",
]
