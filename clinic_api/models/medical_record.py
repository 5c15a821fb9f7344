from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, JSON, Table
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

medical_record_prescriptions = Table(
    "medical_record_prescriptions",
    Base.metadata,
    Column("medical_record_id", Integer, ForeignKey("medical_records.id", ondelete="CASCADE"), primary_key=True),
    Column("prescription_id", Integer, ForeignKey("prescriptions.id", ondelete="CASCADE"), primary_key=True),
)

class MedicalRecord(Base):
    __tablename__ = "medical_records"

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True, index=True)

    date = Column(DateTime, server_default=func.now(), nullable=False)
    visit_type = Column(String(100), nullable=False)
    # temperature, blood_pressure, heart_rate, respiratory_rate, oxygen_saturation
    vital_signs = Column(JSON, nullable=True)
    diagnosis = Column(Text, nullable=True)
    treatment = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    blood_type = Column(String(10), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    patient = relationship("User", foreign_keys=[patient_id])
    doctor = relationship("User", foreign_keys=[doctor_id])
    prescriptions = relationship("Prescription", secondary=medical_record_prescriptions)

    def __repr__(self):
        return f"<MedicalRecord(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id})>"
