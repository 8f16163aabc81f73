# app/system_models/prescription_model/prescription_model.py
from enum import Enum
from uuid import uuid4

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from app.database.connection import Base
from app.draftsystem.schemas import DraftContent
from app.helpers.time import utcnow


class PrescriptionStatus(str, Enum):
    DRAFT = "draft"
    APPROVED = "approved"
    # Reserved: no operation transitions into it yet
    REJECTED = "rejected"


class Prescription(Base):
    __tablename__ = "prescriptions"

    id = Column(String(36), primary_key=True, default=lambda: uuid4().hex)
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=False)
    doctor_id = Column(String(36), ForeignKey("doctors.id"), nullable=False)
    # One prescription per appointment; the unique index is the create-if-absent guard
    appointment_id = Column(String(36), ForeignKey("appointments.id"), nullable=False, unique=True)

    ai_draft = Column(JSON, nullable=False)
    final_prescription = Column(Text, nullable=False, default="")
    status = Column(String, nullable=False, default=PrescriptionStatus.DRAFT.value)
    version = Column(Integer, nullable=False, default=1)
    last_edited_by = Column(String(36), ForeignKey("doctors.id"), nullable=True)
    last_edited_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("status IN ('draft', 'approved', 'rejected')", name="check_prescription_status_values"),
        CheckConstraint("version >= 1", name="check_prescription_version_positive"),
        Index("ix_prescriptions_patient_created", "patient_id", "created_at"),
        Index("ix_prescriptions_doctor_status", "doctor_id", "status"),
    )

    patient = relationship("Patient", back_populates="prescriptions")
    doctor = relationship("Doctor", back_populates="prescriptions", foreign_keys=[doctor_id])

    @property
    def draft(self) -> DraftContent:
        """The stored AI draft as its typed value."""
        return DraftContent.model_validate(self.ai_draft)

    def __repr__(self):
        return f"<Prescription {self.id}: appointment={self.appointment_id} [{self.status} v{self.version}]>"
