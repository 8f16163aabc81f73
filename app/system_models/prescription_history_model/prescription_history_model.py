# app/system_models/prescription_history_model/prescription_history_model.py
from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from app.database.connection import Base
from app.helpers.time import utcnow

DEFAULT_CHANGE_DESCRIPTION = "Prescription approved"


class PrescriptionHistory(Base):
    """Append-only: rows are inserted by the lifecycle engine and never updated."""

    __tablename__ = "prescription_history"

    id = Column(String(36), primary_key=True, default=lambda: uuid4().hex)
    prescription_id = Column(String(36), ForeignKey("prescriptions.id"), nullable=False)
    edited_by = Column(String(36), ForeignKey("doctors.id"), nullable=False)
    edited_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    old_version = Column(Text, nullable=False)
    new_version = Column(Text, nullable=False)
    # The prescription version being superseded
    version_number = Column(Integer, nullable=False)
    change_description = Column(Text, nullable=False, default=DEFAULT_CHANGE_DESCRIPTION)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        CheckConstraint("version_number >= 1", name="check_history_version_positive"),
        Index("ix_prescription_history_prescription_edited", "prescription_id", "edited_at"),
    )

    prescription = relationship("Prescription")
    editor = relationship("Doctor")

    def __repr__(self):
        return f"<PrescriptionHistory {self.id}: {self.prescription_id} v{self.version_number}>"
