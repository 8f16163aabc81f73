# app/system_models/prescription_model/prescription_schemas.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.draftsystem.schemas import DraftContent
from app.system_models.doctor_model.doctor_schemas import DoctorSummary
from app.system_models.patient_model.patient_schemas import PatientSummary
from app.system_models.prescription_model.prescription_model import PrescriptionStatus


# ============================================================================
# REQUESTS
# ============================================================================
class DraftRequest(BaseModel):
    appointment_id: str = Field(..., min_length=1)
    symptoms: Optional[str] = Field(None, min_length=10, max_length=1000)
    medical_history: Optional[str] = Field(None, max_length=2000)

    @field_validator("symptoms", "medical_history", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class ApprovalRequest(BaseModel):
    # Emptiness is checked by the engine so it reports a validation failure
    final_prescription: str = Field(..., max_length=5000)
    notes: Optional[str] = Field(None, max_length=1000)


# ============================================================================
# RESPONSES
# ============================================================================
class PrescriptionResponse(BaseModel):
    id: str
    patient_id: str
    doctor_id: str
    appointment_id: str
    ai_draft: DraftContent
    final_prescription: str = ""
    status: PrescriptionStatus
    version: int
    last_edited_by: Optional[str] = None
    last_edited_at: Optional[datetime] = None
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PatientPrescriptionResponse(BaseModel):
    """Approved prescription as a patient sees it."""
    id: str
    doctor: DoctorSummary
    final_prescription: str
    notes: str = ""
    version: int
    approved_at: Optional[datetime] = Field(None, validation_alias="last_edited_at")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DoctorPrescriptionResponse(PrescriptionResponse):
    patient: Optional[PatientSummary] = None
