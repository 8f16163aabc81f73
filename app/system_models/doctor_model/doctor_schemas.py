# app/system_models/doctor_model/doctor_schemas.py
from pydantic import BaseModel, ConfigDict


class DoctorSummary(BaseModel):
    """Doctor identity attached to prescriptions shown to patients."""
    id: str
    name: str
    specialization: str

    model_config = ConfigDict(from_attributes=True)


class EditorSummary(BaseModel):
    """Display name of the doctor who wrote a history entry."""
    name: str

    model_config = ConfigDict(from_attributes=True)
