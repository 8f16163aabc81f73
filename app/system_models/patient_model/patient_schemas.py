# app/system_models/patient_model/patient_schemas.py
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class PatientSummary(BaseModel):
    """Patient identity attached to a doctor's prescription list."""
    id: str
    name: str
    age: int

    model_config = ConfigDict(from_attributes=True)


class PatientDetail(PatientSummary):
    gender: Literal["male", "female", "other"]
    phone: Optional[str] = None
    medical_history: Optional[str] = ""
