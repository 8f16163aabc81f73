# app/system_models/prescription_history_model/prescription_history_schemas.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.system_models.doctor_model.doctor_schemas import EditorSummary


class PrescriptionHistoryEntry(BaseModel):
    id: str
    version_number: int
    edited_by: Optional[EditorSummary] = Field(None, validation_alias="editor")
    edited_at: datetime
    old_version: str
    new_version: str
    change_description: str

    model_config = ConfigDict(from_attributes=True)
