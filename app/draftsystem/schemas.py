# app/draftsystem/schemas.py
"""
Draft Generation Schemas
The fixed shape every prescription draft has, whatever the model returned
"""
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

NOT_SPECIFIED = "Not specified"
DEFAULT_ADVICE = "Follow general health guidelines"
DEFAULT_FOLLOW_UP = "Schedule follow-up as needed"


# ============================================================================
# GATEWAY INPUT
# ============================================================================
class PatientContext(BaseModel):
    """Patient facts the draft is generated from."""
    age: int = Field(..., ge=0)
    gender: str
    medical_history: str = "None reported"

    @field_validator("medical_history", mode="before")
    @classmethod
    def default_history(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return "None reported"
        return v


# ============================================================================
# GATEWAY OUTPUT
# ============================================================================
class Medication(BaseModel):
    name: str = NOT_SPECIFIED
    dosage: str = NOT_SPECIFIED
    frequency: str = NOT_SPECIFIED
    duration: str = NOT_SPECIFIED


class DraftContent(BaseModel):
    """Structured prescription proposal returned by the gateway."""
    diagnosis: str = NOT_SPECIFIED
    medications: List[Medication] = Field(default_factory=list)
    advice: str = DEFAULT_ADVICE
    follow_up: str = Field(DEFAULT_FOLLOW_UP, alias="followUp")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "diagnosis": "Common cold",
                "medications": [
                    {
                        "name": "Paracetamol",
                        "dosage": "500mg",
                        "frequency": "Twice daily",
                        "duration": "5 days",
                    }
                ],
                "advice": "Rest",
                "followUp": "5 days",
            }
        },
    )

    def to_document(self) -> dict:
        """JSON-compatible form stored on the prescription and sent to clients."""
        return self.model_dump(by_alias=True)
