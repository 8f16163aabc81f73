# app/prescription_engine/routes.py
"""
Prescription Routes
Thin HTTP layer; every rule lives in PrescriptionLifecycleEngine
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.connection import get_db
from app.prescription_engine.dependencies import get_lifecycle_engine
from app.prescription_engine.lifecycle import PrescriptionLifecycleEngine
from app.system_models.prescription_history_model.prescription_history_schemas import (
    PrescriptionHistoryEntry,
)
from app.system_models.prescription_model.prescription_schemas import (
    ApprovalRequest,
    DoctorPrescriptionResponse,
    DraftRequest,
    PatientPrescriptionResponse,
    PrescriptionResponse,
)
from app.users.auth_dependencies import get_current_actor
from app.users.identity import Actor, require_doctor, require_patient

router = APIRouter()


@router.post("/ai-draft", response_model=PrescriptionResponse, status_code=status.HTTP_201_CREATED)
async def generate_ai_draft(
    request: DraftRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PrescriptionLifecycleEngine = Depends(get_lifecycle_engine),
):
    """
    Generate an AI prescription draft for one of the doctor's appointments.

    **Request Body:**
    ```json
    {
        "appointment_id": "apt1",
        "symptoms": "Fever and dry cough for three days",
        "medical_history": "No known allergies"
    }
    ```
    `symptoms` and `medical_history` override the appointment and patient record.
    """
    return await engine.create_draft(
        db,
        request.appointment_id,
        actor,
        symptoms=request.symptoms,
        medical_history=request.medical_history,
    )


@router.put("/approve/{prescription_id}", response_model=PrescriptionResponse)
async def approve_prescription(
    prescription_id: str,
    request: ApprovalRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PrescriptionLifecycleEngine = Depends(get_lifecycle_engine),
):
    """Approve a draft with the doctor's final text; bumps the version and records history."""
    return await engine.approve(
        db, prescription_id, actor, request.final_prescription, notes=request.notes
    )


@router.get("/patient", response_model=List[PatientPrescriptionResponse])
async def get_patient_prescriptions(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PrescriptionLifecycleEngine = Depends(get_lifecycle_engine),
):
    patient_id = require_patient(actor)
    return await engine.list_for_patient(db, patient_id)


@router.get("/doctor", response_model=List[DoctorPrescriptionResponse])
async def get_doctor_prescriptions(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PrescriptionLifecycleEngine = Depends(get_lifecycle_engine),
):
    doctor_id = require_doctor(actor)
    return await engine.list_for_doctor(db, doctor_id)


@router.get("/{prescription_id}/history", response_model=List[PrescriptionHistoryEntry])
async def get_prescription_history(
    prescription_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PrescriptionLifecycleEngine = Depends(get_lifecycle_engine),
):
    return await engine.get_history(db, prescription_id, actor)
