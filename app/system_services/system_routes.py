# app/system_services/system_routes.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.connection import get_db
from app.system_models.appointment_model.appointment_schemas import (
    AppointmentDetailResponse,
    AppointmentStatusUpdate,
)
from app.system_services.appointment_gate import get_appointment_for_actor, update_appointment_status
from app.users.auth_dependencies import get_current_actor
from app.users.identity import Actor

router = APIRouter()


@router.get("/appointments/{appointment_id}", response_model=AppointmentDetailResponse)
async def get_appointment_endpoint(
    appointment_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Appointment with patient and doctor details, for its own patient or doctor."""
    return await get_appointment_for_actor(db, appointment_id, actor)


@router.put("/appointments/{appointment_id}/status", response_model=AppointmentDetailResponse)
async def update_appointment_status_endpoint(
    appointment_id: str,
    update: AppointmentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Doctor updates the status of one of their own appointments."""
    return await update_appointment_status(db, appointment_id, actor, update.status)
