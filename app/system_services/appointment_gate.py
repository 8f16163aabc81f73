# app/system_services/appointment_gate.py
"""
Appointment and patient lookups consumed by the prescription engine,
plus the doctor-side status update.
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.prescription_engine.errors import ConflictError, ForbiddenError, NotFoundError
from app.system_models.appointment_model.appointment_model import (
    TERMINAL_STATUSES,
    Appointment,
    AppointmentStatus,
)
from app.system_models.patient_model.patient_model import Patient
from app.users.identity import Actor, Role, require_doctor

logger = logging.getLogger(__name__)


async def get_appointment(db: AsyncSession, appointment_id: str) -> Appointment:
    result = await db.execute(select(Appointment).where(Appointment.id == appointment_id))
    appointment = result.scalar_one_or_none()
    if not appointment:
        raise NotFoundError("Appointment not found")
    return appointment


async def get_patient(db: AsyncSession, patient_id: str) -> Patient:
    result = await db.execute(select(Patient).where(Patient.id == patient_id))
    patient = result.scalar_one_or_none()
    if not patient:
        raise NotFoundError("Patient not found")
    return patient


async def get_appointment_for_actor(db: AsyncSession, appointment_id: str, actor: Actor) -> Appointment:
    """Appointment with patient and doctor loaded; visible to its own patient or doctor only."""
    result = await db.execute(
        select(Appointment)
        .options(selectinload(Appointment.patient), selectinload(Appointment.doctor))
        .where(Appointment.id == appointment_id)
    )
    appointment = result.scalar_one_or_none()
    if not appointment:
        raise NotFoundError("Appointment not found")

    match actor.role:
        case Role.PATIENT:
            allowed = appointment.patient_id == actor.actor_id
        case Role.DOCTOR:
            allowed = appointment.doctor_id == actor.actor_id
        case Role.ADMIN:
            allowed = False

    if not allowed:
        raise ForbiddenError("Access denied. You do not have permission to view this appointment.")
    return appointment


async def update_appointment_status(
    db: AsyncSession,
    appointment_id: str,
    actor: Actor,
    new_status: AppointmentStatus,
) -> Appointment:
    """
    Doctor changes the status of one of their own appointments.

    Cancelled and no-show appointments are final.
    """
    doctor_id = require_doctor(actor)
    appointment = await get_appointment(db, appointment_id)

    if appointment.doctor_id != doctor_id:
        raise ForbiddenError("Access denied. You can only update your own appointments.")

    if appointment.status in TERMINAL_STATUSES and appointment.status != new_status.value:
        raise ConflictError(f"Appointment is already {appointment.status} and cannot be changed")

    previous = appointment.status
    appointment.status = new_status.value
    await db.commit()

    result = await db.execute(
        select(Appointment)
        .options(selectinload(Appointment.patient), selectinload(Appointment.doctor))
        .where(Appointment.id == appointment_id)
        .execution_options(populate_existing=True)
    )
    appointment = result.scalar_one()
    logger.info(f"📅 Appointment {appointment_id}: {previous} -> {appointment.status} (doctor {doctor_id})")
    return appointment
