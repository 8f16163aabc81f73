# app/prescription_engine/lifecycle.py
"""
Prescription Lifecycle Engine

Sole writer of prescriptions and their history:
1. create_draft  - AI draft for an appointment (status=draft, version=1)
2. approve       - doctor's final text (status=approved, version+1, history row)
3. list_for_patient / list_for_doctor / get_history - read side
"""
import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.draftsystem.draft_gateway import DraftGenerationGateway
from app.draftsystem.errors import DraftGenerationError
from app.draftsystem.schemas import PatientContext
from app.helpers.time import utcnow
from app.prescription_engine import history_ledger
from app.prescription_engine.errors import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UpstreamFailureError,
)
from app.system_models.appointment_model.appointment_model import TERMINAL_STATUSES
from app.system_models.prescription_history_model.prescription_history_model import PrescriptionHistory
from app.system_models.prescription_model.prescription_model import Prescription, PrescriptionStatus
from app.system_services.appointment_gate import get_appointment, get_patient
from app.users.identity import Actor, require_doctor

logger = logging.getLogger(__name__)

ALREADY_EXISTS_MESSAGE = "Prescription already exists for this appointment"
GENERATION_FAILED_MESSAGE = "Prescription generation failed, try again or create manually"


class PrescriptionLifecycleEngine:
    """
    Owns every state transition of a prescription.

    States: draft -> approved. `rejected` is reserved and never entered.
    Uniqueness per appointment relies on the unique index on appointment_id;
    approval relies on a conditional update guarded by (status, version).
    """

    def __init__(self, gateway: DraftGenerationGateway):
        self.gateway = gateway

    # ========================================================================
    # CREATE DRAFT
    # ========================================================================
    async def create_draft(
        self,
        db: AsyncSession,
        appointment_id: str,
        actor: Actor,
        symptoms: Optional[str] = None,
        medical_history: Optional[str] = None,
    ) -> Prescription:
        doctor_id = require_doctor(actor)

        appointment = await get_appointment(db, appointment_id)
        if appointment.doctor_id != doctor_id:
            raise ForbiddenError(
                "Access denied. You are not authorized to create prescription for this appointment."
            )
        if appointment.status in TERMINAL_STATUSES:
            raise ConflictError(f"Cannot create prescription for a {appointment.status} appointment")

        if await self._find_by_appointment(db, appointment_id) is not None:
            raise ConflictError(ALREADY_EXISTS_MESSAGE)

        patient = await get_patient(db, appointment.patient_id)

        effective_symptoms = (symptoms or "").strip() or (appointment.symptoms or "").strip()
        if not effective_symptoms:
            raise InvalidInputError("Symptoms are required to generate a prescription draft")

        patient_id = appointment.patient_id
        context = PatientContext(
            age=patient.age,
            gender=patient.gender,
            medical_history=medical_history or patient.medical_history or "None reported",
        )
        # End the read transaction; the upstream call may take a while
        await db.commit()

        try:
            draft = await self.gateway.generate_draft(context, effective_symptoms)
        except DraftGenerationError as e:
            logger.warning(
                f"⚠️  Draft generation failed for appointment {appointment_id}: "
                f"{e.kind.value} ({e.detail})"
            )
            raise UpstreamFailureError(
                GENERATION_FAILED_MESSAGE, reason=e.kind.value, cause=e.message
            ) from e

        prescription = Prescription(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_id=appointment_id,
            ai_draft=draft.to_document(),
            final_prescription="",
            status=PrescriptionStatus.DRAFT.value,
            version=1,
            notes="",
        )
        db.add(prescription)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            # Lost the race against a concurrent draft for the same appointment
            if await self._find_by_appointment(db, appointment_id) is not None:
                logger.warning(f"⚠️  Concurrent draft for appointment {appointment_id} rejected")
                raise ConflictError(ALREADY_EXISTS_MESSAGE) from e
            raise

        logger.info(
            f"✅ Draft prescription {prescription.id} created for appointment {appointment_id} "
            f"by doctor {doctor_id}"
        )
        return prescription

    # ========================================================================
    # APPROVE
    # ========================================================================
    async def approve(
        self,
        db: AsyncSession,
        prescription_id: str,
        actor: Actor,
        final_prescription: str,
        notes: Optional[str] = None,
    ) -> Prescription:
        doctor_id = require_doctor(actor)

        prescription = await self._get_prescription(db, prescription_id)
        if prescription.doctor_id != doctor_id:
            raise ForbiddenError("Access denied. You are not authorized to approve this prescription.")

        match PrescriptionStatus(prescription.status):
            case PrescriptionStatus.DRAFT:
                pass
            case PrescriptionStatus.APPROVED:
                raise ConflictError("Prescription is already approved")
            case PrescriptionStatus.REJECTED:
                raise ConflictError("Prescription was rejected and cannot be approved")

        final_text = (final_prescription or "").strip()
        if not final_text:
            raise InvalidInputError("Prescription content cannot be empty")

        return await self._commit_approval(db, prescription, doctor_id, final_text, notes)

    async def _commit_approval(
        self,
        db: AsyncSession,
        prescription: Prescription,
        doctor_id: str,
        final_text: str,
        notes: Optional[str],
    ) -> Prescription:
        """
        Write the history row, then the guarded update, in one transaction.

        The update only matches while the row is still a draft at the version
        that was read; otherwise another approval won and this one is a conflict.
        """
        now = utcnow()
        # Plain values; a rollback expires every instance in the session
        prescription_id = prescription.id
        expected_version = prescription.version
        entry = history_ledger.build_entry(prescription, doctor_id, final_text, now, notes)

        await history_ledger.append(db, entry)
        result = await db.execute(
            update(Prescription)
            .where(
                Prescription.id == prescription_id,
                Prescription.status == PrescriptionStatus.DRAFT.value,
                Prescription.version == expected_version,
            )
            .values(
                final_prescription=final_text,
                status=PrescriptionStatus.APPROVED.value,
                version=Prescription.version + 1,
                last_edited_by=doctor_id,
                last_edited_at=now,
                notes=notes or "",
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db.rollback()
            logger.warning(
                f"⚠️  Approval of prescription {prescription_id} lost a concurrent update "
                f"(expected draft v{expected_version})"
            )
            raise ConflictError("Prescription was modified by another request; reload and try again")

        await db.commit()
        await db.refresh(prescription)
        logger.info(
            f"✅ Prescription {prescription_id} approved by doctor {doctor_id}: "
            f"v{expected_version} -> v{prescription.version}"
        )
        return prescription

    # ========================================================================
    # READ SIDE
    # ========================================================================
    async def list_for_patient(self, db: AsyncSession, patient_id: str) -> List[Prescription]:
        """Approved prescriptions with the prescribing doctor, latest approval first."""
        result = await db.execute(
            select(Prescription)
            .options(selectinload(Prescription.doctor))
            .where(
                Prescription.patient_id == patient_id,
                Prescription.status == PrescriptionStatus.APPROVED.value,
            )
            .order_by(Prescription.last_edited_at.desc(), Prescription.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_doctor(self, db: AsyncSession, doctor_id: str) -> List[Prescription]:
        """Every prescription of the doctor, any status, newest first."""
        result = await db.execute(
            select(Prescription)
            .options(selectinload(Prescription.patient))
            .where(Prescription.doctor_id == doctor_id)
            .order_by(Prescription.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_history(
        self, db: AsyncSession, prescription_id: str, actor: Actor
    ) -> List[PrescriptionHistory]:
        doctor_id = require_doctor(actor)

        prescription = await self._get_prescription(db, prescription_id)
        if prescription.doctor_id != doctor_id:
            raise ForbiddenError(
                "Access denied. You are not authorized to view this prescription history."
            )
        return await history_ledger.list_for_prescription(db, prescription_id)

    # ========================================================================
    # HELPERS
    # ========================================================================
    async def _get_prescription(self, db: AsyncSession, prescription_id: str) -> Prescription:
        result = await db.execute(
            select(Prescription)
            .where(Prescription.id == prescription_id)
            .execution_options(populate_existing=True)
        )
        prescription = result.scalar_one_or_none()
        if not prescription:
            raise NotFoundError("Prescription not found")
        return prescription

    async def _find_by_appointment(self, db: AsyncSession, appointment_id: str) -> Optional[Prescription]:
        result = await db.execute(
            select(Prescription).where(Prescription.appointment_id == appointment_id)
        )
        return result.scalar_one_or_none()
