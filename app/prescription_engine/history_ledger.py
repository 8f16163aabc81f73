# app/prescription_engine/history_ledger.py
"""
Prescription History Ledger
Append-only record of every approval. Only the lifecycle engine writes here.
"""
import json
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.system_models.prescription_history_model.prescription_history_model import (
    DEFAULT_CHANGE_DESCRIPTION,
    PrescriptionHistory,
)
from app.system_models.prescription_model.prescription_model import Prescription

logger = logging.getLogger(__name__)


def serialize_draft(ai_draft: dict) -> str:
    """Text snapshot of a stored draft, as kept in history rows."""
    return json.dumps(ai_draft, indent=2, ensure_ascii=False)


def build_entry(
    prescription: Prescription,
    editor_id: str,
    new_text: str,
    edited_at: datetime,
    notes: Optional[str] = None,
) -> PrescriptionHistory:
    """
    History row for the transition away from the prescription's current version.

    old_version is the current final text, or the AI draft before the first approval.
    """
    old_text = prescription.final_prescription or serialize_draft(prescription.ai_draft)
    return PrescriptionHistory(
        prescription_id=prescription.id,
        edited_by=editor_id,
        edited_at=edited_at,
        old_version=old_text,
        new_version=new_text,
        version_number=prescription.version,
        change_description=notes or DEFAULT_CHANGE_DESCRIPTION,
    )


async def append(db: AsyncSession, entry: PrescriptionHistory) -> PrescriptionHistory:
    """Stage and flush a history row inside the caller's transaction."""
    db.add(entry)
    await db.flush()
    logger.info(
        f"📝 History row {entry.id} written for prescription {entry.prescription_id} "
        f"(superseding v{entry.version_number})"
    )
    return entry


async def list_for_prescription(db: AsyncSession, prescription_id: str) -> List[PrescriptionHistory]:
    """Newest first, with the editing doctor loaded."""
    result = await db.execute(
        select(PrescriptionHistory)
        .options(selectinload(PrescriptionHistory.editor))
        .where(PrescriptionHistory.prescription_id == prescription_id)
        .order_by(PrescriptionHistory.edited_at.desc(), PrescriptionHistory.version_number.desc())
    )
    return list(result.scalars().all())


async def count_for_prescription(db: AsyncSession, prescription_id: str) -> int:
    result = await db.execute(
        select(func.count(PrescriptionHistory.id)).where(
            PrescriptionHistory.prescription_id == prescription_id
        )
    )
    return int(result.scalar_one())


async def find_orphaned_history(db: AsyncSession) -> Sequence[PrescriptionHistory]:
    """
    History rows with no matching prescription transition.

    A row superseding version N requires the prescription to be at N+1 or later.
    """
    result = await db.execute(
        select(PrescriptionHistory)
        .join(Prescription, Prescription.id == PrescriptionHistory.prescription_id)
        .where(PrescriptionHistory.version_number + 1 > Prescription.version)
        .order_by(PrescriptionHistory.edited_at)
    )
    orphans = result.scalars().all()
    if orphans:
        logger.warning(f"⚠️  Found {len(orphans)} history rows without a committed prescription update")
    return orphans
