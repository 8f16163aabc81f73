# app/prescription_engine/dependencies.py
from fastapi import Depends, Request

from app.draftsystem.draft_gateway import DraftGenerationGateway
from app.prescription_engine.lifecycle import PrescriptionLifecycleEngine


def get_draft_gateway(request: Request) -> DraftGenerationGateway:
    """The gateway built once in the application lifespan."""
    return request.app.state.draft_gateway


def get_lifecycle_engine(
    gateway: DraftGenerationGateway = Depends(get_draft_gateway),
) -> PrescriptionLifecycleEngine:
    return PrescriptionLifecycleEngine(gateway)
