# config/reset_config_route.py
from fastapi import APIRouter, Depends, Request

from app.draftsystem.draft_gateway import DraftGenerationGateway
from app.prescription_engine.dependencies import get_draft_gateway
from app.users.auth_dependencies import get_current_actor
from app.users.identity import Actor, Role, authorize
from config.draftconfig import DraftSettings

router = APIRouter(tags=["admin"])


@router.get("/draft-config")
async def get_draft_config(
    gateway: DraftGenerationGateway = Depends(get_draft_gateway),
    actor: Actor = Depends(get_current_actor),
):
    """Active draft provider, candidate models and limits. Admin-only."""
    authorize(actor, Role.ADMIN)
    return gateway.describe()


@router.post("/admin/reset-draft-config")
async def reset_draft_config(
    request: Request,
    actor: Actor = Depends(get_current_actor),
):
    """
    Reload draft settings from the environment and rebuild the gateway.
    Admin-only operation.
    """
    authorize(actor, Role.ADMIN)
    request.app.state.draft_gateway = DraftGenerationGateway(DraftSettings())

    return {
        "message": "Draft config reset to defaults",
        "reset_by": actor.actor_id,
        "config": request.app.state.draft_gateway.describe(),
    }
