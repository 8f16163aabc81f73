# app/users/identity.py
"""
Authenticated actor and role checks.
Roles are a closed set; every check matches them exhaustively.
"""
from dataclasses import dataclass
from enum import Enum

from app.prescription_engine.errors import ForbiddenError


class Role(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """Verified (actor_id, role) pair attached to every request."""
    actor_id: str
    role: Role


def authorize(actor: Actor, *allowed: Role) -> str:
    """
    Return the actor id if the actor's role is one of `allowed`.

    Raises ForbiddenError otherwise.
    """
    match actor.role:
        case Role.PATIENT | Role.DOCTOR | Role.ADMIN if actor.role in allowed:
            return actor.actor_id
        case Role.PATIENT | Role.DOCTOR | Role.ADMIN:
            raise ForbiddenError("Access denied. Insufficient permissions.")
        case _:
            raise ForbiddenError(f"Access denied. Unknown role: {actor.role!r}")


def require_doctor(actor: Actor) -> str:
    return authorize(actor, Role.DOCTOR)


def require_patient(actor: Actor) -> str:
    return authorize(actor, Role.PATIENT)
