# tests/test_identity.py
from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from app.prescription_engine.errors import ForbiddenError
from app.users.auth_dependencies import get_current_actor
from app.users.identity import Actor, Role, authorize, require_doctor, require_patient
from app.users.security import create_access_token, decode_token
from config.appconfig import settings
from tests.conftest import ADMIN, DOCTOR, PATIENT


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


# ============================================================================
# ROLE CHECKS
# ============================================================================
def test_authorize_allowed_role_returns_actor_id():
    assert authorize(DOCTOR, Role.DOCTOR) == "doc1"
    assert authorize(ADMIN, Role.DOCTOR, Role.ADMIN) == "admin1"


@pytest.mark.parametrize("actor", [PATIENT, ADMIN])
def test_require_doctor_rejects_other_roles(actor):
    with pytest.raises(ForbiddenError) as exc_info:
        require_doctor(actor)
    assert exc_info.value.status_code == 403


def test_require_patient():
    assert require_patient(PATIENT) == "pat1"
    with pytest.raises(ForbiddenError):
        require_patient(DOCTOR)


def test_authorize_with_no_allowed_roles_forbids_everyone():
    for role in Role:
        with pytest.raises(ForbiddenError):
            authorize(Actor(actor_id="x", role=role))


# ============================================================================
# TOKENS
# ============================================================================
def test_token_round_trip():
    payload = decode_token(create_access_token("doc1", Role.DOCTOR))

    assert payload["sub"] == "doc1"
    assert payload["role"] == "doctor"
    assert payload["type"] == "access"


def test_expired_token_does_not_decode():
    token = create_access_token("doc1", Role.DOCTOR, expires_delta=timedelta(minutes=-5))
    assert decode_token(token) is None


def test_token_signed_with_other_key_does_not_decode():
    token = jwt.encode({"sub": "doc1", "role": "doctor", "type": "access"}, "not-the-key", algorithm="HS256")
    assert decode_token(token) is None


# ============================================================================
# CURRENT ACTOR
# ============================================================================
async def test_current_actor_from_valid_token():
    actor = await get_current_actor(_bearer(create_access_token("pat1", Role.PATIENT)))
    assert actor == Actor(actor_id="pat1", role=Role.PATIENT)


async def test_missing_credentials_unauthorized():
    with pytest.raises(HTTPException) as exc_info:
        await get_current_actor(None)
    assert exc_info.value.status_code == 401


@pytest.mark.parametrize(
    "claims",
    [
        {"sub": "doc1", "role": "doctor", "type": "refresh"},
        {"role": "doctor", "type": "access"},
        {"sub": "doc1", "role": "nurse", "type": "access"},
        {"sub": "doc1", "type": "access"},
    ],
)
async def test_bad_claims_unauthorized(claims):
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    with pytest.raises(HTTPException) as exc_info:
        await get_current_actor(_bearer(token))
    assert exc_info.value.status_code == 401


async def test_garbage_token_unauthorized():
    with pytest.raises(HTTPException) as exc_info:
        await get_current_actor(_bearer("not-a-jwt"))
    assert exc_info.value.status_code == 401
