# tests/test_draft_gateway.py
import json
from types import SimpleNamespace

import pytest

from app.draftsystem.draft_gateway import (
    DraftGenerationGateway,
    classify_upstream_error,
    message_text,
)
from app.draftsystem.errors import DraftFailureKind, DraftGenerationError
from app.draftsystem.schemas import PatientContext
from config.draftconfig import DraftSettings
from tests.fakes import (
    COMMON_COLD_DRAFT,
    FailingChatModel,
    RecordingChatModel,
    SlowChatModel,
    UpstreamError,
    build_gateway,
    failing_gateway,
)

CONTEXT = PatientContext(age=34, gender="male", medical_history="Seasonal allergies")
SYMPTOMS = "Runny nose, sneezing and mild sore throat"


# ============================================================================
# SUCCESS PATH
# ============================================================================
async def test_generate_draft_returns_shaped_draft():
    model = RecordingChatModel(json.dumps(COMMON_COLD_DRAFT))
    gateway = build_gateway({"primary": model})

    draft = await gateway.generate_draft(CONTEXT, SYMPTOMS)

    assert draft.diagnosis == "Common cold"
    assert draft.medications[0].dosage == "500mg"
    assert draft.to_document()["followUp"] == "5 days"


async def test_prompt_carries_patient_context_and_symptoms():
    model = RecordingChatModel(json.dumps(COMMON_COLD_DRAFT))
    gateway = build_gateway({"primary": model})
    context = PatientContext(age=61, gender="female", medical_history="")

    await gateway.generate_draft(context, f"  {SYMPTOMS}  ")

    system_message, user_message = model.calls[0]
    assert "valid JSON" in system_message.content
    assert "Age: 61 years old" in user_message.content
    assert "Medical History: None reported" in user_message.content
    assert f"Current Symptoms: {SYMPTOMS}\n" in user_message.content


async def test_fenced_output_is_accepted():
    fenced = "```json\n" + json.dumps(COMMON_COLD_DRAFT) + "\n```"
    gateway = build_gateway({"primary": RecordingChatModel(fenced)})

    draft = await gateway.generate_draft(CONTEXT, SYMPTOMS)

    assert draft.diagnosis == "Common cold"


@pytest.mark.parametrize("symptoms", ["", "   "])
async def test_empty_symptoms_rejected(symptoms):
    model = RecordingChatModel(json.dumps(COMMON_COLD_DRAFT))
    gateway = build_gateway({"primary": model})

    with pytest.raises(ValueError):
        await gateway.generate_draft(CONTEXT, symptoms)
    assert model.calls == []


# ============================================================================
# CANDIDATE MODELS
# ============================================================================
async def test_falls_back_to_next_candidate():
    first = FailingChatModel(UpstreamError("model overloaded", status_code=503))
    second = RecordingChatModel(json.dumps(COMMON_COLD_DRAFT))
    gateway = build_gateway({"first": first, "second": second})

    draft = await gateway.generate_draft(CONTEXT, SYMPTOMS)

    assert draft.diagnosis == "Common cold"
    assert first.calls == 1
    assert len(second.calls) == 1


async def test_first_success_short_circuits():
    first = RecordingChatModel(json.dumps(COMMON_COLD_DRAFT))
    second = FailingChatModel(UpstreamError("should not be called", status_code=500))
    gateway = build_gateway({"first": first, "second": second})

    await gateway.generate_draft(CONTEXT, SYMPTOMS)

    assert second.calls == 0


async def test_all_candidates_failing_reports_last_error():
    gateway = build_gateway(
        {
            "first": FailingChatModel(UpstreamError("slow down", status_code=429)),
            "second": FailingChatModel(UpstreamError("bad gateway", status_code=502)),
        }
    )

    with pytest.raises(DraftGenerationError) as exc_info:
        await gateway.generate_draft(CONTEXT, SYMPTOMS)

    assert exc_info.value.kind == DraftFailureKind.UPSTREAM_UNAVAILABLE
    assert exc_info.value.retryable


async def test_no_candidates_is_invalid_configuration():
    gateway = DraftGenerationGateway(
        DraftSettings(LLM_PROVIDER="openai", OPENAI_CANDIDATE_MODELS=[])
    )

    with pytest.raises(DraftGenerationError) as exc_info:
        await gateway.generate_draft(CONTEXT, SYMPTOMS)

    assert exc_info.value.kind == DraftFailureKind.INVALID_CONFIGURATION


async def test_missing_api_key_is_invalid_configuration():
    gateway = DraftGenerationGateway(
        DraftSettings(LLM_PROVIDER="openai", OPENAI_API_KEY="", OPENAI_CANDIDATE_MODELS=["gpt-4o-mini"])
    )

    with pytest.raises(DraftGenerationError) as exc_info:
        await gateway.generate_draft(CONTEXT, SYMPTOMS)

    assert exc_info.value.kind == DraftFailureKind.INVALID_CONFIGURATION
    assert "OPENAI_API_KEY" in exc_info.value.detail
    assert not exc_info.value.retryable


async def test_timeout_is_upstream_unavailable():
    gateway = build_gateway({"slow": SlowChatModel(delay=1.0)}, timeout=0.05)

    with pytest.raises(DraftGenerationError) as exc_info:
        await gateway.generate_draft(CONTEXT, SYMPTOMS)

    assert exc_info.value.kind == DraftFailureKind.UPSTREAM_UNAVAILABLE


async def test_unusable_output_is_malformed():
    gateway = build_gateway({"primary": RecordingChatModel(json.dumps({"error": "filtered"}))})

    with pytest.raises(DraftGenerationError) as exc_info:
        await gateway.generate_draft(CONTEXT, SYMPTOMS)

    assert exc_info.value.kind == DraftFailureKind.MALFORMED_RESPONSE


async def test_failure_message_is_user_facing():
    gateway = failing_gateway(UpstreamError("You exceeded your current quota", status_code=429))

    with pytest.raises(DraftGenerationError) as exc_info:
        await gateway.generate_draft(CONTEXT, SYMPTOMS)

    error = exc_info.value
    assert error.kind == DraftFailureKind.QUOTA_EXCEEDED
    assert error.message == "AI service quota exceeded. Please contact administrator."
    assert "exceeded your current quota" in error.detail


# ============================================================================
# ERROR CLASSIFICATION
# ============================================================================
@pytest.mark.parametrize(
    "error, expected",
    [
        (UpstreamError("no credits", code="insufficient_quota"), DraftFailureKind.QUOTA_EXCEEDED),
        (UpstreamError("Incorrect key", code="invalid_api_key"), DraftFailureKind.INVALID_CONFIGURATION),
        (UpstreamError("unauthorized", status_code=401), DraftFailureKind.INVALID_CONFIGURATION),
        (UpstreamError("model does not exist", status_code=404), DraftFailureKind.INVALID_CONFIGURATION),
        (UpstreamError("too many requests", status_code=429), DraftFailureKind.RATE_LIMITED),
        (UpstreamError("internal error", status_code=500), DraftFailureKind.UPSTREAM_UNAVAILABLE),
        (UpstreamError("overloaded", status_code=503), DraftFailureKind.UPSTREAM_UNAVAILABLE),
        (ConnectionError("connection refused"), DraftFailureKind.UPSTREAM_UNAVAILABLE),
        (TimeoutError("read timed out"), DraftFailureKind.UPSTREAM_UNAVAILABLE),
        (ValueError("could not parse JSON from model"), DraftFailureKind.MALFORMED_RESPONSE),
        (RuntimeError("something odd"), DraftFailureKind.GENERIC_FAILURE),
    ],
)
def test_classify_upstream_error(error, expected):
    assert classify_upstream_error(error) == expected


def test_status_on_response_object_is_used():
    error = UpstreamError("service unavailable")
    error.response = SimpleNamespace(status_code=503)

    assert classify_upstream_error(error) == DraftFailureKind.UPSTREAM_UNAVAILABLE


# ============================================================================
# RESPONSE TEXT
# ============================================================================
def test_message_text_joins_text_parts():
    response = SimpleNamespace(
        content=[
            {"type": "text", "text": '{"diagnosis": '},
            {"type": "image_url", "image_url": "ignored"},
            '"Flu"}',
        ]
    )
    assert message_text(response) == '{"diagnosis": "Flu"}'


def test_message_text_plain_string():
    assert message_text(SimpleNamespace(content="hello")) == "hello"


# ============================================================================
# MOCK PROVIDER
# ============================================================================
async def test_mock_provider_matches_keywords():
    gateway = DraftGenerationGateway(DraftSettings(LLM_PROVIDER="mock"))

    draft = await gateway.generate_draft(CONTEXT, "High fever and chills since yesterday")

    assert draft.diagnosis.startswith("Fever - Possible viral infection")
    assert "High fever and chills" in draft.diagnosis
    assert draft.medications[0].name == "Paracetamol"
    assert "MOCK PRESCRIPTION" in draft.advice


async def test_mock_provider_default_rule():
    gateway = DraftGenerationGateway(DraftSettings(LLM_PROVIDER="mock"))

    draft = await gateway.generate_draft(CONTEXT, "Feeling tired and dizzy in the mornings")

    assert draft.diagnosis.startswith("General symptoms requiring evaluation")


def test_describe_reports_active_configuration():
    gateway = DraftGenerationGateway(DraftSettings(LLM_PROVIDER="mock", DRAFT_TIMEOUT_SECONDS=12))

    assert gateway.describe() == {
        "provider": "mock",
        "candidate_models": ["keyword-mock"],
        "temperature": 0.7,
        "max_tokens": 1000,
        "timeout_seconds": 12.0,
    }
