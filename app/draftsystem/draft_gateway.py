# app/draftsystem/draft_gateway.py
"""
Draft Generation Gateway
Wraps the LLM call that proposes a prescription and shields callers
from provider-specific failures: they only ever see DraftContent or
DraftGenerationError.
"""
import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from app.draftsystem.draft_normalizer import parse_draft_text
from app.draftsystem.errors import DraftFailureKind, DraftGenerationError
from app.draftsystem.llm_providers import get_chat_model
from app.draftsystem.schemas import DraftContent, PatientContext
from config.draftconfig import DraftSettings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a medical AI assistant helping doctors create prescription drafts.
Generate a structured prescription based on patient symptoms and medical history.
Include: diagnosis, medications with dosage, frequency, duration, and general advice.

CRITICAL: Respond ONLY with valid JSON (no markdown, no code blocks, no explanations):
{
  "diagnosis": "Primary diagnosis based on symptoms (be specific)",
  "medications": [
    {
      "name": "Generic medication name",
      "dosage": "Specific amount (e.g., 500mg, 10ml)",
      "frequency": "Exact timing (e.g., Every 8 hours, Twice daily after meals)",
      "duration": "Treatment period (e.g., 5-7 days, 2 weeks)"
    }
  ],
  "advice": "Lifestyle recommendations, precautions and warning signs to watch for",
  "followUp": "Specific follow-up recommendation"
}

Guidelines:
- Provide 1-3 appropriate medications based on symptoms
- Use generic medication names
- Be specific with dosages appropriate for age and condition
- Consider patient's age and medical history"""


def build_messages(patient_context: PatientContext, symptoms: str) -> List[BaseMessage]:
    user_prompt = f"""Patient Information:
- Age: {patient_context.age} years old
- Gender: {patient_context.gender}
- Medical History: {patient_context.medical_history}
- Current Symptoms: {symptoms}

Generate a prescription draft."""
    return [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=user_prompt)]


def message_text(response: Any) -> str:
    """Text of a chat response whose content may be a string or a list of parts."""
    content = getattr(response, "content", response)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return "" if content is None else str(content)


# ============================================================================
# UPSTREAM ERROR CLASSIFICATION
# ============================================================================
def _status_code(exc: BaseException) -> Optional[int]:
    for attr in ("status_code", "status", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def _error_code(exc: BaseException) -> str:
    code = getattr(exc, "code", None)
    if isinstance(code, str):
        return code.lower()
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        inner = body.get("error", body)
        if isinstance(inner, dict) and isinstance(inner.get("code"), str):
            return inner["code"].lower()
    return ""


def classify_upstream_error(exc: Optional[BaseException]) -> DraftFailureKind:
    """Map a provider exception onto the gateway's failure taxonomy."""
    if exc is None:
        return DraftFailureKind.GENERIC_FAILURE

    status = _status_code(exc)
    code = _error_code(exc)
    text = str(exc).lower()
    type_name = type(exc).__name__

    if code == "insufficient_quota" or "insufficient_quota" in text or "quota" in text:
        return DraftFailureKind.QUOTA_EXCEEDED
    if code == "invalid_api_key" or status in (401, 403, 404) or "api key" in text:
        return DraftFailureKind.INVALID_CONFIGURATION
    if status == 429:
        return DraftFailureKind.RATE_LIMITED
    if status is not None and status >= 500:
        return DraftFailureKind.UPSTREAM_UNAVAILABLE
    if isinstance(exc, (ConnectionError, TimeoutError, asyncio.TimeoutError)) or (
        "Connection" in type_name or "Timeout" in type_name
    ):
        return DraftFailureKind.UPSTREAM_UNAVAILABLE
    if isinstance(exc, json.JSONDecodeError) or "json" in text:
        return DraftFailureKind.MALFORMED_RESPONSE
    return DraftFailureKind.GENERIC_FAILURE


ChatModelFactory = Callable[[str, str, DraftSettings], Any]


class DraftGenerationGateway:
    """
    Stateless draft generator built once at startup.

    Candidate models are tried in order for a single request; the first
    success wins. No retries happen here; retry policy belongs to callers.
    """

    def __init__(
        self,
        draft_settings: DraftSettings,
        chat_model_factory: ChatModelFactory = get_chat_model,
    ):
        self.settings = draft_settings
        self.provider = draft_settings.LLM_PROVIDER
        self.candidate_models = draft_settings.candidate_models
        self.timeout_seconds = draft_settings.DRAFT_TIMEOUT_SECONDS
        self._chat_model_factory = chat_model_factory
        logger.info(
            f"🤖 Draft gateway initialized: {self.provider} -> {self.candidate_models} "
            f"(timeout {self.timeout_seconds}s)"
        )

    def describe(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "candidate_models": list(self.candidate_models),
            "temperature": self.settings.LLM_TEMPERATURE,
            "max_tokens": self.settings.MAX_TOKENS,
            "timeout_seconds": self.timeout_seconds,
        }

    async def generate_draft(self, patient_context: PatientContext, symptoms: str) -> DraftContent:
        """
        Produce a fully shaped draft for the patient and symptoms.

        Empty symptoms are a caller bug, not a generation failure: they raise
        ValueError before any model is contacted. Every failure after that point
        is reported as DraftGenerationError.

        Raises:
            ValueError: symptoms empty (precondition)
            DraftGenerationError: upstream failure, timeout, or unusable output
        """
        if not symptoms or not symptoms.strip():
            raise ValueError("symptoms must be a non-empty string")

        messages = build_messages(patient_context, symptoms.strip())
        logger.info(f"⚙️  Generating prescription draft with {self.provider}...")

        try:
            raw_text, model_used = await asyncio.wait_for(
                self._invoke_candidates(messages), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(f"⏱️  Draft generation timed out after {self.timeout_seconds}s")
            raise DraftGenerationError(
                DraftFailureKind.UPSTREAM_UNAVAILABLE,
                f"Timed out after {self.timeout_seconds}s",
            ) from None

        draft = parse_draft_text(raw_text, self.settings.FALLBACK_ADVICE_CHARS)
        logger.info(
            f"✅ Draft generated by {model_used}: {draft.diagnosis[:80]} "
            f"({len(draft.medications)} medications)"
        )
        return draft

    async def _invoke_candidates(self, messages: List[BaseMessage]) -> Tuple[str, str]:
        last_error: Optional[BaseException] = None

        for model_name in self.candidate_models:
            try:
                chat_model = self._chat_model_factory(self.provider, model_name, self.settings)
            except (ValueError, ImportError) as e:
                logger.error(f"❌ Cannot build {self.provider} model {model_name}: {e}")
                raise DraftGenerationError(DraftFailureKind.INVALID_CONFIGURATION, str(e)) from e

            try:
                response = await chat_model.ainvoke(messages)
            except Exception as e:
                # Provider SDKs each raise their own hierarchy; classify after the loop
                logger.warning(f"❌ Model {model_name} failed ({type(e).__name__}: {e}), trying next...")
                last_error = e
                continue

            logger.info(f"✅ Successfully used model: {model_name}")
            return message_text(response), model_name

        if last_error is None:
            raise DraftGenerationError(
                DraftFailureKind.INVALID_CONFIGURATION, "No candidate models configured"
            )

        kind = classify_upstream_error(last_error)
        logger.error(f"❌ All {self.provider} models failed; classified as {kind.value}")
        raise DraftGenerationError(kind, str(last_error)) from last_error
