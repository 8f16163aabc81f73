# app/draftsystem/draft_normalizer.py
"""
Draft Normalization Layer
Turns whatever the model wrote into a fully shaped DraftContent
"""
import json
import logging
import re
from typing import Any, Dict, List

from app.draftsystem.errors import DraftFailureKind, DraftGenerationError
from app.draftsystem.schemas import (
    DEFAULT_ADVICE,
    DEFAULT_FOLLOW_UP,
    NOT_SPECIFIED,
    DraftContent,
    Medication,
)

logger = logging.getLogger(__name__)

DRAFT_FIELDS = ("diagnosis", "medications", "advice", "followUp", "follow_up")

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*\n?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences models like to wrap JSON in."""
    return _FENCE_PATTERN.sub("", text).strip()


def _text_field(value: Any, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str):
        value = json.dumps(value) if isinstance(value, (dict, list)) else str(value)
    value = value.strip()
    return value or default


def normalize_medication(item: Any) -> Medication:
    """
    Normalize one medication entry.

    Bare strings become the medication name; missing fields are "Not specified".
    """
    if not isinstance(item, dict):
        return Medication(name=_text_field(item, NOT_SPECIFIED))

    return Medication(
        name=_text_field(item.get("name") or item.get("drug"), NOT_SPECIFIED),
        dosage=_text_field(item.get("dosage") or item.get("dose"), NOT_SPECIFIED),
        frequency=_text_field(item.get("frequency"), NOT_SPECIFIED),
        duration=_text_field(item.get("duration"), NOT_SPECIFIED),
    )


def normalize_medications(value: Any) -> List[Medication]:
    if not isinstance(value, list):
        return []
    return [normalize_medication(item) for item in value]


def normalize_draft(raw_data: Dict[str, Any]) -> DraftContent:
    """Fill every missing field with its safe default."""
    return DraftContent(
        diagnosis=_text_field(raw_data.get("diagnosis"), NOT_SPECIFIED),
        medications=normalize_medications(raw_data.get("medications")),
        advice=_text_field(raw_data.get("advice"), DEFAULT_ADVICE),
        follow_up=_text_field(
            raw_data.get("followUp", raw_data.get("follow_up")), DEFAULT_FOLLOW_UP
        ),
    )


def fallback_draft(raw_text: str, advice_chars: int = 500) -> DraftContent:
    """Best-effort draft used when the model answered in prose instead of JSON."""
    return DraftContent(
        diagnosis="AI-generated diagnosis",
        medications=[
            Medication(
                name="Please review AI response",
                dosage="N/A",
                frequency="N/A",
                duration="N/A",
            )
        ],
        advice=raw_text[:advice_chars],
        follow_up="Please review with patient",
    )


def parse_draft_text(raw_text: str, advice_chars: int = 500) -> DraftContent:
    """
    Parse model output into a DraftContent.

    Soft failures (prose instead of JSON) fall back to `fallback_draft`.
    Hard failures raise DraftGenerationError(MALFORMED_RESPONSE):
    - empty output
    - a JSON value that is not an object
    - an object carrying none of the draft fields
    """
    cleaned = strip_code_fences(raw_text or "")
    if not cleaned:
        raise DraftGenerationError(DraftFailureKind.MALFORMED_RESPONSE, "Empty model output")

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning(f"⚠️  Model output is not JSON, using text fallback ({len(cleaned)} chars)")
        return fallback_draft(cleaned, advice_chars)

    if not isinstance(parsed, dict):
        raise DraftGenerationError(
            DraftFailureKind.MALFORMED_RESPONSE,
            f"Expected a JSON object, got {type(parsed).__name__}",
        )

    if not any(field in parsed for field in DRAFT_FIELDS):
        raise DraftGenerationError(
            DraftFailureKind.MALFORMED_RESPONSE,
            f"No draft fields in model output (keys: {sorted(parsed)[:10]})",
        )

    return normalize_draft(parsed)
