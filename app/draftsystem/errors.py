# app/draftsystem/errors.py
"""
Draft generation failure taxonomy
"""
from enum import Enum
from typing import Optional


class DraftFailureKind(str, Enum):
    QUOTA_EXCEEDED = "quota_exceeded"
    INVALID_CONFIGURATION = "invalid_configuration"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    MALFORMED_RESPONSE = "malformed_response"
    GENERIC_FAILURE = "generic_failure"


FAILURE_MESSAGES = {
    DraftFailureKind.QUOTA_EXCEEDED: "AI service quota exceeded. Please contact administrator.",
    DraftFailureKind.INVALID_CONFIGURATION: "AI service configuration error. Please contact administrator.",
    DraftFailureKind.RATE_LIMITED: "AI service is currently busy. Please try again in a moment.",
    DraftFailureKind.UPSTREAM_UNAVAILABLE: "AI service is temporarily unavailable. Please try again later.",
    DraftFailureKind.MALFORMED_RESPONSE: "AI service returned invalid response. Please try again.",
    DraftFailureKind.GENERIC_FAILURE: "Failed to generate prescription draft. Please try again or create manually.",
}


class DraftGenerationError(Exception):
    """The one failure the gateway reports; `kind` says what went wrong."""

    def __init__(self, kind: DraftFailureKind, detail: Optional[str] = None):
        self.kind = kind
        self.detail = detail
        super().__init__(FAILURE_MESSAGES[kind])

    @property
    def message(self) -> str:
        return FAILURE_MESSAGES[self.kind]

    @property
    def retryable(self) -> bool:
        return self.kind in (
            DraftFailureKind.RATE_LIMITED,
            DraftFailureKind.UPSTREAM_UNAVAILABLE,
            DraftFailureKind.MALFORMED_RESPONSE,
        )

    def __repr__(self):
        return f"DraftGenerationError(kind={self.kind.value!r}, detail={self.detail!r})"
