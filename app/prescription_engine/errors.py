# app/prescription_engine/errors.py
"""
Typed failures returned to the HTTP layer.
Each carries a status code and a stable category the UI can switch on.
"""
from typing import Any, Dict, Optional


class PrescriptionServiceError(Exception):
    status_code: int = 500
    category: str = "error"

    def __init__(self, message: str, reason: Optional[str] = None, cause: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.cause = cause

    def to_payload(self) -> Dict[str, Any]:
        payload = {"status": "fail", "category": self.category, "message": self.message}
        if self.reason:
            payload["reason"] = self.reason
        if self.cause:
            payload["cause"] = self.cause
        return payload


class NotFoundError(PrescriptionServiceError):
    status_code = 404
    category = "not_found"


class ForbiddenError(PrescriptionServiceError):
    status_code = 403
    category = "forbidden"


class ConflictError(PrescriptionServiceError):
    status_code = 409
    category = "conflict"


class InvalidInputError(PrescriptionServiceError):
    status_code = 422
    category = "validation"


class UpstreamFailureError(PrescriptionServiceError):
    status_code = 503
    category = "upstream_failure"
