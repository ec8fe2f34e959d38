# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Error taxonomy for the reconciliation engine.

    ValidationError  local check failed, nothing was sent upstream
    ConflictError    the Assignment Service reported a capacity race
    NotFoundError    a referenced resource does not exist upstream
    TransientError   anything else (network, timeouts, 5xx, bad payloads)

Controllers map each class to an HTTP status; services never retry.
"""

from typing import Any, Optional


class ReconciliationError(Exception):
    """Base class carrying a machine-readable code and optional details."""

    code: str = "ERR_RECONCILIATION"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        upstream_status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details or {}
        self.upstream_status = upstream_status

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ReconciliationError):
    """Rejected locally before any network call."""

    code = "ERR_INVALID_REQUEST"
    status_code = 400


class ConflictError(ReconciliationError):
    """Slot capacity was taken by another actor. Refresh before retrying."""

    code = "ERR_CONFLICT"
    status_code = 409


class NotFoundError(ReconciliationError):
    code = "ERR_NOT_FOUND"
    status_code = 404


class TransientError(ReconciliationError):
    """Network failure or unexpected upstream response, surfaced verbatim."""

    code = "ERR_UPSTREAM"
    status_code = 502
