# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Session context: the caller identity forwarded to every collaborator call.
Built once per inbound request and passed explicitly into client construction.
"""

from typing import Optional

from pydantic import BaseModel

from shift_reconciler.core.config import settings


class SessionContext(BaseModel):
    """Credentials and tracing id of the acting admin."""

    auth_token: Optional[str] = None
    tenant_id: Optional[str] = None
    member_id: Optional[str] = None
    request_id: Optional[str] = None

    def headers(self) -> dict[str, str]:
        """Bearer token takes precedence over the tenant/member header pair."""
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self.request_id:
            headers["X-Request-ID"] = self.request_id
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
            return headers
        tenant_id = self.tenant_id or settings.DEFAULT_TENANT_ID
        if tenant_id:
            headers["X-Tenant-ID"] = tenant_id
        if self.member_id:
            headers["X-Member-ID"] = self.member_id
        return headers

    @classmethod
    def from_headers(cls, headers, request_id: Optional[str] = None) -> "SessionContext":
        authorization = headers.get("Authorization") or headers.get("authorization") or ""
        token = None
        if authorization.lower().startswith("bearer "):
            token = authorization[7:].strip() or None
        return cls(
            auth_token=token,
            tenant_id=headers.get("X-Tenant-ID"),
            member_id=headers.get("X-Member-ID"),
            request_id=request_id or headers.get("X-Request-ID"),
        )
