# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
HTTP client for the Assignment Service.
create() raises ConflictError when the slot filled up since the caller's
last refresh; callers must not retry it blindly.
"""

from typing import Optional

from shift_reconciler.models.domain import AssignmentStatus, ShiftAssignment
from shift_reconciler.services.api_client import ApiClient


class AssignmentClient(ApiClient):
    SERVICE_LABEL = "assignment"

    def list_assignments(
        self,
        slot_id: Optional[str] = None,
        member_id: Optional[str] = None,
        status: Optional[AssignmentStatus] = AssignmentStatus.CONFIRMED,
    ) -> list[ShiftAssignment]:
        params = {
            "slot_id": slot_id,
            "member_id": member_id,
            "assignment_status": AssignmentStatus(status).value if status else None,
        }
        payload = self._request("GET", "/api/v1/shift-assignments", params=params)
        return self._parse_list(payload, "assignments", ShiftAssignment)

    def create(
        self,
        slot_id: str,
        member_id: str,
        note: Optional[str] = None,
    ) -> ShiftAssignment:
        body = {"slot_id": slot_id, "member_id": member_id}
        if note:
            body["note"] = note
        payload = self._request("POST", "/api/v1/shift-assignments", json=body)
        return self._parse_one(payload, ShiftAssignment)

    def cancel(self, assignment_id: str) -> None:
        self._request("DELETE", f"/api/v1/shift-assignments/{assignment_id}")
