# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""HTTP client for the Attendance Service (collections and their responses)."""

from shift_reconciler.models.domain import AttendanceCollection, AttendanceResponse
from shift_reconciler.services.api_client import ApiClient


class AttendanceClient(ApiClient):
    SERVICE_LABEL = "attendance"

    def get_collection(self, collection_id: str) -> AttendanceCollection:
        payload = self._request("GET", f"/api/v1/attendance/collections/{collection_id}")
        return self._parse_one(payload, AttendanceCollection)

    def get_responses(self, collection_id: str) -> list[AttendanceResponse]:
        payload = self._request(
            "GET", f"/api/v1/attendance/collections/{collection_id}/responses"
        )
        return self._parse_list(payload, "responses", AttendanceResponse)
