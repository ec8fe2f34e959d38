# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""HTTP client for actual attendance (confirmed shifts per business day)."""

from shift_reconciler.models.domain import ActualAttendance
from shift_reconciler.services.api_client import ApiClient


class ActualAttendanceClient(ApiClient):
    SERVICE_LABEL = "actual_attendance"

    def get_recent(
        self, event_id: str, limit: int, include_future: bool = False
    ) -> ActualAttendance:
        params = {
            "event_id": event_id,
            "limit": str(limit),
            "include_future": "true" if include_future else "false",
        }
        payload = self._request("GET", "/api/v1/actual-attendance", params=params)
        return self._parse_one(payload or {}, ActualAttendance)
