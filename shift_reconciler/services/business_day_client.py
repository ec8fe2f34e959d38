# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""HTTP client for the Business Day Service."""

from shift_reconciler.models.domain import BusinessDay
from shift_reconciler.services.api_client import ApiClient


class BusinessDayClient(ApiClient):
    SERVICE_LABEL = "business_day"

    def list_business_days(self, event_id: str) -> list[BusinessDay]:
        payload = self._request("GET", f"/api/v1/events/{event_id}/business-days")
        return self._parse_list(payload, "business_days", BusinessDay)
