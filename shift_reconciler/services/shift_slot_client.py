# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""HTTP client for the Shift Slot Service."""

from shift_reconciler.models.domain import ShiftSlot
from shift_reconciler.services.api_client import ApiClient


class ShiftSlotClient(ApiClient):
    SERVICE_LABEL = "shift_slot"

    def list_slots(self, business_day_id: str) -> list[ShiftSlot]:
        payload = self._request("GET", f"/api/v1/business-days/{business_day_id}/shift-slots")
        return self._parse_list(payload, "shift_slots", ShiftSlot)
