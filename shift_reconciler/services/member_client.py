# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""HTTP client for the Member/Role Service."""

from shift_reconciler.models.domain import Member, Role
from shift_reconciler.services.api_client import ApiClient


class MemberClient(ApiClient):
    SERVICE_LABEL = "member"

    def list_active_members(self) -> list[Member]:
        payload = self._request("GET", "/api/v1/members", params={"is_active": "true"})
        return self._parse_list(payload, "members", Member)

    def list_roles(self) -> list[Role]:
        payload = self._request("GET", "/api/v1/roles")
        roles = self._parse_list(payload, "roles", Role)
        return sorted(roles, key=lambda r: r.display_order)
