# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas: API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from shift_reconciler.models.reconciliation import SortKey
from shift_reconciler.repositories.view_state_repository import PICKER_VIEW, REVIEW_VIEW

VIEW_PATTERN = f"^({REVIEW_VIEW}|{PICKER_VIEW})$"


# ── Assignment Schemas ──

class AssignRequest(BaseModel):
    slot_id: str = Field(..., min_length=1, description="Slot to assign into")
    member_id: str = Field(..., min_length=1, description="Member taken from the pool")
    note: Optional[str] = Field(default=None, max_length=1000)


class RosterRequest(BaseModel):
    """Desired roster for PUT .../slots/{slot_id}/roster."""
    member_ids: list[str] = Field(default_factory=list, description="Members the slot should hold")

    @field_validator("member_ids")
    @classmethod
    def strip_blank(cls, v: list[str]) -> list[str]:
        return [m.strip() for m in v if m and m.strip()]


# ── View State Schemas ──

class SortRequest(BaseModel):
    key: SortKey
    target_date_id: Optional[str] = None
    view: str = Field(default=REVIEW_VIEW, pattern=VIEW_PATTERN)


class RoleFilterRequest(BaseModel):
    role_ids: list[str] = Field(default_factory=list)
    view: str = Field(default=REVIEW_VIEW, pattern=VIEW_PATTERN)


class RoleFilterResponse(BaseModel):
    collection_id: str
    view: str
    role_ids: list[str]
