# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models: pure data structures, NO FastAPI dependency.
Every record coming back from a collaborator is validated into one of these
at the client boundary; the reconciliation core never sees raw payloads.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _calendar_date(value):
    # Upstream sends either "2025-01-01" or a full ISO timestamp
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    if isinstance(value, datetime):
        return value.date()
    return value


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ResponseValue(str, Enum):
    ATTENDING = "attending"
    ABSENT = "absent"
    UNDECIDED = "undecided"


class AssignmentStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class ActualAttendanceStatus(str, Enum):
    ATTENDED = "attended"
    ABSENT = "absent"


class Role(BaseModel):
    role_id: str
    name: str
    color: Optional[str] = None
    display_order: int = 0


class Member(BaseModel):
    member_id: str
    display_name: str
    role_ids: list[str] = Field(default_factory=list)
    is_active: bool = True

    @field_validator("role_ids", mode="before")
    @classmethod
    def null_roles_to_empty(cls, v):
        return v or []


class TargetDate(BaseModel):
    target_date_id: str
    target_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    display_order: int = 0

    @field_validator("target_date", mode="before")
    @classmethod
    def strip_time(cls, v):
        return _calendar_date(v)


class AttendanceCollection(BaseModel):
    collection_id: str
    title: str = ""
    target_type: str = "event"
    target_id: Optional[str] = None
    target_dates: list[TargetDate] = Field(default_factory=list)
    role_ids: list[str] = Field(default_factory=list)
    group_ids: list[str] = Field(default_factory=list)
    status: Optional[str] = None

    @field_validator("target_dates", "role_ids", "group_ids", mode="before")
    @classmethod
    def null_list_to_empty(cls, v):
        return v or []

    @field_validator("target_id", mode="before")
    @classmethod
    def blank_target(cls, v):
        return _blank_to_none(v)

    def sorted_target_dates(self) -> list[TargetDate]:
        return sorted(self.target_dates, key=lambda d: d.display_order)

    def find_target_date(self, target_date_id: str) -> Optional[TargetDate]:
        return next(
            (d for d in self.target_dates if d.target_date_id == target_date_id),
            None,
        )


class AttendanceResponse(BaseModel):
    response_id: str = ""
    member_id: str
    member_name: str = ""
    target_date_id: str
    response: ResponseValue
    note: str = ""
    available_from: Optional[str] = None
    available_to: Optional[str] = None
    responded_at: datetime

    @field_validator("note", mode="before")
    @classmethod
    def null_note(cls, v):
        return v or ""

    @field_validator("available_from", "available_to", mode="before")
    @classmethod
    def blank_window(cls, v):
        return _blank_to_none(v)


class BusinessDay(BaseModel):
    business_day_id: str
    event_id: Optional[str] = None
    target_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @field_validator("target_date", mode="before")
    @classmethod
    def strip_time(cls, v):
        return _calendar_date(v)


class ShiftSlot(BaseModel):
    slot_id: str
    business_day_id: str
    slot_name: str
    instance_id: Optional[str] = None
    instance_name: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    required_count: int = Field(..., ge=0)
    priority: int = 0
    assigned_count: Optional[int] = None

    @field_validator("instance_id", "instance_name", mode="before")
    @classmethod
    def blank_instance(cls, v):
        return _blank_to_none(v)


class ShiftAssignment(BaseModel):
    assignment_id: str
    slot_id: str
    member_id: str
    member_display_name: Optional[str] = None
    assignment_status: AssignmentStatus = AssignmentStatus.CONFIRMED
    note: Optional[str] = None
    assigned_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @property
    def is_confirmed(self) -> bool:
        return self.assignment_status == AssignmentStatus.CONFIRMED


class ActualAttendanceDate(BaseModel):
    """A past (or, on request, future) business day; its id is the business_day_id."""

    target_date_id: str
    target_date: date
    display_order: int = 0

    @field_validator("target_date", mode="before")
    @classmethod
    def strip_time(cls, v):
        return _calendar_date(v)


class MemberActualAttendance(BaseModel):
    member_id: str
    member_name: str = ""
    attendance_map: dict[str, ActualAttendanceStatus] = Field(default_factory=dict)

    @field_validator("attendance_map", mode="before")
    @classmethod
    def null_map(cls, v):
        return v or {}


class ActualAttendance(BaseModel):
    """Confirmed assignments per member and business day, as reported upstream."""

    target_dates: list[ActualAttendanceDate] = Field(default_factory=list)
    member_attendances: list[MemberActualAttendance] = Field(default_factory=list)

    @field_validator("target_dates", "member_attendances", mode="before")
    @classmethod
    def null_list_to_empty(cls, v):
        return v or []
